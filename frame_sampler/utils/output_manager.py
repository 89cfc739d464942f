"""Writing captured frames and run summaries to disk."""

import json
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Union

from frame_sampler.logging.logger import get_logger
from frame_sampler.models import CapturedFrame, CaptureOutcome, CapturePlan


def resolve_output_dir(base_dir: Union[str, Path], video_path: Union[str, Path]) -> Path:
    """Create a unique, timestamped output folder for one video."""
    base_dir = Path(base_dir)
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    out_dir = base_dir / f"{Path(video_path).stem}_{timestamp}"

    counter = 1
    candidate = out_dir
    while candidate.exists():
        candidate = out_dir.parent / f"{out_dir.name}_{counter}"
        counter += 1

    candidate.mkdir(parents=True)
    return candidate


def save_frames(outcomes: Iterable[CaptureOutcome], output_dir: Union[str, Path]) -> List[Path]:
    """Write every captured frame under its suggested name.

    Failed timestamps have nothing to write and are skipped.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths: List[Path] = []
    for outcome in outcomes:
        if not isinstance(outcome, CapturedFrame):
            continue
        path = output_dir / outcome.suggested_name
        path.write_bytes(outcome.image)
        paths.append(path)

    get_logger().debug(f"Saved {len(paths)} frames to {output_dir}")
    return paths


def write_summary(
    plan: CapturePlan,
    outcomes: List[CaptureOutcome],
    output_dir: Union[str, Path],
    video_path: Union[str, Path],
) -> Path:
    """Write summary.json describing the request and each outcome."""
    output_dir = Path(output_dir)
    summary = {
        "video_path": str(video_path),
        "created_at": datetime.now().isoformat(),
        "request": {
            "start": plan.start,
            "range": plan.range,
            "step": plan.step,
            "duration": plan.duration,
        },
        "planned": len(plan),
        "captured": sum(1 for o in outcomes if o.ok),
        "failed": [
            {"index": o.index, "timestamp": o.timestamp, "reason": o.reason}
            for o in outcomes
            if not o.ok
        ],
        "frames": [
            {"index": o.index, "timestamp": o.timestamp, "file": o.suggested_name}
            for o in outcomes
            if o.ok
        ],
    }

    summary_path = output_dir / "summary.json"
    with open(summary_path, 'w', encoding='utf-8') as f:
        json.dump(summary, f, indent=2, ensure_ascii=False)
    return summary_path
