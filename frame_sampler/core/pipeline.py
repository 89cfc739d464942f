"""End-to-end sampling of a local video file."""

from pathlib import Path
from typing import Optional, Union

from frame_sampler.config.sampler_config import SamplerConfig, get_config
from frame_sampler.core.driver import CancelToken, CaptureDriver, OutcomeCallback
from frame_sampler.core.planner import plan
from frame_sampler.core.surface import VideoCaptureSurface
from frame_sampler.logging.logger import get_logger
from frame_sampler.models import SamplingResult
from frame_sampler.utils.output_manager import resolve_output_dir, save_frames, write_summary


async def sample_video(
    video_path: Union[str, Path],
    start: float,
    range_seconds: float,
    step: float,
    *,
    base_name: Optional[str] = None,
    output_dir: Optional[Union[str, Path]] = None,
    config: Optional[SamplerConfig] = None,
    cancel_token: Optional[CancelToken] = None,
    on_outcome: Optional[OutcomeCallback] = None,
) -> SamplingResult:
    """Open ``video_path``, capture the planned frames and write them out.

    ``output_dir`` is used as-is when given; otherwise a timestamped folder
    is created under the configured base output directory.
    """
    config = config or get_config()
    logger = get_logger()
    video_path = Path(video_path)
    base_name = base_name or video_path.stem

    async with VideoCaptureSurface(video_path) as surface:
        info = surface.info
        logger.info(
            f"Opened {video_path.name}: {info.width}x{info.height}, "
            f"{info.fps:.2f} fps, {info.duration:.3f}s"
        )

        capture_plan = plan(start, range_seconds, step, surface.duration)
        if not len(capture_plan):
            logger.warning(f"No timestamps between {start}s and {start + range_seconds}s fall inside the video")

        driver = CaptureDriver.from_config(config.capture)
        outcomes = await driver.capture(
            surface,
            capture_plan,
            base_name,
            cancel_token=cancel_token,
            on_outcome=on_outcome,
        )

    if output_dir is None:
        output_dir = resolve_output_dir(config.output.base_output_dir, video_path)
    output_dir = Path(output_dir)

    saved_paths = save_frames(outcomes, output_dir)
    if config.output.write_summary:
        write_summary(capture_plan, outcomes, output_dir, video_path)

    return SamplingResult(outcomes=outcomes, saved_paths=saved_paths, output_dir=output_dir)
