"""Data models for frame-sampler module."""

import base64
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple, Union

from frame_sampler.config.config import IMAGE_MIME_TYPE


@dataclass(frozen=True)
class CapturePlan:
    """Ordered, strictly increasing timestamps to sample."""
    timestamps: Tuple[float, ...]
    start: float
    range: float
    step: float
    duration: float

    def __len__(self) -> int:
        return len(self.timestamps)

    def __iter__(self) -> Iterator[float]:
        return iter(self.timestamps)

    def __getitem__(self, index: int) -> float:
        return self.timestamps[index]


@dataclass
class CapturedFrame:
    """Successfully captured still image."""
    timestamp: float
    index: int
    image: bytes
    suggested_name: str
    ok: bool = field(default=True, init=False)

    @property
    def data_url(self) -> str:
        encoded = base64.b64encode(self.image).decode("ascii")
        return f"data:{IMAGE_MIME_TYPE};base64,{encoded}"


@dataclass
class CaptureFailure:
    """Timestamp that produced no image."""
    timestamp: float
    index: int
    reason: str
    ok: bool = field(default=False, init=False)


CaptureOutcome = Union[CapturedFrame, CaptureFailure]


@dataclass
class PipelineRun:
    """Transient state of one capture invocation."""
    surface: Any
    plan: CapturePlan
    restore_position: float
    outcomes: List[CaptureOutcome] = field(default_factory=list)
    cancelled: bool = False
    # timed-out requests whose late settle signal has not arrived yet
    stale_signals: Counter = field(default_factory=Counter)

    @property
    def frames(self) -> List[CapturedFrame]:
        return [o for o in self.outcomes if isinstance(o, CapturedFrame)]

    @property
    def failures(self) -> List[CaptureFailure]:
        return [o for o in self.outcomes if isinstance(o, CaptureFailure)]


@dataclass
class VideoInfo:
    """Video file information."""
    path: Path
    duration: float
    fps: float
    total_frames: int
    width: int
    height: int


@dataclass
class SamplingResult:
    """Result of sampling one video file."""
    outcomes: List[CaptureOutcome]
    saved_paths: List[Path]
    output_dir: Optional[Path]

    @property
    def frames_captured(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed_timestamps(self) -> List[float]:
        return [o.timestamp for o in self.outcomes if not o.ok]
