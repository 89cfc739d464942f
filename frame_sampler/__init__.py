"""Frame Sampler - capture still frames from a video over a time window."""

from .cli import main
from .core import CancelToken, CaptureDriver, capture, plan, sample_video
from .exceptions import (
    CaptureFailed,
    ConfigError,
    EncodeFailed,
    FrameSamplerError,
    NotPausedError,
    PlanError,
    SurfaceBusyError,
    VideoFileError,
)

__version__ = "1.0.0"
__all__ = [
    "main",
    "capture",
    "plan",
    "sample_video",
    "CancelToken",
    "CaptureDriver",
    "FrameSamplerError",
    "VideoFileError",
    "ConfigError",
    "PlanError",
    "NotPausedError",
    "SurfaceBusyError",
    "CaptureFailed",
    "EncodeFailed",
]
