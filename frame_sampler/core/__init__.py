"""Core capture pipeline."""

from .driver import CancelToken, CaptureDriver, capture, frame_filename
from .pipeline import sample_video
from .planner import plan
from .surface import FrameCanvas, MediaSource, VideoCaptureSurface

__all__ = [
    "CancelToken",
    "CaptureDriver",
    "FrameCanvas",
    "MediaSource",
    "VideoCaptureSurface",
    "capture",
    "frame_filename",
    "plan",
    "sample_video",
]
