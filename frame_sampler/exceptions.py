"""Exceptions for frame-sampler module."""

from typing import Optional


class FrameSamplerError(Exception):
    """Base exception for frame-sampler."""
    pass


class VideoFileError(FrameSamplerError):
    """Video file operation error."""
    pass


class ConfigError(FrameSamplerError):
    """Configuration error."""
    pass


class PlanError(FrameSamplerError):
    """Invalid start/range/step/duration combination."""
    pass


class NotPausedError(FrameSamplerError):
    """Capture requested while the surface is playing."""
    pass


class SurfaceBusyError(FrameSamplerError):
    """Another capture run is already in flight on the surface."""
    pass


class CaptureFailed(FrameSamplerError):
    """A single timestamp could not be captured."""

    def __init__(self, message: str, timestamp: Optional[float] = None):
        super().__init__(message)
        self.timestamp = timestamp


class EncodeFailed(CaptureFailed):
    """The captured pixels could not be encoded."""
    pass
