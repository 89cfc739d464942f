"""Configuration for frame-sampler."""

from .sampler_config import (
    CaptureConfig,
    LimitsConfig,
    OutputConfig,
    SamplerConfig,
    create_default_config_file,
    get_config,
    load_config,
    set_config,
)

__all__ = [
    "CaptureConfig",
    "LimitsConfig",
    "OutputConfig",
    "SamplerConfig",
    "create_default_config_file",
    "get_config",
    "load_config",
    "set_config",
]
