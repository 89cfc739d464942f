"""Unified configuration management for frame sampling."""

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional, Union
from pathlib import Path
import json
import os
from dotenv import load_dotenv

from frame_sampler.config.config import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_LOG_LEVEL,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RESTORE_TIMEOUT,
    DEFAULT_SETTLE_TIMEOUT,
    LOG_LEVELS,
    MAX_RANGE,
    MAX_STEP,
    MIN_RANGE,
    MIN_STEP,
)
from frame_sampler.exceptions import ConfigError


def _check_number(name: str, value: Any, *, allow_none: bool = False) -> None:
    if value is None and allow_none:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number, got {value!r}")


def _check_log_level(value: Any) -> str:
    if not isinstance(value, str) or value.upper() not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
    return value.upper()


@dataclass
class CaptureConfig:
    """Capture driver configuration."""
    quality: float = DEFAULT_JPEG_QUALITY
    settle_timeout: Optional[float] = DEFAULT_SETTLE_TIMEOUT
    restore_timeout: Optional[float] = DEFAULT_RESTORE_TIMEOUT

    def __post_init__(self):
        _check_number("quality", self.quality)
        _check_number("settle_timeout", self.settle_timeout, allow_none=True)
        _check_number("restore_timeout", self.restore_timeout, allow_none=True)
        if not 0 < self.quality <= 1:
            raise ConfigError(f"quality must be in (0, 1], got {self.quality}")
        for name in ("settle_timeout", "restore_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ConfigError(f"{name} must be > 0 or null, got {value}")


@dataclass
class LimitsConfig:
    """Usability guards applied to interactive requests."""
    enforce: bool = True
    min_range: float = MIN_RANGE
    max_range: float = MAX_RANGE
    min_step: float = MIN_STEP
    max_step: float = MAX_STEP

    def __post_init__(self):
        if not isinstance(self.enforce, bool):
            raise ConfigError(f"enforce must be true or false, got {self.enforce!r}")
        for name in ("min_range", "max_range", "min_step", "max_step"):
            _check_number(name, getattr(self, name))

    def check(self, range_seconds: float, step_seconds: float) -> None:
        """Raise ConfigError when range or step fall outside the guards."""
        if not self.enforce:
            return
        if not self.min_range <= range_seconds <= self.max_range:
            raise ConfigError(
                f"Range {range_seconds}s outside [{self.min_range}, {self.max_range}]"
            )
        if not self.min_step <= step_seconds <= self.max_step:
            raise ConfigError(
                f"Step {step_seconds}s outside [{self.min_step}, {self.max_step}]"
            )


@dataclass
class OutputConfig:
    """Output configuration."""
    base_output_dir: str = DEFAULT_OUTPUT_DIR
    write_summary: bool = True

    def __post_init__(self):
        if not isinstance(self.base_output_dir, str):
            raise ConfigError(f"base_output_dir must be a string, got {self.base_output_dir!r}")
        if not isinstance(self.write_summary, bool):
            raise ConfigError(f"write_summary must be true or false, got {self.write_summary!r}")


@dataclass
class SamplerConfig:
    """Main configuration container."""
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: Optional[str] = None

    def __post_init__(self):
        self.log_level = _check_log_level(self.log_level)

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> 'SamplerConfig':
        """Load configuration from JSON file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SamplerConfig':
        """Create configuration from dictionary."""
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a JSON object")
        _reject_unknown_keys("configuration", data, {f.name for f in fields(cls)})

        return cls(
            capture=_build_section(CaptureConfig, 'capture', data),
            limits=_build_section(LimitsConfig, 'limits', data),
            output=_build_section(OutputConfig, 'output', data),
            log_level=data.get('log_level', DEFAULT_LOG_LEVEL),
            log_dir=data.get('log_dir'),
        )

    @classmethod
    def from_env(cls) -> 'SamplerConfig':
        """Load configuration from environment variables."""
        load_dotenv()

        config = cls()

        timeout = os.getenv("FRAME_SAMPLER_SETTLE_TIMEOUT")
        if timeout:
            config.capture.settle_timeout = _parse_timeout(timeout, "FRAME_SAMPLER_SETTLE_TIMEOUT")

        quality = os.getenv("FRAME_SAMPLER_QUALITY")
        if quality:
            try:
                config.capture = CaptureConfig(
                    quality=float(quality),
                    settle_timeout=config.capture.settle_timeout,
                    restore_timeout=config.capture.restore_timeout,
                )
            except ValueError as exc:
                raise ConfigError(f"FRAME_SAMPLER_QUALITY is not a number: {quality}") from exc

        config.output.base_output_dir = os.getenv("FRAME_SAMPLER_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)
        config.log_level = _check_log_level(os.getenv("FRAME_SAMPLER_LOG_LEVEL", DEFAULT_LOG_LEVEL))
        config.log_dir = os.getenv("FRAME_SAMPLER_LOG_DIR") or None

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def save_to_file(self, config_path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)


def _reject_unknown_keys(where: str, values: Dict[str, Any], known: set) -> None:
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown key(s) in {where}: {', '.join(unknown)}")


def _build_section(section_cls, name: str, data: Dict[str, Any]):
    values = data.get(name, {})
    if not isinstance(values, dict):
        raise ConfigError(f"Section '{name}' must be an object")
    _reject_unknown_keys(f"'{name}'", values, {f.name for f in fields(section_cls)})
    return section_cls(**values)


def _parse_timeout(value: str, name: str) -> Optional[float]:
    if value.strip().lower() in ("none", "null", "off"):
        return None
    try:
        seconds = float(value)
    except ValueError as exc:
        raise ConfigError(f"{name} is not a number: {value}") from exc
    if seconds <= 0:
        raise ConfigError(f"{name} must be > 0")
    return seconds


# Global configuration instance
_config_instance: Optional[SamplerConfig] = None


def get_config() -> SamplerConfig:
    """Get or create the global configuration instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = SamplerConfig.from_env()
    return _config_instance


def set_config(config: SamplerConfig) -> None:
    """Set the global configuration instance."""
    global _config_instance
    _config_instance = config


def load_config(config_path: Optional[Union[str, Path]] = None) -> SamplerConfig:
    """Load configuration from file or environment."""
    if config_path:
        config = SamplerConfig.from_file(config_path)
    else:
        config = SamplerConfig.from_env()

    set_config(config)
    return config


def create_default_config_file(config_path: Union[str, Path] = "config/default_config.json") -> None:
    """Create a default configuration file."""
    config = SamplerConfig()
    config.save_to_file(config_path)
    print(f"Default configuration saved to: {config_path}")
