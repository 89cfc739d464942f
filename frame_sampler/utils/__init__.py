"""Utilities for frame-sampler module."""

from .time_utils import format_timestamp, parse_time_value
from .output_manager import resolve_output_dir, save_frames, write_summary

__all__ = [
    "format_timestamp",
    "parse_time_value",
    "resolve_output_dir",
    "save_frames",
    "write_summary",
]
