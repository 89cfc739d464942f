"""CLI interface for frame-sampler."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import SamplerConfig, load_config
from .config.config import LOG_LEVELS, SUPPORTED_VIDEO_FORMATS
from .core import sample_video
from .exceptions import FrameSamplerError
from .logging.logger import setup_logging
from .utils import format_timestamp, parse_time_value


def build_arg_parser() -> argparse.ArgumentParser:
    """Build command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="frame-sampler",
        description="Capture still frames from a video over a time window",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Five frames from 2.0s to 4.0s every 0.5s
  frame-sampler clip.mp4 --start 2 --range 2 --step 0.5

  # Timecode start, custom file prefix and output folder
  frame-sampler clip.mp4 --start 00:01:05.250 --range 3 --step 200ms --name intro -o shots/
        """,
    )
    parser.add_argument("video_path", help="Path to video file")
    parser.add_argument(
        "--start",
        default="0",
        help="Start time (e.g.: 12.5, 12.5s, 800ms, 00:00:12.5; default: 0)",
    )
    parser.add_argument(
        "--range",
        dest="range_value",
        default="1",
        help="Length of the capture window (default: 1s)",
    )
    parser.add_argument(
        "--step",
        default="0.5",
        help="Interval between frames (default: 0.5s)",
    )
    parser.add_argument(
        "--name", "-n",
        default=None,
        help="File name prefix (default: video file name)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory (default: auto-generated under the configured output dir)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each seek to settle",
    )
    parser.add_argument(
        "--no-limits",
        action="store_true",
        help="Allow range/step outside the interactive guard ranges",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to configuration file (JSON format)",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Set logging level (default: from config)",
    )
    return parser


def _load_config(parser: argparse.ArgumentParser, args: argparse.Namespace) -> SamplerConfig:
    try:
        config = load_config(args.config)
    except FrameSamplerError as exc:
        parser.error(str(exc))

    if args.timeout is not None:
        if args.timeout <= 0:
            parser.error("--timeout must be > 0")
        config.capture.settle_timeout = args.timeout
    if args.no_limits:
        config.limits.enforce = False
    if args.log_level:
        config.log_level = args.log_level
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI function."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    video_path = Path(args.video_path)
    if not video_path.exists():
        parser.error(f"Video file '{video_path}' does not exist")
    if video_path.suffix.lower() not in SUPPORTED_VIDEO_FORMATS:
        print(f"ℹ️ Unrecognized extension '{video_path.suffix}', trying anyway.", file=sys.stderr)

    try:
        start_seconds = parse_time_value(args.start, allow_zero=True)
    except FrameSamplerError as exc:
        parser.error(f"Error in --start: {exc}")

    try:
        range_seconds = parse_time_value(args.range_value)
    except FrameSamplerError as exc:
        parser.error(f"Error in --range: {exc}")

    try:
        step_seconds = parse_time_value(args.step)
    except FrameSamplerError as exc:
        parser.error(f"Error in --step: {exc}")

    config = _load_config(parser, args)
    try:
        config.limits.check(range_seconds, step_seconds)
    except FrameSamplerError as exc:
        parser.error(f"{exc} (use --no-limits to override)")

    logger = setup_logging(config.log_level, config.log_dir)

    try:
        result = asyncio.run(
            sample_video(
                video_path,
                start_seconds,
                range_seconds,
                step_seconds,
                base_name=args.name,
                output_dir=args.output,
                config=config,
            )
        )
    except FrameSamplerError as exc:
        logger.error(f"❌ Failed frame sampling: {exc}")
        return 1

    print(f"Done. Saved {len(result.saved_paths)} files to '{result.output_dir}'.")
    failed = result.failed_timestamps
    if failed:
        stamps = ", ".join(format_timestamp(t) for t in failed)
        print(f"⚠️ {len(failed)} timestamps could not be captured: {stamps}", file=sys.stderr)

    return 0
