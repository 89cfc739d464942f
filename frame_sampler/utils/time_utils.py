"""Time parsing and formatting utilities."""

from frame_sampler.exceptions import FrameSamplerError


def parse_time_value(value: str, *, allow_zero: bool = False) -> float:
    """Parse time in seconds from user string."""

    if value is None:
        raise FrameSamplerError("Time value not specified")

    normalized = value.strip().replace(" ", "").replace(",", ".").lower()

    if not normalized:
        raise FrameSamplerError("Empty time value")

    if ":" in normalized:
        parts = normalized.split(":")
        if len(parts) != 3:
            raise FrameSamplerError(
                f"Invalid time format '{value}'. Expected HH:MM:SS.mmm"
            )
        hours_str, minutes_str, seconds_str = parts
        try:
            hours = int(hours_str)
            minutes = int(minutes_str)
            seconds = float(seconds_str)
        except ValueError as exc:
            raise FrameSamplerError(f"Failed to parse time '{value}'") from exc
        if minutes >= 60 or minutes < 0:
            raise FrameSamplerError(f"Minutes out of range 0-59 in value '{value}'")
        if seconds < 0 or seconds >= 60:
            raise FrameSamplerError(f"Seconds out of range 0-59 in value '{value}'")
        total_seconds = hours * 3600 + minutes * 60 + seconds
    else:
        suffix = None
        if normalized.endswith("ms"):
            suffix = "ms"
            number_part = normalized[:-2]
        elif normalized.endswith("s"):
            suffix = "s"
            number_part = normalized[:-1]
        else:
            number_part = normalized

        if not number_part:
            raise FrameSamplerError(f"Invalid time format '{value}'")

        try:
            number = float(number_part)
        except ValueError as exc:
            raise FrameSamplerError(f"Failed to parse number in '{value}'") from exc

        total_seconds = number / 1000.0 if suffix == "ms" else number

    if total_seconds < 0 or (total_seconds == 0 and not allow_zero):
        raise FrameSamplerError("Time must be > 0")

    return total_seconds


def format_timestamp(seconds: float) -> str:
    """Format time as MM:SS.mmm (HH:MM:SS.mmm past the hour)."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    if hours:
        return f"{hours:02d}:{minutes:02d}:{secs:06.3f}"
    return f"{minutes:02d}:{secs:06.3f}"
