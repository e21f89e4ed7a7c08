"""SRT timecode arithmetic."""

import re

TIMECODE_PATTERN = r"\d{2}:\d{2}:\d{2},\d{3}"

_TIMECODE_RE = re.compile(r"(\d{2}):(\d{2}):(\d{2}),(\d{3})")


def timecode_to_seconds(timecode: str) -> float:
    """Parse an SRT timecode to seconds.

    Args:
        timecode: SRT timecode format "HH:MM:SS,mmm"

    Returns:
        Time in seconds
    """
    match = _TIMECODE_RE.fullmatch(timecode.strip())
    if not match:
        raise ValueError(f"Invalid timecode format: {timecode}")

    hours, minutes, seconds, millis = match.groups()
    return (
        int(hours) * 3600
        + int(minutes) * 60
        + int(seconds)
        + int(millis) / 1000
    )


def calculate_duration(start_time: str, end_time: str) -> float:
    """Seconds between two timecodes. Overlaps yield a non-positive value."""
    return timecode_to_seconds(end_time) - timecode_to_seconds(start_time)
