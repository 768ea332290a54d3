"""Parsing and formatting of transcript timestamps."""

import math


def _to_number(part: str) -> float | None:
    part = part.strip()
    if not part:
        return 0.0
    try:
        value = float(part)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def relative_timestamp_seconds(timestamp: str) -> float:
    """
    Converts a service-relative ``MM:SS`` timestamp into seconds.

    Components are read right to left as seconds, minutes and hours. A
    component that is not a number counts as 0 rather than failing the whole
    timestamp, so ``"ab:30"`` yields 30.
    """
    if not isinstance(timestamp, str):
        return 0.0
    parts = timestamp.strip().split(":")[-3:]
    multipliers = (1, 60, 3600)
    total = 0.0
    for multiplier, part in zip(multipliers, reversed(parts)):
        value = _to_number(part)
        total += (value or 0.0) * multiplier
    return max(total, 0.0)


def parse_time_string_to_seconds(time_str: str) -> float:
    """
    Parses an edited time string back into seconds.

    Accepts ``SS``, ``MM:SS`` and ``HH:MM:SS``. Returns 0 when any component
    is not a number or the shape is unrecognised; never raises.
    """
    if not isinstance(time_str, str):
        return 0.0
    values = [_to_number(part) for part in time_str.strip().split(":")]
    if any(value is None for value in values):
        return 0.0
    if len(values) == 3:
        return values[0] * 3600 + values[1] * 60 + values[2]
    if len(values) == 2:
        return values[0] * 60 + values[1]
    if len(values) == 1:
        return values[0]
    return 0.0


def format_time(seconds: float) -> str:
    """Formats seconds as ``MM:SS``, or ``H:MM:SS`` past the first hour."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_srt_time(seconds: float) -> str:
    """Formats seconds as an SRT cue time, ``HH:MM:SS,mmm``."""
    total_ms = int(math.floor(seconds * 1000))
    ms = total_ms % 1000
    total_seconds = int(math.floor(seconds))
    secs = total_seconds % 60
    minutes = (total_seconds // 60) % 60
    hours = total_seconds // 3600
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{ms:03d}"
