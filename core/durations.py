"""
Duration strings for pose steps.

Durations are authored as "MM:SS" or "HH:MM:SS" and stored internally as
whole seconds.
"""
import math


def parse_duration(text: str) -> int:
    """
    Convert a duration string to seconds.

    Args:
        text: "MM:SS" or "HH:MM:SS" (fields are non-negative integers)

    Returns:
        Total seconds, or 0 for any malformed input

    Example:
        >>> parse_duration("1:30")
        90
        >>> parse_duration("1:00:00")
        3600
    """
    if not isinstance(text, str):
        return 0

    parts = text.strip().split(":")
    if len(parts) not in (2, 3):
        return 0

    values = []
    for part in parts:
        part = part.strip()
        if not part.isdecimal():
            return 0
        values.append(int(part))

    if len(values) == 3:
        hours, minutes, seconds = values
        return hours * 3600 + minutes * 60 + seconds

    minutes, seconds = values
    return minutes * 60 + seconds


def format_duration(seconds) -> str:
    """
    Convert seconds to "MM:SS", or "HH:MM:SS" from one hour up.

    Args:
        seconds: Whole seconds (fractions are floored, negatives clamp to 0)

    Returns:
        Zero-padded duration string

    Example:
        >>> format_duration(90)
        '01:30'
        >>> format_duration(3600)
        '01:00:00'
    """
    total = max(0, int(math.floor(seconds)))
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60

    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
