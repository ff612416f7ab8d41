"""Duration formatting and parsing helpers.

Durations are whole minutes throughout timetally.
"""

from __future__ import annotations

import re

__all__ = [
    "DurationParseError",
    "minutes_to_hhmm",
    "parse_hhmm_to_minutes",
    "summarize_minutes",
    "timer_minutes",
]

_HHMM_PATTERN = re.compile(r"^(\d{1,3}):([0-5]\d)$")

MS_PER_MINUTE = 60_000


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed."""


def _pad2(value: int) -> str:
    return str(value).zfill(2)


def minutes_to_hhmm(minutes: int) -> str:
    """Format minutes as ``HH:MM``.

    Hours are not wrapped at 24 and grow past two digits when needed.

    Example
    -------
    >>> minutes_to_hhmm(90)
    '01:30'
    >>> minutes_to_hhmm(1440)
    '24:00'
    """
    hours, mins = divmod(minutes, 60)
    return f"{_pad2(hours)}:{_pad2(mins)}"


def summarize_minutes(minutes: int) -> str:
    """Human summary of a duration: ``45m``, ``2h`` or ``1h 30m``."""
    hours, mins = divmod(minutes, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def parse_hhmm_to_minutes(raw: str) -> int:
    """Parse an ``hh:mm`` duration into minutes.

    Parameters
    ----------
    raw
        Duration string, one to three hour digits and two minute digits
        (e.g. "1:05", "01:30", "120:00")

    Returns
    -------
    int
        Total minutes

    Raises
    ------
    DurationParseError
        If the string does not match ``hh:mm``
    """
    match = _HHMM_PATTERN.match(raw.strip())
    if not match:
        raise DurationParseError("Use format hh:mm (e.g., 01:30)")

    hours, mins = int(match.group(1)), int(match.group(2))
    return hours * 60 + mins


def timer_minutes(start_ms: int, end_ms: int) -> int:
    """Convert a timer session to whole minutes.

    Rounds half up to the nearest minute; any positive session counts as at
    least one minute.

    Raises
    ------
    ValueError
        If ``end_ms`` is not after ``start_ms``
    """
    if end_ms <= start_ms:
        raise ValueError("Invalid startMs/endMs: end must be after start")

    elapsed = end_ms - start_ms
    # Integer half-up: round() would use banker's rounding.
    minutes = (elapsed + MS_PER_MINUTE // 2) // MS_PER_MINUTE
    return max(1, int(minutes))
