"""Time and timezone utilities for timetally.

Every helper takes the timezone explicitly. Nothing in the reporting core
reads the process-local timezone or the wall clock; ``get_current_utc`` exists
only for CLI defaults.

- Instants are timezone-aware ``datetime`` objects
- Storage speaks epoch milliseconds; conversion happens at the boundary
- ISO-8601 UTC strings for logs and JSON output
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo

import pytz

__all__ = [
    "format_utc_iso8601",
    "from_epoch_ms",
    "get_current_utc",
    "get_timezone",
    "localize_utc_to_tz",
    "parse_utc_iso8601",
    "to_epoch_ms",
    "to_iso_date",
]


def get_timezone(tz: str | tzinfo) -> tzinfo:
    """Resolve a timezone name to a pytz timezone.

    Parameters
    ----------
    tz
        IANA timezone name (e.g. "Europe/Brussels") or a tzinfo instance

    Returns
    -------
    tzinfo
        Timezone object

    Raises
    ------
    ValueError
        If the timezone name is unknown
    """
    if isinstance(tz, tzinfo):
        return tz

    try:
        return pytz.timezone(tz)
    except pytz.UnknownTimeZoneError as exc:
        raise ValueError(f"Invalid timezone: {tz}") from exc


def get_current_utc() -> datetime:
    """Get current time in UTC."""
    return datetime.now(timezone.utc)


def from_epoch_ms(epoch_ms: int | float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime.

    Example
    -------
    >>> from_epoch_ms(0).isoformat()
    '1970-01-01T00:00:00+00:00'
    """
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds.

    Naive datetimes are treated as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return round(dt.timestamp() * 1000)


def format_utc_iso8601(dt: datetime) -> str:
    """Format datetime as ISO-8601 UTC string.

    Example
    -------
    >>> dt = datetime(2025, 10, 8, 12, 30, 0, tzinfo=timezone.utc)
    >>> format_utc_iso8601(dt)
    '2025-10-08T12:30:00+00:00'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt.isoformat()


def parse_utc_iso8601(iso_string: str) -> datetime:
    """Parse ISO-8601 string to UTC datetime.

    A trailing ``Z`` is accepted. Naive strings are assumed to be UTC.

    Raises
    ------
    ValueError
        If string is not valid ISO-8601
    """
    iso_string = iso_string.replace("Z", "+00:00")

    dt = datetime.fromisoformat(iso_string)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    return dt


def localize_utc_to_tz(utc_dt: datetime, tz: str | tzinfo) -> datetime:
    """Convert an aware datetime to a specific timezone for display.

    Example
    -------
    >>> utc_dt = datetime(2025, 10, 8, 12, 0, 0, tzinfo=timezone.utc)
    >>> localize_utc_to_tz(utc_dt, "Europe/Brussels").hour
    14
    """
    tz_obj = get_timezone(tz)

    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)

    return utc_dt.astimezone(tz_obj)


def to_iso_date(value: date | datetime) -> str:
    """Format the calendar date part as ``YYYY-MM-DD``.

    For aware datetimes the date is taken in the datetime's own timezone.
    """
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()
