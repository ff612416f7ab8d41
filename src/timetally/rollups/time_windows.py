"""Calendar range resolution for day, week and month reports.

Compute ``[start, end_exclusive)`` boundaries for a local anchor date in an
explicit timezone. Boundaries are local midnights; across DST transitions a
"day" can be 23 or 25 hours of elapsed time while still being one calendar
day.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Iterator

import pytz

from ..core.periods import PERIODS, Period
from ..core.time import format_utc_iso8601, get_timezone, to_epoch_ms, to_iso_date

__all__ = [
    "PERIODS",
    "DateRange",
    "Period",
    "add_calendar_months",
    "format_range_label",
    "iter_ranges",
    "local_midnight",
    "parse_anchor_date",
    "resolve_range",
    "week_start_offset",
]

MIDDAY = time(12, 0)


def _localize(naive: datetime, tz: tzinfo) -> datetime:
    """Attach ``tz`` to a naive local datetime.

    Nonexistent or ambiguous local times resolve with ``is_dst=False``.
    """
    if isinstance(tz, pytz.BaseTzInfo):
        return tz.normalize(tz.localize(naive, is_dst=False))
    return naive.replace(tzinfo=tz)


def _local_at_midnight(day: date, tz: tzinfo) -> datetime:
    return _localize(datetime.combine(day, time.min), tz)


def parse_anchor_date(iso: str, tz: str | tzinfo) -> datetime:
    """Parse ``YYYY-MM-DD`` as local midday in ``tz``.

    Midday is at least eleven hours away from any DST transition, so the
    calendar date survives the conversion. Use :func:`local_midnight` to
    truncate.

    Example
    -------
    >>> parse_anchor_date("2025-03-09", "America/New_York").hour
    12
    """
    day = date.fromisoformat(iso)
    return _localize(datetime.combine(day, MIDDAY), get_timezone(tz))


def local_midnight(dt: datetime, tz: str | tzinfo) -> datetime:
    """Truncate an instant to local midnight of its calendar day in ``tz``."""
    tz_obj = get_timezone(tz)
    local = dt.astimezone(tz_obj) if dt.tzinfo is not None else dt
    return _local_at_midnight(local.date(), tz_obj)


def week_start_offset(weekday: int) -> int:
    """Days from a weekday back to its Monday.

    ``weekday`` uses Sunday = 0 .. Saturday = 6.
    """
    return -6 if weekday == 0 else 1 - weekday


def add_calendar_months(day: date, months: int) -> date:
    """Advance a first-of-month date by whole calendar months.

    Range starts are always the 1st, so day-of-month overflow (the 31st into a
    30-day month) cannot happen; other days are rejected to keep it that way.

    Raises
    ------
    ValueError
        If ``day`` is not the first of its month
    """
    if day.day != 1:
        raise ValueError(f"Expected first day of month, got {day.isoformat()}")

    month_index = day.year * 12 + (day.month - 1) + months
    return date(month_index // 12, month_index % 12 + 1, 1)


def _anchor_day(anchor: date | datetime | str, tz: tzinfo) -> date:
    if isinstance(anchor, str):
        return parse_anchor_date(anchor, tz).date()
    if isinstance(anchor, datetime):
        if anchor.tzinfo is not None:
            return anchor.astimezone(tz).date()
        return anchor.date()
    return anchor


def _short_date(value: date) -> str:
    return f"{value.strftime('%b')} {value.day:02d}, {value.year}"


def format_range_label(period: Period, anchor: date | datetime, start: date | datetime, end_exclusive: date | datetime) -> str:
    """Human-readable label for a resolved range.

    - day: ``"Oct 08, 2025"``
    - week: ``"Oct 06, 2025 – Oct 12, 2025"`` (inclusive end)
    - month: ``"October 2025"``
    """
    anchor_day = anchor.date() if isinstance(anchor, datetime) else anchor
    start_day = start.date() if isinstance(start, datetime) else start
    end_day = end_exclusive.date() if isinstance(end_exclusive, datetime) else end_exclusive
    end_inclusive = end_day - timedelta(days=1)

    if period == "day":
        return _short_date(anchor_day)
    if period == "week":
        return f"{_short_date(start_day)} – {_short_date(end_inclusive)}"
    return f"{anchor_day.strftime('%B')} {anchor_day.year}"


@dataclass(frozen=True)
class DateRange:
    """Resolved report window ``[start, end_exclusive)``.

    Attributes
    ----------
    period : Period
        Report granularity
    anchor : date
        Anchor date the range was computed from
    start : datetime
        Local midnight, inclusive
    end_exclusive : datetime
        Local midnight, exclusive
    timezone : str
        Timezone the boundaries are expressed in
    """

    period: Period
    anchor: date
    start: datetime
    end_exclusive: datetime
    timezone: str

    @property
    def start_ms(self) -> int:
        return to_epoch_ms(self.start)

    @property
    def end_exclusive_ms(self) -> int:
        return to_epoch_ms(self.end_exclusive)

    @property
    def from_iso(self) -> str:
        return to_iso_date(self.start)

    @property
    def to_iso(self) -> str:
        return to_iso_date(self.end_exclusive)

    @property
    def label(self) -> str:
        return format_range_label(self.period, self.anchor, self.start, self.end_exclusive)

    def contains(self, dt: datetime) -> bool:
        """Half-open membership test."""
        return self.start <= dt < self.end_exclusive

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "anchor": self.anchor.isoformat(),
            "from": self.from_iso,
            "to": self.to_iso,
            "start_utc": format_utc_iso8601(self.start),
            "end_utc": format_utc_iso8601(self.end_exclusive),
            "timezone": self.timezone,
            "label": self.label,
        }


def resolve_range(anchor: date | datetime | str, period: Period, tz: str | tzinfo = "UTC") -> DateRange:
    """Resolve an anchor date and period into a :class:`DateRange`.

    Parameters
    ----------
    anchor
        ``YYYY-MM-DD`` string (parsed at local midday), a date, or a datetime
    period
        "day", "week" or "month"
    tz
        IANA timezone name the calendar is evaluated in

    Raises
    ------
    ValueError
        If the period is unknown

    Example
    -------
    >>> r = resolve_range("2025-10-08", "week", "America/New_York")
    >>> r.from_iso, r.to_iso
    ('2025-10-06', '2025-10-13')
    """
    tz_obj = get_timezone(tz)
    day = _anchor_day(anchor, tz_obj)

    if period == "day":
        start_day = day
        end_day = day + timedelta(days=1)
    elif period == "week":
        # isoweekday: Monday=1 .. Sunday=7; fold Sunday to 0.
        start_day = day + timedelta(days=week_start_offset(day.isoweekday() % 7))
        end_day = start_day + timedelta(days=7)
    elif period == "month":
        start_day = day.replace(day=1)
        end_day = add_calendar_months(start_day, 1)
    else:
        raise ValueError(f"Unknown period: {period}")

    return DateRange(
        period=period,
        anchor=day,
        start=_local_at_midnight(start_day, tz_obj),
        end_exclusive=_local_at_midnight(end_day, tz_obj),
        timezone=str(tz_obj),
    )


def iter_ranges(
    first_anchor: date | str,
    last_anchor: date | str,
    period: Period,
    tz: str | tzinfo = "UTC",
) -> Iterator[DateRange]:
    """Yield consecutive ranges covering ``first_anchor`` .. ``last_anchor``.

    Each range starts where the previous one ended, so the sequence never
    overlaps and never leaves a gap.
    """
    tz_obj = get_timezone(tz)
    last_day = _anchor_day(last_anchor, tz_obj)

    current = resolve_range(first_anchor, period, tz_obj)
    while current.start.date() <= last_day:
        yield current
        next_anchor = current.end_exclusive.astimezone(tz_obj).date()
        current = resolve_range(next_anchor, period, tz_obj)
