"""CSV export of report entries."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime, tzinfo
from pathlib import Path
from typing import TYPE_CHECKING

from ..core.durations import minutes_to_hhmm
from ..core.time import localize_utc_to_tz

if TYPE_CHECKING:
    from ..core.entries import TimeEntry

__all__ = [
    "CSV_HEADER",
    "escape_csv_field",
    "format_entry_date",
    "report_filename",
    "to_csv",
    "write_csv",
]

CSV_HEADER: tuple[str, ...] = ("Date", "Time", "Project", "Task", "Minutes", "HH:MM")

LINE_SEPARATOR = "\n"

_NEEDS_QUOTING = re.compile(r'[",\n\r]')


def escape_csv_field(value: str) -> str:
    """Quote a field iff it contains a comma, a double quote or a line break.

    Example
    -------
    >>> escape_csv_field("Design, v2")
    '"Design, v2"'
    >>> escape_csv_field('say "hi" now')
    '"say ""hi"" now"'
    >>> escape_csv_field("plain")
    'plain'
    """
    if not _NEEDS_QUOTING.search(value):
        return value
    return '"' + value.replace('"', '""') + '"'


def format_entry_date(dt: datetime, date_format: str | None = None) -> str:
    """Format a local date for export.

    Defaults to ``M/D/YYYY`` without zero padding; ``date_format`` is a
    strftime pattern.
    """
    if date_format:
        return dt.strftime(date_format)
    return f"{dt.month}/{dt.day}/{dt.year}"


def to_csv(
    entries: Iterable[TimeEntry],
    tz: str | tzinfo,
    *,
    date_format: str | None = None,
    time_format: str = "%H:%M",
) -> str:
    """Serialize entries to CSV text.

    Rows are chronological (oldest first), the opposite of the on-screen
    order. Lines are separated by ``\\n`` with no trailing newline.

    Parameters
    ----------
    entries
        Entries to export
    tz
        Timezone used for the Date and Time columns
    date_format
        Optional strftime pattern for the Date column
    time_format
        strftime pattern for the Time column (default ``HH:MM``)
    """
    ordered = sorted(entries, key=lambda entry: entry.occurred_at)

    lines = [",".join(CSV_HEADER)]
    for entry in ordered:
        local = localize_utc_to_tz(entry.occurred_at, tz)
        fields = [
            escape_csv_field(format_entry_date(local, date_format)),
            escape_csv_field(local.strftime(time_format)),
            escape_csv_field(entry.project_name),
            escape_csv_field(entry.task_name),
            str(entry.minutes),
            minutes_to_hhmm(entry.minutes),
        ]
        lines.append(",".join(fields))

    return LINE_SEPARATOR.join(lines)


def report_filename(period: str, anchor_iso: str) -> str:
    """Download filename: ``report_{period}_{anchor}.csv``."""
    return f"report_{period}_{anchor_iso}.csv"


def write_csv(path: Path, text: str) -> Path:
    """Write CSV text as UTF-8, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8", newline="")
    return path
