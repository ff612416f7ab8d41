"""Report aggregation over time entries.

Filter entries to a window and a text query, group them by project, and
compute totals. Everything here is pure: inputs are never mutated and each
call rebuilds its result from scratch.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any

from ..core.durations import minutes_to_hhmm, summarize_minutes
from ..core.entries import AssignedProject, ProjectRef, TimeEntry
from .csv_export import report_filename, to_csv
from .time_windows import DateRange

__all__ = [
    "ProjectGroup",
    "Report",
    "ReportTotals",
    "build_report",
    "compute_totals",
    "filter_by_range",
    "filter_by_text",
    "group_by_project",
]


@dataclass(frozen=True)
class ProjectGroup:
    """Entries of one project within a report.

    Attributes
    ----------
    project : ProjectRef
        Grouping key
    total_minutes : int
        Sum of member minutes
    entries : tuple[TimeEntry, ...]
        Members, most recent first
    """

    project: ProjectRef
    total_minutes: int
    entries: tuple[TimeEntry, ...]

    @property
    def project_name(self) -> str:
        return self.project.display_name

    @property
    def count(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectId": self.project.id if isinstance(self.project, AssignedProject) else "",
            "projectName": self.project_name,
            "totalMinutes": self.total_minutes,
            "hhmm": minutes_to_hhmm(self.total_minutes),
            "summary": summarize_minutes(self.total_minutes),
            "count": self.count,
            "entries": [entry.to_dict() for entry in self.entries],
        }


@dataclass(frozen=True)
class ReportTotals:
    """Overall totals of a report."""

    total_minutes: int = 0
    entry_count: int = 0
    unique_project_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalMinutes": self.total_minutes,
            "entryCount": self.entry_count,
            "uniqueProjectCount": self.unique_project_count,
        }


def filter_by_range(entries: Iterable[TimeEntry], start: datetime, end_exclusive: datetime) -> list[TimeEntry]:
    """Keep entries with ``start <= occurred_at < end_exclusive``."""
    return [entry for entry in entries if start <= entry.occurred_at < end_exclusive]


def filter_by_text(entries: Iterable[TimeEntry], query: str | None) -> list[TimeEntry]:
    """Case-insensitive substring match on task and project name.

    A blank query keeps every entry.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return list(entries)
    return [entry for entry in entries if needle in f"{entry.task_name} {entry.project_name}".lower()]


def _group_sort_key(group: ProjectGroup) -> tuple[int, str, int]:
    # Unassigned sorts after an assigned project that shares its label.
    unassigned = 0 if isinstance(group.project, AssignedProject) else 1
    return (-group.total_minutes, group.project_name, unassigned)


def group_by_project(entries: Iterable[TimeEntry]) -> list[ProjectGroup]:
    """Group entries by project.

    Groups are ordered by total minutes descending, then project name
    ascending. Entries within a group are ordered most recent first; entries
    with the same instant keep their input order.
    """
    buckets: dict[ProjectRef, list[TimeEntry]] = {}
    for entry in entries:
        buckets.setdefault(entry.project, []).append(entry)

    groups = [
        ProjectGroup(
            project=project,
            total_minutes=sum(entry.minutes for entry in members),
            entries=tuple(sorted(members, key=lambda entry: entry.occurred_at, reverse=True)),
        )
        for project, members in buckets.items()
    ]
    groups.sort(key=_group_sort_key)
    return groups


def compute_totals(entries: Iterable[TimeEntry]) -> ReportTotals:
    """Total minutes, entry count and distinct project count.

    Entries without a project count as one distinct project.
    """
    total_minutes = 0
    entry_count = 0
    projects: set[ProjectRef] = set()

    for entry in entries:
        total_minutes += entry.minutes
        entry_count += 1
        projects.add(entry.project)

    return ReportTotals(
        total_minutes=total_minutes,
        entry_count=entry_count,
        unique_project_count=len(projects),
    )


@dataclass(frozen=True)
class Report:
    """Aggregated report for one resolved range."""

    date_range: DateRange
    query: str
    entries: tuple[TimeEntry, ...]
    groups: tuple[ProjectGroup, ...]
    totals: ReportTotals = field(default_factory=ReportTotals)

    @property
    def filename(self) -> str:
        return report_filename(self.date_range.period, self.date_range.anchor.isoformat())

    def csv(
        self,
        tz: str | tzinfo | None = None,
        *,
        date_format: str | None = None,
        time_format: str = "%H:%M",
    ) -> str:
        """Export the report entries as CSV, in the range's timezone by default."""
        return to_csv(
            self.entries,
            tz or self.date_range.timezone,
            date_format=date_format,
            time_format=time_format,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "range": self.date_range.to_dict(),
            "query": self.query,
            "totals": self.totals.to_dict(),
            "groups": [group.to_dict() for group in self.groups],
        }


def build_report(entries: Iterable[TimeEntry], date_range: DateRange, query: str = "") -> Report:
    """Filter, group and total entries for a resolved range."""
    in_range = filter_by_range(entries, date_range.start, date_range.end_exclusive)
    matching = filter_by_text(in_range, query)

    return Report(
        date_range=date_range,
        query=query,
        entries=tuple(matching),
        groups=tuple(group_by_project(matching)),
        totals=compute_totals(matching),
    )
