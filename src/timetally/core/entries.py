"""Time entry model and timer-to-entry conversion.

The project association is a typed sum: an entry either belongs to an
``AssignedProject`` or is ``UNASSIGNED``. The "Unassigned" display label is
derived only when formatting, so a real project named "Unassigned" never
collides with entries that have no project.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final, Union

from .durations import timer_minutes
from .time import from_epoch_ms, to_epoch_ms
from .validation import ValidationError

__all__ = [
    "UNASSIGNED",
    "UNASSIGNED_LABEL",
    "AssignedProject",
    "ProjectRef",
    "TimeEntry",
    "TimerSession",
    "Unassigned",
    "entries_from_payload",
    "normalize_task_name",
]

UNASSIGNED_LABEL: Final = "Unassigned"

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class AssignedProject:
    """Entry belongs to a known project."""

    id: str
    name: str

    @property
    def display_name(self) -> str:
        return self.name or UNASSIGNED_LABEL


@dataclass(frozen=True)
class Unassigned:
    """Entry has no project."""

    @property
    def display_name(self) -> str:
        return UNASSIGNED_LABEL


UNASSIGNED: Final = Unassigned()

ProjectRef = Union[AssignedProject, Unassigned]


def normalize_task_name(raw: str) -> str:
    """Trim a task label and collapse runs of whitespace to one space."""
    return _WHITESPACE.sub(" ", raw.strip())


def project_ref(project_id: str | None, project_name: str | None) -> ProjectRef:
    """Build the project association from storage fields.

    An empty or missing ``project_id`` means the entry is unassigned.
    """
    if not project_id:
        return UNASSIGNED
    return AssignedProject(id=str(project_id), name=project_name or "")


@dataclass(frozen=True)
class TimeEntry:
    """One recorded unit of tracked time.

    Attributes
    ----------
    id : str
        Opaque unique identifier
    occurred_at : datetime
        Start instant of the entry (timezone-aware)
    minutes : int
        Duration in minutes (non-negative)
    project : ProjectRef
        Project association
    task_name : str
        Free-text task label, may be empty
    project_color : str | None
        Opaque color key of the project
    """

    id: str
    occurred_at: datetime
    minutes: int
    project: ProjectRef = UNASSIGNED
    task_name: str = ""
    project_color: str | None = None

    @property
    def project_name(self) -> str:
        return self.project.display_name

    @property
    def project_id(self) -> str:
        if isinstance(self.project, AssignedProject):
            return self.project.id
        return ""

    @property
    def occurred_at_ms(self) -> int:
        return to_epoch_ms(self.occurred_at)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimeEntry:
        """Build an entry from the reports endpoint shape.

        ``occurredAt`` is epoch milliseconds.
        """
        return cls(
            id=str(data["id"]),
            occurred_at=from_epoch_ms(data["occurredAt"]),
            minutes=int(data["minutes"]),
            project=project_ref(data.get("projectId"), data.get("projectName")),
            task_name=data.get("taskName") or "",
            project_color=data.get("projectColor"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the reports endpoint shape."""
        return {
            "id": self.id,
            "occurredAt": self.occurred_at_ms,
            "minutes": self.minutes,
            "projectId": self.project_id,
            "projectName": self.project_name,
            "projectColor": self.project_color,
            "taskName": self.task_name,
        }


@dataclass(frozen=True)
class TimerSession:
    """A finished start/stop timer session, before it becomes an entry."""

    task_name: str
    project_id: str | None
    start_ms: int
    end_ms: int

    def to_entry(
        self,
        entry_id: str,
        *,
        project_name: str | None = None,
        project_color: str | None = None,
    ) -> TimeEntry:
        """Convert the session into a time entry.

        Raises
        ------
        ValidationError
            If the task name or project is missing, or the session is empty
        """
        task_name = normalize_task_name(self.task_name)
        if not task_name:
            raise ValidationError("taskName is required")
        if not self.project_id:
            raise ValidationError("projectId is required")
        if self.end_ms <= self.start_ms:
            raise ValidationError("Invalid startMs/endMs")

        return TimeEntry(
            id=entry_id,
            occurred_at=from_epoch_ms(self.start_ms),
            minutes=timer_minutes(self.start_ms, self.end_ms),
            project=AssignedProject(id=self.project_id, name=project_name or ""),
            task_name=task_name,
            project_color=project_color,
        )


def entries_from_payload(payload: Any) -> list[TimeEntry]:
    """Parse entries from an endpoint response or a bare list."""
    if isinstance(payload, dict):
        payload = payload.get("entries", [])
    return [TimeEntry.from_dict(item) for item in payload]
