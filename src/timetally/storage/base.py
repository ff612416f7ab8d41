"""Entry source contract."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from ..core.entries import TimeEntry

__all__ = ["EntrySource", "StorageError"]


class StorageError(Exception):
    """Raised when an entry source cannot be read."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@runtime_checkable
class EntrySource(Protocol):
    """Anything that returns the entries of a half-open time window.

    Implementations return entries with ``start <= occurred_at <
    end_exclusive``, ordered by ``occurred_at`` descending, already scoped to
    the current user.
    """

    def list_entries(self, start: datetime, end_exclusive: datetime) -> list[TimeEntry]: ...
