"""JSON file entry source.

Reads a document in the ``/api/reports/entries`` response shape (or a bare
list of entries) and answers window queries the way the relational store
does: half-open ``[start, end_exclusive)``, most recent first.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.entries import TimeEntry, entries_from_payload
from ..core.validation import validate_entries_document
from ..observability import get_logger
from .base import StorageError

__all__ = ["JsonEntryStore"]

log = get_logger("storage")


class JsonEntryStore:
    """Entry source backed by a JSON file.

    The file is read on each query; there is no cache.

    Example:
        >>> store = JsonEntryStore(Path("entries.json"))
        >>> entries = store.list_entries(r.start, r.end_exclusive)
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load_document(self) -> Any:
        if not self.path.exists():
            raise StorageError(f"Entries file not found: {self.path}")

        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Invalid JSON in {self.path}: {exc.msg} (line {exc.lineno}, column {exc.colno})") from exc

        result = validate_entries_document(document)
        if not result:
            raise StorageError(f"Invalid entries document {self.path}: {result}", errors=result.errors)

        return document

    def load_all(self) -> list[TimeEntry]:
        """Load every entry in the file, in file order."""
        return entries_from_payload(self._load_document())

    def list_entries(self, start: datetime, end_exclusive: datetime) -> list[TimeEntry]:
        """Entries with ``start <= occurred_at < end_exclusive``, most recent first."""
        entries = self.load_all()
        matching = [entry for entry in entries if start <= entry.occurred_at < end_exclusive]
        matching.sort(key=lambda entry: entry.occurred_at, reverse=True)

        log.debug(
            "Loaded entries from file",
            path=str(self.path),
            total=len(entries),
            matching=len(matching),
        )
        return matching

    def save(self, entries: list[TimeEntry], *, from_iso: str | None = None, to_iso: str | None = None) -> Path:
        """Write entries in the endpoint shape."""
        document: dict[str, Any] = {"entries": [entry.to_dict() for entry in entries]}
        if from_iso is not None:
            document["from"] = from_iso
        if to_iso is not None:
            document["to"] = to_iso

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(document, f, ensure_ascii=False, indent=2)
        return self.path
