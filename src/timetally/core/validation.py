"""Input validation at the caller boundary.

The reporting core assumes its preconditions hold. Anything coming from a
user, a file or an HTTP response goes through these checks first, so the core
is never invoked with a malformed date, an unknown period, ``from >= to`` or
negative minutes.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any

import pytz
from jsonschema import Draft7Validator

from .periods import PERIODS, Period

__all__ = [
    "ENTRIES_DOCUMENT_SCHEMA",
    "ValidationError",
    "ValidationResult",
    "validate_anchor_date",
    "validate_entries_document",
    "validate_minutes",
    "validate_period",
    "validate_report_query",
    "validate_timezone",
]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationError(ValueError):
    """Raised when caller input is rejected before reaching the core."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class ValidationResult:
    """Result of document validation."""

    def __init__(self, valid: bool, errors: list[str] | None = None) -> None:
        self.valid = valid
        self.errors = errors or []

    def __bool__(self) -> bool:
        return self.valid

    def __str__(self) -> str:
        if self.valid:
            return "Valid"
        return f"Invalid: {'; '.join(self.errors)}"

    def add_error(self, error: str) -> None:
        self.errors.append(error)
        self.valid = False


ENTRIES_DOCUMENT_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "definitions": {
        "entry": {
            "type": "object",
            "required": ["id", "occurredAt", "minutes"],
            "properties": {
                "id": {"type": ["string", "integer"]},
                "occurredAt": {"type": "number", "description": "Epoch milliseconds."},
                "minutes": {"type": "integer", "minimum": 0},
                "projectId": {"type": ["string", "null"]},
                "projectName": {"type": ["string", "null"]},
                "projectColor": {"type": ["string", "null"]},
                "taskName": {"type": ["string", "null"]},
            },
        },
    },
    "oneOf": [
        {
            "type": "object",
            "required": ["entries"],
            "properties": {
                "from": {"type": "string"},
                "to": {"type": "string"},
                "entries": {"type": "array", "items": {"$ref": "#/definitions/entry"}},
            },
        },
        {"type": "array", "items": {"$ref": "#/definitions/entry"}},
    ],
}

_entries_validator = Draft7Validator(ENTRIES_DOCUMENT_SCHEMA)


def validate_anchor_date(value: str) -> date:
    """Validate a ``YYYY-MM-DD`` string and return the calendar date.

    Raises
    ------
    ValidationError
        If the string is not a real ISO calendar date
    """
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value!r} ({exc})") from exc


def validate_period(value: str) -> Period:
    """Validate a period tag (day, week, month)."""
    if value not in PERIODS:
        raise ValidationError(f"Unknown period: {value!r} (expected one of {', '.join(PERIODS)})")
    return value  # type: ignore[return-value]


def validate_report_query(from_iso: str | None, to_iso: str | None, tz: str | None = None) -> tuple[date, date]:
    """Validate the ``from``/``to`` bounds of a report query.

    Both bounds are local calendar dates; the query covers
    ``[midnight(from), midnight(to))``. Because both are parsed at midday and
    truncated to midnight in the same timezone, ``from < to`` reduces to a
    calendar date comparison.

    Returns
    -------
    tuple[date, date]
        Parsed (from, to) dates

    Raises
    ------
    ValidationError
        If a bound is missing or malformed, or ``from >= to``
    """
    if not from_iso or not to_iso:
        raise ValidationError("from and to are required (YYYY-MM-DD)")
    if tz is not None:
        validate_timezone(tz)

    from_date = validate_anchor_date(from_iso)
    to_date = validate_anchor_date(to_iso)

    if not from_date < to_date:
        raise ValidationError("from must be < to")

    return from_date, to_date


def validate_minutes(value: Any) -> int:
    """Validate a non-negative whole number of minutes."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"minutes must be an integer, got {value!r}")
    if value < 0:
        raise ValidationError(f"minutes must be >= 0, got {value}")
    return value


def validate_timezone(name: str) -> str:
    """Validate an IANA timezone name."""
    try:
        pytz.timezone(name)
    except pytz.UnknownTimeZoneError as exc:
        raise ValidationError(f"Invalid timezone: {name}") from exc
    return name


def validate_entries_document(document: Any) -> ValidationResult:
    """Validate an entries document against :data:`ENTRIES_DOCUMENT_SCHEMA`.

    Accepts the reports endpoint shape (``{"from", "to", "entries"}``) or a
    bare list of entries.
    """
    result = ValidationResult(valid=True)

    errors = sorted(_entries_validator.iter_errors(document), key=lambda err: [str(part) for part in err.absolute_path])
    for error in errors:
        location = " -> ".join(str(part) for part in error.absolute_path) or "<root>"
        result.add_error(f"[{error.validator}] {error.message} (path: {location})")

    # oneOf hides the per-entry detail; check the entries themselves too.
    if not result.valid:
        entries = document.get("entries") if isinstance(document, dict) else document
        if isinstance(entries, list):
            entry_validator = Draft7Validator(ENTRIES_DOCUMENT_SCHEMA["definitions"]["entry"])
            for index, entry in enumerate(entries):
                for error in entry_validator.iter_errors(entry):
                    result.add_error(f"entries[{index}]: {error.message}")

    return result
