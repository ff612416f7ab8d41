"""Core models and pure helpers for timetally."""

from .durations import DurationParseError, minutes_to_hhmm, parse_hhmm_to_minutes, summarize_minutes, timer_minutes
from .entries import UNASSIGNED, UNASSIGNED_LABEL, AssignedProject, TimeEntry, TimerSession, Unassigned
from .periods import PERIODS, Period
from .validation import ValidationError

__all__ = [
    "PERIODS",
    "UNASSIGNED",
    "UNASSIGNED_LABEL",
    "AssignedProject",
    "DurationParseError",
    "Period",
    "TimeEntry",
    "TimerSession",
    "Unassigned",
    "ValidationError",
    "minutes_to_hhmm",
    "parse_hhmm_to_minutes",
    "summarize_minutes",
    "timer_minutes",
]
