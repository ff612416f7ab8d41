"""timetally - calendar-range reports over tracked time entries."""

__version__ = "0.1.0"
