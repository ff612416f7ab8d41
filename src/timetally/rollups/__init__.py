"""Calendar ranges, report aggregation and CSV export."""

from .aggregator import (
    ProjectGroup,
    Report,
    ReportTotals,
    build_report,
    compute_totals,
    filter_by_range,
    filter_by_text,
    group_by_project,
)
from .csv_export import CSV_HEADER, escape_csv_field, report_filename, to_csv, write_csv
from .time_windows import (
    PERIODS,
    DateRange,
    Period,
    format_range_label,
    iter_ranges,
    local_midnight,
    parse_anchor_date,
    resolve_range,
)

__all__ = [
    # Ranges
    "PERIODS",
    "DateRange",
    "Period",
    "format_range_label",
    "iter_ranges",
    "local_midnight",
    "parse_anchor_date",
    "resolve_range",
    # Aggregation
    "ProjectGroup",
    "Report",
    "ReportTotals",
    "build_report",
    "compute_totals",
    "filter_by_range",
    "filter_by_text",
    "group_by_project",
    # CSV
    "CSV_HEADER",
    "escape_csv_field",
    "report_filename",
    "to_csv",
    "write_csv",
]
