"""Report pipeline - thin orchestration for period reports.

Validates the request, resolves the calendar range, fetches entries from the
configured source and hands them to the pure aggregator. Source failures are
reported in the result instead of raised, so callers can render them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ..adapters.reports_api import ApiError, ReportsApiClient
from ..core.validation import validate_anchor_date, validate_period, validate_report_query, validate_timezone
from ..observability import get_logger, timing_context
from ..rollups.aggregator import Report, build_report
from ..rollups.csv_export import write_csv
from ..rollups.time_windows import resolve_range
from ..storage.base import StorageError
from ..storage.json_store import JsonEntryStore

if TYPE_CHECKING:
    from ..config.settings import Settings
    from ..core.entries import TimeEntry
    from ..storage.base import EntrySource

__all__ = [
    "ReportPipeline",
    "ReportPipelineConfig",
    "ReportPipelineResult",
    "create_entry_source",
    "create_report_pipeline",
]

log = get_logger("pipeline")


@dataclass
class ReportPipelineConfig:
    """Configuration for report pipeline."""

    timezone: str = "UTC"
    csv_date_format: str | None = None
    csv_time_format: str = "%H:%M"
    output_dir: Path = Path("output")


@dataclass
class ReportPipelineResult:
    """Result of one report run."""

    success: bool
    report: Report | None
    trace_id: str
    duration_ms: float
    errors: list[str] = field(default_factory=list)


class ReportPipeline:
    """Orchestrates range resolution, fetching and aggregation.

    Example:
        >>> from timetally.storage import JsonEntryStore
        >>> pipeline = ReportPipeline(JsonEntryStore("entries.json"), ReportPipelineConfig(timezone="Europe/Brussels"))
        >>> result = pipeline.run("2025-10-08", "week", query="design")
        >>> result.report.totals.total_minutes
    """

    def __init__(self, source: EntrySource, config: ReportPipelineConfig | None = None) -> None:
        self.source = source
        self.config = config or ReportPipelineConfig()

    def run(
        self,
        anchor_iso: str,
        period: str,
        query: str = "",
        *,
        timezone: str | None = None,
        trace_id: str | None = None,
    ) -> ReportPipelineResult:
        """Build the report for the period containing ``anchor_iso``.

        Parameters
        ----------
        anchor_iso
            Anchor date ``YYYY-MM-DD``
        period
            "day", "week" or "month"
        query
            Optional case-insensitive text filter
        timezone
            Overrides the configured timezone for this run
        trace_id
            Correlation id for logs (generated when omitted)

        Raises
        ------
        ValidationError
            If the anchor, period or timezone is invalid
        """
        validate_anchor_date(anchor_iso)
        checked_period = validate_period(period)
        tz_name = validate_timezone(timezone or self.config.timezone)

        trace_id = trace_id or str(uuid.uuid4())
        date_range = resolve_range(anchor_iso, checked_period, tz_name)

        with timing_context(
            "report",
            component="pipeline",
            trace_id=trace_id,
            period=checked_period,
            anchor=anchor_iso,
            timezone=tz_name,
        ) as ctx:
            report: Report | None = None
            errors: list[str] = []
            try:
                entries = self.source.list_entries(date_range.start, date_range.end_exclusive)
            except (StorageError, ApiError) as exc:
                log.warning(
                    "Entry source failed",
                    trace_id=trace_id,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                errors.append(str(exc))
                errors.extend(getattr(exc, "errors", []))
                ctx["outcome"] = "failure"
            else:
                report = build_report(entries, date_range, query)
                ctx["outcome"] = "success"
                ctx["entries"] = report.totals.entry_count
                ctx["total_minutes"] = report.totals.total_minutes

        return ReportPipelineResult(
            success=report is not None,
            report=report,
            trace_id=trace_id,
            duration_ms=ctx["duration_ms"],
            errors=errors,
        )

    def fetch_entries(self, from_iso: str | None, to_iso: str | None, *, timezone: str | None = None) -> list[TimeEntry]:
        """Entries for an explicit ``[from, to)`` pair of local dates.

        Raises
        ------
        ValidationError
            If a bound is missing or malformed, or ``from >= to``
        """
        tz_name = timezone or self.config.timezone
        validate_report_query(from_iso, to_iso, tz_name)

        start = resolve_range(from_iso, "day", tz_name).start  # type: ignore[arg-type]
        end_exclusive = resolve_range(to_iso, "day", tz_name).start  # type: ignore[arg-type]

        return self.source.list_entries(start, end_exclusive)

    def export_csv(self, report: Report, path: Path | None = None) -> Path:
        """Write the report CSV, by default to ``output_dir/report_{period}_{anchor}.csv``."""
        target = path or self.config.output_dir / report.filename
        text = report.csv(
            date_format=self.config.csv_date_format,
            time_format=self.config.csv_time_format,
        )
        write_csv(target, text)
        log.info("CSV exported", path=str(target), rows=report.totals.entry_count)
        return target


def create_entry_source(settings: Settings) -> EntrySource:
    """Pick the entry source from settings; a local file wins over the API.

    Raises
    ------
    ConfigError
        If no source is configured
    """
    settings.require_source()
    if settings.entries_path is not None:
        return JsonEntryStore(settings.entries_path)
    return ReportsApiClient(
        settings.api_url,  # type: ignore[arg-type]
        timeout=settings.http_timeout,
        token=settings.api_token,
    )


def create_report_pipeline(settings: Settings | None = None, source: EntrySource | None = None) -> ReportPipeline:
    """Factory function to create report pipeline.

    Parameters
    ----------
    settings
        Settings (loaded from the environment when omitted)
    source
        Entry source (built from settings when omitted)
    """
    if settings is None:
        from ..config.settings import get_settings

        settings = get_settings()

    config = ReportPipelineConfig(
        timezone=settings.default_timezone,
        csv_date_format=settings.csv_date_format,
        csv_time_format=settings.csv_time_format,
        output_dir=settings.output_dir,
    )
    return ReportPipeline(source or create_entry_source(settings), config)
