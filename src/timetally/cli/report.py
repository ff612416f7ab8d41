"""Report and range commands."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import click

from ..core.colors import TERMINAL_STYLES, resolve_project_color
from ..core.durations import minutes_to_hhmm, summarize_minutes
from ..core.time import get_current_utc, localize_utc_to_tz
from ..core.validation import validate_anchor_date, validate_period, validate_timezone
from ..pipelines.report_pipeline import create_report_pipeline
from ..rollups.aggregator import Report
from ..rollups.time_windows import iter_ranges, resolve_range
from ..storage.base import StorageError
from .cli_common import (
    CLIContext,
    ExitCode,
    cli_command,
    handle_cli_error,
    handle_cli_success,
    load_cli_settings,
    setup_logging,
)

__all__ = ["range_command", "render_report", "report_command"]

CSV_STDOUT = "-"


def _today_iso(tz_name: str) -> str:
    return localize_utc_to_tz(get_current_utc(), tz_name).date().isoformat()


def render_report(report: Report, *, color: bool = True) -> list[str]:
    """Human-readable report lines: header, totals, then one block per project."""
    date_range = report.date_range
    totals = report.totals

    lines = [f"{date_range.period.capitalize()}: {date_range.label} ({date_range.timezone})"]
    if report.query:
        lines.append(f"Filter: {report.query!r}")
    lines.append(
        f"Total {minutes_to_hhmm(totals.total_minutes)} ({summarize_minutes(totals.total_minutes)}), "
        f"{totals.entry_count} entries, {totals.unique_project_count} projects"
    )

    if not report.groups:
        lines.append("No entries in this range.")
        return lines

    for group in report.groups:
        name = group.project_name
        if color:
            key = resolve_project_color(group.entries[0].project_color, name)
            name = click.style(name, fg=TERMINAL_STYLES[key], bold=True)
        lines.append("")
        lines.append(f"{name}  {minutes_to_hhmm(group.total_minutes)}  ({group.count})")
        for entry in group.entries:
            local = localize_utc_to_tz(entry.occurred_at, date_range.timezone)
            task = entry.task_name or "-"
            lines.append(f"  {local:%Y-%m-%d %H:%M}  {minutes_to_hhmm(entry.minutes)}  {task}")

    return lines


@click.command("report")
@click.option("--date", "anchor", type=str, help="Anchor date YYYY-MM-DD (default: today)")
@click.option("--period", type=str, help="day, week or month (default: settings)")
@click.option("--filter", "query", type=str, default="", help="Case-insensitive text filter on task and project")
@click.option("--tz", "tz_name", type=str, help="IANA timezone (default: settings)")
@click.option("--entries", "entries_path", type=click.Path(path_type=Path), help="JSON entries file")
@click.option("--api-url", type=str, help="Web app base URL")
@click.option("--config", "config_path", type=click.Path(), help="YAML config file")
@click.option(
    "--csv",
    "csv_path",
    is_flag=False,
    flag_value="",
    default=None,
    help="Export CSV to PATH ('-' for stdout, default: output dir)",
)
@cli_command
def report_command(
    ctx: CLIContext,
    anchor: str | None,
    period: str | None,
    query: str,
    tz_name: str | None,
    entries_path: Path | None,
    api_url: str | None,
    config_path: str | None,
    csv_path: str | None,
) -> int:
    """Summarize tracked time for a day, week or month."""
    cmd = "report"
    args = {"date": anchor, "period": period, "filter": query, "tz": tz_name, "csv": csv_path}

    try:
        settings = load_cli_settings(config_path)
        if entries_path is not None:
            settings = replace(settings, entries_path=entries_path, api_url=None)
        elif api_url is not None:
            settings = replace(settings, entries_path=None, api_url=api_url)
        setup_logging(ctx, settings)

        tz = validate_timezone(tz_name or settings.default_timezone)
        anchor_iso = anchor or _today_iso(tz)
        pipeline = create_report_pipeline(settings)

        result = pipeline.run(
            anchor_iso,
            period or settings.default_period,
            query,
            timezone=tz,
            trace_id=ctx.trace_id,
        )
        if not result.success or result.report is None:
            raise StorageError("; ".join(result.errors) or "Entry source failed", errors=result.errors)

        report = result.report
        meta = {"duration_ms": round(result.duration_ms, 1)}

        if csv_path == CSV_STDOUT:
            click.echo(
                report.csv(date_format=pipeline.config.csv_date_format, time_format=pipeline.config.csv_time_format)
            )
            return int(ExitCode.SUCCESS)

        if csv_path is not None:
            written = pipeline.export_csv(report, Path(csv_path) if csv_path else None)
            meta["csv"] = str(written)

        if ctx.json_output:
            return handle_cli_success(ctx, report.to_dict(), cmd, args, meta=meta)

        lines = render_report(report, color=True)
        if "csv" in meta:
            lines.append("")
            lines.append(f"CSV written to {meta['csv']}")
        return handle_cli_success(ctx, lines, cmd, args)

    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd, args)


@click.command("range")
@click.option("--date", "anchor", type=str, help="Anchor date YYYY-MM-DD (default: today)")
@click.option("--period", type=str, help="day, week or month (default: settings)")
@click.option("--tz", "tz_name", type=str, help="IANA timezone (default: settings)")
@click.option("--until", type=str, help="List consecutive ranges up to this date")
@click.option("--config", "config_path", type=click.Path(), help="YAML config file")
@cli_command
def range_command(
    ctx: CLIContext,
    anchor: str | None,
    period: str | None,
    tz_name: str | None,
    until: str | None,
    config_path: str | None,
) -> int:
    """Show the resolved range boundaries for a date and period."""
    cmd = "range"
    args = {"date": anchor, "period": period, "tz": tz_name, "until": until}

    try:
        settings = load_cli_settings(config_path)
        setup_logging(ctx, settings)

        tz = validate_timezone(tz_name or settings.default_timezone)
        anchor_iso = anchor or _today_iso(tz)
        validate_anchor_date(anchor_iso)
        checked_period = validate_period(period or settings.default_period)

        if until is None:
            ranges = [resolve_range(anchor_iso, checked_period, tz)]
        else:
            validate_anchor_date(until)
            ranges = list(iter_ranges(anchor_iso, until, checked_period, tz))

        if ctx.json_output:
            data = [r.to_dict() for r in ranges] if until is not None else ranges[0].to_dict()
            return handle_cli_success(ctx, data, cmd, args)

        lines = [f"{r.from_iso} .. {r.to_iso}  {r.label}" for r in ranges]
        if until is None:
            r = ranges[0]
            lines.append(f"start: {r.start.isoformat()}")
            lines.append(f"end:   {r.end_exclusive.isoformat()} (exclusive)")
        return handle_cli_success(ctx, lines, cmd, args)

    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd, args)
