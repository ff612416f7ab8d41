"""Timer and duration commands."""

from __future__ import annotations

import uuid
from pathlib import Path

import click

from ..core.durations import minutes_to_hhmm, parse_hhmm_to_minutes, summarize_minutes, timer_minutes
from ..core.entries import TimerSession
from ..core.time import format_utc_iso8601, parse_utc_iso8601, to_epoch_ms
from ..core.validation import ValidationError, validate_minutes
from ..storage.json_store import JsonEntryStore
from .cli_common import CLIContext, cli_command, handle_cli_error, handle_cli_success

__all__ = ["duration_command", "timer_command"]


def _parse_instant(value: str, option: str) -> int:
    try:
        return to_epoch_ms(parse_utc_iso8601(value))
    except ValueError as exc:
        raise ValidationError(f"Invalid {option}: {value!r} (expected ISO-8601 datetime)") from exc


@click.command("timer")
@click.option("--start", "start_iso", required=True, help="Timer start (ISO-8601, naive means UTC)")
@click.option("--end", "end_iso", required=True, help="Timer stop (ISO-8601, naive means UTC)")
@click.option("--task", "task_name", type=str, help="Task label for the new entry")
@click.option("--project-id", type=str, help="Project id for the new entry")
@click.option("--project-name", type=str, help="Project name stored with the entry")
@click.option("--save", "save_path", type=click.Path(path_type=Path), help="Append the entry to a JSON entries file")
@cli_command
def timer_command(
    ctx: CLIContext,
    start_iso: str,
    end_iso: str,
    task_name: str | None,
    project_id: str | None,
    project_name: str | None,
    save_path: Path | None,
) -> int:
    """Convert a start/stop timer session to whole minutes.

    With --task and --project-id the session becomes a time entry; --save
    appends it to a JSON entries file.
    """
    cmd = "timer"
    args = {"start": start_iso, "end": end_iso, "task": task_name, "project_id": project_id}

    try:
        start_ms = _parse_instant(start_iso, "--start")
        end_ms = _parse_instant(end_iso, "--end")

        data: dict = {}
        if task_name is not None or project_id is not None or save_path is not None:
            session = TimerSession(task_name=task_name or "", project_id=project_id, start_ms=start_ms, end_ms=end_ms)
            entry = session.to_entry(str(uuid.uuid4()), project_name=project_name)
            minutes = entry.minutes
            data["entry"] = entry.to_dict()

            if save_path is not None:
                store = JsonEntryStore(save_path)
                existing = store.load_all() if save_path.exists() else []
                store.save([*existing, entry])
                data["saved_to"] = str(save_path)
        else:
            try:
                minutes = timer_minutes(start_ms, end_ms)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc

        data = {
            "start": format_utc_iso8601(parse_utc_iso8601(start_iso)),
            "end": format_utc_iso8601(parse_utc_iso8601(end_iso)),
            "minutes": minutes,
            "hhmm": minutes_to_hhmm(minutes),
            **data,
        }

        if ctx.json_output:
            return handle_cli_success(ctx, data, cmd, args)

        lines = [f"{minutes_to_hhmm(minutes)} ({minutes} min)"]
        if "entry" in data:
            lines.append(f"Entry {data['entry']['id']}: {data['entry']['taskName']}")
        if "saved_to" in data:
            lines.append(f"Saved to {data['saved_to']}")
        return handle_cli_success(ctx, lines, cmd, args)

    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd, args)


@click.command("duration")
@click.argument("value")
@cli_command
def duration_command(ctx: CLIContext, value: str) -> int:
    """Format whole minutes (e.g. 90) or parse hh:mm (e.g. 01:30)."""
    cmd = "duration"
    args = {"value": value}

    try:
        raw = value.strip()
        minutes = validate_minutes(int(raw)) if raw.isdigit() else parse_hhmm_to_minutes(raw)

        data = {"minutes": minutes, "hhmm": minutes_to_hhmm(minutes), "summary": summarize_minutes(minutes)}
        if ctx.json_output:
            return handle_cli_success(ctx, data, cmd, args)
        return handle_cli_success(ctx, f"{data['hhmm']} = {minutes} min ({data['summary']})", cmd, args)

    except Exception as exc:
        return handle_cli_error(ctx, exc, cmd, args)
