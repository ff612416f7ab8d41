"""Common CLI utilities: JSON output, stable exit codes and error mapping."""

from __future__ import annotations

import functools
import json
import traceback
import uuid
from dataclasses import replace
from enum import IntEnum
from typing import Any

import click

from ..adapters.reports_api import ApiError
from ..config.settings import ConfigError, Settings
from ..core.config import load_config, settings_from_config
from ..core.durations import DurationParseError
from ..core.validation import ValidationError
from ..observability import configure_loguru, get_logger
from ..storage.base import StorageError

__all__ = [
    "CLIContext",
    "ExitCode",
    "cli_command",
    "exit_code_for",
    "handle_cli_error",
    "handle_cli_success",
    "load_cli_settings",
    "setup_logging",
]

log = get_logger("cli")


class ExitCode(IntEnum):
    """Stable exit codes for CLI commands."""

    SUCCESS = 0
    VALIDATION_ERROR = 2  # Bad date, period, timezone or duration
    IO_ERROR = 5  # Entry source unreadable (file or web app)
    CONFIG_ERROR = 6
    UNKNOWN_ERROR = 7


class CLIContext:
    """Context for CLI execution with JSON output and trace ID."""

    def __init__(
        self,
        json_output: bool = False,
        trace_id: str | None = None,
        verbose: bool = False,
    ):
        self.json_output = json_output
        self.trace_id = trace_id or f"trace-{uuid.uuid4().hex[:12]}"
        self.verbose = verbose

    def output(
        self, data: Any, status: str = "success", error: str | None = None, meta: dict[str, Any] | None = None
    ) -> None:
        """Output result in appropriate format.

        Args:
            data: Result data (str lines or a mapping in human mode)
            status: "success", "error" or "warning"
            error: Error message if status is error
            meta: Additional metadata (JSON mode only)
        """
        if self.json_output:
            # JSON mode: print only JSON, no logs
            result: dict[str, Any] = {"status": status, "trace_id": self.trace_id}

            if error:
                result["error"] = error
            else:
                result["data"] = data

            if meta:
                result["meta"] = meta

            click.echo(json.dumps(result, ensure_ascii=False, indent=2))
            return

        if status == "error":
            click.echo(f"Error: {error}", err=True)
        elif status == "warning":
            click.echo(f"Warning: {data}", err=True)
        elif isinstance(data, dict):
            for key, value in data.items():
                click.echo(f"{key}: {value}")
        elif isinstance(data, list):
            for item in data:
                click.echo(item)
        elif data is not None:
            click.echo(data)


def cli_command(func):
    """Decorator adding --json, --trace-id and --verbose to a command.

    The wrapped function receives a :class:`CLIContext` as first argument.
    """

    @click.option("--json", "json_output", is_flag=True, help="Output as JSON (machine-readable)")
    @click.option("--trace-id", type=str, help="Trace ID for correlation")
    @click.option("--verbose", "-v", is_flag=True, help="Verbose output")
    @functools.wraps(func)
    def wrapper(json_output: bool, trace_id: str | None, verbose: bool, *args: Any, **kwargs: Any) -> Any:
        ctx = CLIContext(json_output=json_output, trace_id=trace_id, verbose=verbose)
        return func(ctx, *args, **kwargs)

    return wrapper


def exit_code_for(exc: BaseException) -> ExitCode:
    """Map an exception to its exit code."""
    if isinstance(exc, ValidationError | DurationParseError):
        return ExitCode.VALIDATION_ERROR
    if isinstance(exc, ConfigError):
        return ExitCode.CONFIG_ERROR
    if isinstance(exc, StorageError | ApiError | OSError):
        return ExitCode.IO_ERROR
    return ExitCode.UNKNOWN_ERROR


def handle_cli_error(ctx: CLIContext, exc: Exception, cmd: str, args: dict[str, Any]) -> int:
    """Report an error and return the matching exit code."""
    exit_code = exit_code_for(exc)
    error_msg = str(exc)

    meta: dict[str, Any] = {"exit_code": int(exit_code), "error_type": type(exc).__name__}
    details = getattr(exc, "errors", None)
    if details:
        meta["errors"] = details

    log.bind(trace_id=ctx.trace_id).info(
        f"{cmd} failed",
        args=args,
        error=error_msg,
        error_type=type(exc).__name__,
        exit_code=int(exit_code),
    )

    ctx.output(None, status="error", error=error_msg, meta=meta)

    if ctx.verbose and not ctx.json_output:
        click.echo("\nTraceback:", err=True)
        click.echo(traceback.format_exc(), err=True)

    return int(exit_code)


def handle_cli_success(
    ctx: CLIContext, data: Any, cmd: str, args: dict[str, Any], meta: dict[str, Any] | None = None
) -> int:
    """Output a result and return the success code."""
    log.bind(trace_id=ctx.trace_id).debug(f"{cmd} succeeded", args=args)
    ctx.output(data, status="success", meta=meta)
    return int(ExitCode.SUCCESS)


def load_cli_settings(config_path: str | None = None, **overrides: Any) -> Settings:
    """Load settings for a command and apply command-line overrides.

    Settings come from the YAML config when ``config_path`` is given,
    otherwise from ``.env`` and ``TIMETALLY_*`` variables. ``None`` overrides
    are ignored.

    Raises
    ------
    ConfigError
        If the resulting settings are invalid
    """
    if config_path:
        settings = settings_from_config(load_config(config_path))
    else:
        settings = Settings.from_env()

    changes = {key: value for key, value in overrides.items() if value is not None}
    if changes:
        settings = replace(settings, **changes)
    return settings


def setup_logging(ctx: CLIContext, settings: Settings) -> None:
    """Configure loguru for a command run.

    Console output is off in JSON mode and limited to warnings unless
    ``--verbose`` is given.
    """
    configure_loguru(
        log_dir=settings.log_dir,
        level=settings.log_level,
        console_level="DEBUG" if ctx.verbose else "WARNING",
        enable_console=not ctx.json_output,
    )
