"""Loguru configuration with operation timing.

This module provides centralized loguru configuration with:
- Console output for humans
- Structured JSON log files with trace IDs
- A context manager that logs start/end and duration of an operation

Components: pipeline, storage, api, cli.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "COMPONENTS",
    "configure_loguru",
    "get_logger",
    "timing_context",
]

COMPONENTS = ("pipeline", "storage", "api", "cli")


def configure_loguru(
    *,
    log_dir: Path | None = None,
    level: str = "INFO",
    console_level: str | None = None,
    rotation: str = "10 MB",
    retention: str = "10 days",
    enable_console: bool = True,
) -> None:
    """Configure loguru sinks.

    Parameters
    ----------
    log_dir
        Directory for JSONL log files (no files when None)
    level
        Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    console_level
        Minimum level for stderr output (defaults to ``level``)
    rotation
        Log rotation policy (e.g., "10 MB", "1 day")
    retention
        Log retention policy (e.g., "10 days", "1 week")
    enable_console
        Enable stderr output

    Example
    -------
    >>> configure_loguru(log_dir=Path("logs"), level="DEBUG")
    """
    logger.remove()

    if enable_console:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<level>{message}</level>",
            level=console_level or level,
            colorize=True,
            backtrace=False,
            diagnose=False,
        )

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_dir / "timetally.jsonl",
            format="{message}",
            level=level,
            rotation=rotation,
            retention=retention,
            serialize=True,
        )

        logger.add(
            log_dir / "timing.jsonl",
            format="{message}",
            level="DEBUG",
            rotation=rotation,
            retention=retention,
            serialize=True,
            filter=lambda record: record["extra"].get("timing", False),
        )

    logger.configure(extra={"component": "timetally"})
    logger.debug("Loguru configured", log_dir=str(log_dir) if log_dir else None, level=level)


def get_logger(component: str = "timetally") -> Any:
    """Get logger bound to a component name."""
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "timetally",
    trace_id: str | None = None,
    **metadata: Any,
) -> Generator[dict[str, Any], None, None]:
    """Log start and end of an operation with its duration.

    Yields a dict the caller can fill with extra fields for the END record.

    Example
    -------
    >>> with timing_context("report", component="pipeline", trace_id="abc") as ctx:
    ...     ctx["entries"] = 12
    """
    start_ns = time.perf_counter_ns()
    bound = logger.bind(component=component, timing=True, operation=operation, trace_id=trace_id)

    context: dict[str, Any] = {"duration_ms": 0.0}

    bound.debug(f"START: {operation}", phase="start", **metadata)

    try:
        yield context
    finally:
        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        context["duration_ms"] = duration_ms
        extra = {k: v for k, v in context.items() if k != "duration_ms"}
        bound.info(
            f"END: {operation} ({duration_ms:.1f} ms)",
            phase="end",
            duration_ms=duration_ms,
            **{**metadata, **extra},
        )
