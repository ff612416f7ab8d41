"""Centralized configuration for timetally.

Loads configuration from a .env file and the environment and provides typed
access to settings. A fresh checkout runs with a single .env; missing or
invalid config produces clear errors.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import pytz

from ..core.periods import PERIODS

__all__ = [
    "ConfigError",
    "Settings",
    "generate_example_env",
    "get_settings",
    "load_env_file",
    "load_settings",
]


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""

    pass


@dataclass
class Settings:
    """Centralized settings for timetally.

    Attributes
    ----------
    entries_path : Path | None
        JSON entries document used as the entry source
    api_url : str | None
        Base URL of the time-tracking web app (uses /api/reports/entries)
    api_token : str | None
        Bearer token sent to the web app
    default_timezone : str
        Timezone reports are computed in
    default_period : str
        Period used when none is given
    csv_date_format : str | None
        strftime pattern for the CSV Date column (default M/D/YYYY)
    csv_time_format : str
        strftime pattern for the CSV Time column
    output_dir : Path
        Directory CSV exports are written to
    http_timeout : float
        Timeout for web app requests in seconds
    log_level : str
        Logging level
    log_dir : Path | None
        Directory for JSONL log files (console only if unset)
    """

    entries_path: Path | None = None
    api_url: str | None = None
    api_token: str | None = None

    default_timezone: str = "UTC"
    default_period: str = "week"

    # CSV export
    csv_date_format: str | None = None
    csv_time_format: str = "%H:%M"
    output_dir: Path = Path("output")

    http_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.entries_path and isinstance(self.entries_path, str):
            self.entries_path = Path(self.entries_path)
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        if self.log_dir and isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)

        if self.default_timezone not in pytz.all_timezones_set:
            raise ConfigError(
                f"Invalid timezone '{self.default_timezone}'. "
                "Set TIMETALLY_DEFAULT_TZ to an IANA name (e.g., Europe/Brussels)"
            )

        if self.default_period not in PERIODS:
            raise ConfigError(
                f"Invalid period '{self.default_period}'. "
                f"TIMETALLY_DEFAULT_PERIOD must be one of: {', '.join(PERIODS)}"
            )

        if self.http_timeout <= 0:
            raise ConfigError("TIMETALLY_HTTP_TIMEOUT must be positive")

    @property
    def has_source(self) -> bool:
        return bool(self.entries_path or self.api_url)

    def require_source(self) -> None:
        """Raise a clear error when no entry source is configured."""
        if not self.has_source:
            raise ConfigError(
                "No entry source configured.\n\n"
                "Quick fix:\n"
                "  1. Set TIMETALLY_ENTRIES_PATH=entries.json for a local export, or\n"
                "  2. Set TIMETALLY_API_URL=http://localhost:3000 for the web app\n\n"
                "Or pass --entries / --api-url on the command line"
            )

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> Settings:
        """Load settings from environment.

        Loads from .env file if present, then reads ``TIMETALLY_*`` variables.

        Raises
        ------
        ConfigError
            If settings are invalid
        """
        if env_file is None:
            env_file = Path(".env")

        if isinstance(env_file, str):
            env_file = Path(env_file)

        if env_file.exists():
            load_env_file(env_file)

        try:
            return cls(
                entries_path=Path(os.environ["TIMETALLY_ENTRIES_PATH"])
                if os.environ.get("TIMETALLY_ENTRIES_PATH")
                else None,
                api_url=os.environ.get("TIMETALLY_API_URL") or None,
                api_token=os.environ.get("TIMETALLY_API_TOKEN") or None,
                default_timezone=os.environ.get("TIMETALLY_DEFAULT_TZ", "UTC"),
                default_period=os.environ.get("TIMETALLY_DEFAULT_PERIOD", "week"),
                csv_date_format=os.environ.get("TIMETALLY_CSV_DATE_FORMAT") or None,
                csv_time_format=os.environ.get("TIMETALLY_CSV_TIME_FORMAT", "%H:%M"),
                output_dir=Path(os.environ.get("TIMETALLY_OUTPUT_DIR", "output")),
                http_timeout=float(os.environ.get("TIMETALLY_HTTP_TIMEOUT", "10.0")),
                log_level=os.environ.get("TIMETALLY_LOG_LEVEL", "INFO").upper(),
                log_dir=Path(os.environ["TIMETALLY_LOG_DIR"]) if os.environ.get("TIMETALLY_LOG_DIR") else None,
            )

        except (ValueError, KeyError) as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_env_file(env_file: Path) -> None:
    """Load environment variables from .env file.

    Existing variables are overwritten.
    """
    with open(env_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            if "=" in line:
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()

                if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                    value = value[1:-1]

                os.environ[key] = value


# Global settings instance
_settings: Settings | None = None


def load_settings(env_file: Path | str | None = None) -> Settings:
    """Load settings from environment and cache them.

    Raises
    ------
    ConfigError
        If settings are invalid
    """
    global _settings
    _settings = Settings.from_env(env_file)
    return _settings


def get_settings() -> Settings:
    """Get current settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def generate_example_env(output_path: Path | None = None) -> str:
    """Generate example .env file with all settings.

    Parameters
    ----------
    output_path
        Optional path to write .env file

    Returns
    -------
    str
        Example .env contents
    """
    example = """# timetally configuration
# Copy this to .env and adjust values

# ====================
# Entry source (one is required)
# ====================

# JSON export of time entries (the /api/reports/entries response shape)
TIMETALLY_ENTRIES_PATH=entries.json

# Base URL of the time-tracking web app
# TIMETALLY_API_URL=http://localhost:3000
# TIMETALLY_API_TOKEN=

# Request timeout in seconds (optional, default: 10)
TIMETALLY_HTTP_TIMEOUT=10

# ====================
# Reports
# ====================

# Timezone reports are computed in (optional, default: UTC)
# Examples: UTC, America/New_York, Europe/Brussels
TIMETALLY_DEFAULT_TZ=UTC

# Default period: day, week or month (optional, default: week)
TIMETALLY_DEFAULT_PERIOD=week

# CSV Date column strftime pattern (optional, default: M/D/YYYY)
# TIMETALLY_CSV_DATE_FORMAT=%Y-%m-%d

# CSV Time column strftime pattern (optional, default: %H:%M)
TIMETALLY_CSV_TIME_FORMAT=%H:%M

# Directory for CSV exports (optional, default: output)
TIMETALLY_OUTPUT_DIR=output

# ====================
# Logging
# ====================

# Log level (optional, default: INFO)
# Options: DEBUG, INFO, WARNING, ERROR, CRITICAL
TIMETALLY_LOG_LEVEL=INFO

# Directory for JSONL log files (optional, console only if not set)
# TIMETALLY_LOG_DIR=logs
"""

    if output_path:
        output_path.write_text(example, encoding="utf-8")

    return example
