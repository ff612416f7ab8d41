"""YAML configuration for timetally.

Supports:
- Defaults built into the package
- User overrides from timetally.yaml
- Environment variable overrides (TIMETALLY_*)
- Nested key access with dot notation

The resulting mapping is folded into :class:`~timetally.config.settings.Settings`
by :func:`settings_from_config`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from ..config.settings import ConfigError, Settings

__all__ = ["DEFAULTS", "Config", "load_config", "save_config", "settings_from_config"]

DEFAULTS: dict[str, Any] = {
    "source": {"entries_path": None, "api_url": None, "timeout": 10.0},
    "report": {"timezone": "UTC", "period": "week"},
    "csv": {"date_format": None, "time_format": "%H:%M", "output_dir": "output"},
    "logging": {"level": "INFO", "dir": None},
}


class Config:
    """Configuration with defaults, overrides, and env vars.

    Configuration priority (highest to lowest):
    1. Environment variables (TIMETALLY_*)
    2. User config (timetally.yaml)
    3. Defaults

    Example:
        >>> config = Config.load()
        >>> config.get("report.timezone", "UTC")
        'UTC'
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """Load configuration from file and environment.

        Parameters
        ----------
        config_path
            Path to user config file (default: timetally.yaml)

        Raises
        ------
        ConfigError
            If the config file exists but is not valid YAML
        """
        if config_path is None:
            config_path = Path("timetally.yaml")

        user_config = cls._load_yaml_file(config_path) if Path(config_path).exists() else {}

        merged = cls._deep_merge(DEFAULTS, user_config)
        merged = cls._apply_env_overrides(merged)

        return cls(merged)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Supports dot notation for nested keys:
        - "report.timezone" → config["report"]["timezone"]
        """
        parts = key.split(".")
        value = self._data

        for part in parts:
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value by key (dot notation)."""
        parts = key.split(".")
        data = self._data

        for part in parts[:-1]:
            if part not in data:
                data[part] = {}
            data = data[part]

        data[parts[-1]] = value

    def to_dict(self) -> dict[str, Any]:
        return self._data.copy()

    @staticmethod
    def _load_yaml_file(path: str | Path) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse config {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")
        return data

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        result = {key: (value.copy() if isinstance(value, dict) else value) for key, value in base.items()}

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides.

        Example: TIMETALLY_DEFAULT_TZ overrides config["report"]["timezone"]
        """
        result = config.copy()

        env_mappings = {
            "TIMETALLY_ENTRIES_PATH": "source.entries_path",
            "TIMETALLY_API_URL": "source.api_url",
            "TIMETALLY_HTTP_TIMEOUT": "source.timeout",
            "TIMETALLY_DEFAULT_TZ": "report.timezone",
            "TIMETALLY_DEFAULT_PERIOD": "report.period",
            "TIMETALLY_CSV_DATE_FORMAT": "csv.date_format",
            "TIMETALLY_CSV_TIME_FORMAT": "csv.time_format",
            "TIMETALLY_OUTPUT_DIR": "csv.output_dir",
            "TIMETALLY_LOG_LEVEL": "logging.level",
            "TIMETALLY_LOG_DIR": "logging.dir",
        }

        for env_var, config_key in env_mappings.items():
            value: Any = os.environ.get(env_var)
            if value is not None:
                if config_key.endswith("timeout"):
                    try:
                        value = float(value)
                    except ValueError:
                        pass

                parts = config_key.split(".")
                data = result
                for part in parts[:-1]:
                    data[part] = dict(data.get(part) or {})
                    data = data[part]
                data[parts[-1]] = value

        return result


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration (file + env)."""
    return Config.load(config_path=config_path)


def save_config(config: Config | dict[str, Any], config_path: str | Path | None = None) -> Path:
    """Write configuration to YAML and return the path."""
    if config_path is None:
        config_path = "timetally.yaml"

    data = config.to_dict() if isinstance(config, Config) else config

    path = Path(config_path)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return path


def settings_from_config(config: Config, *, api_token: str | None = None) -> Settings:
    """Build :class:`Settings` from a loaded :class:`Config`."""
    entries_path = config.get("source.entries_path")
    log_dir = config.get("logging.dir")

    try:
        return Settings(
            entries_path=Path(entries_path) if entries_path else None,
            api_url=config.get("source.api_url") or None,
            api_token=api_token or os.environ.get("TIMETALLY_API_TOKEN") or None,
            default_timezone=config.get("report.timezone", "UTC"),
            default_period=config.get("report.period", "week"),
            csv_date_format=config.get("csv.date_format") or None,
            csv_time_format=config.get("csv.time_format", "%H:%M"),
            output_dir=Path(config.get("csv.output_dir", "output")),
            http_timeout=float(config.get("source.timeout", 10.0)),
            log_level=str(config.get("logging.level", "INFO")).upper(),
            log_dir=Path(log_dir) if log_dir else None,
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
