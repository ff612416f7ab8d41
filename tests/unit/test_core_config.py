"""Tests for YAML configuration."""

import os
from pathlib import Path

import pytest

from timetally.config.settings import ConfigError
from timetally.core.config import DEFAULTS, Config, load_config, save_config, settings_from_config


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    for var in [k for k in os.environ if k.startswith("TIMETALLY_")]:
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path)


def test_load_without_file_uses_defaults():
    config = Config.load()

    assert config.get("report.timezone") == "UTC"
    assert config.get("report.period") == "week"
    assert config.get("csv.time_format") == "%H:%M"
    assert config.get("source.entries_path") is None


def test_get_missing_key_returns_default():
    config = Config.load()

    assert config.get("report.missing", "fallback") == "fallback"
    assert config.get("nope.deeper") is None


def test_user_file_deep_merges_over_defaults(tmp_path):
    path = tmp_path / "timetally.yaml"
    path.write_text("report:\n  timezone: Europe/Brussels\ncsv:\n  date_format: '%Y-%m-%d'\n", encoding="utf-8")

    config = load_config(path)

    assert config.get("report.timezone") == "Europe/Brussels"
    assert config.get("report.period") == "week"
    assert config.get("csv.date_format") == "%Y-%m-%d"
    assert config.get("csv.output_dir") == "output"


def test_defaults_are_not_mutated(tmp_path):
    path = tmp_path / "timetally.yaml"
    path.write_text("report:\n  period: month\n", encoding="utf-8")

    load_config(path)

    assert DEFAULTS["report"]["period"] == "week"


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "timetally.yaml"
    path.write_text("report:\n  timezone: Europe/Brussels\n", encoding="utf-8")
    monkeypatch.setenv("TIMETALLY_DEFAULT_TZ", "Asia/Tokyo")
    monkeypatch.setenv("TIMETALLY_HTTP_TIMEOUT", "3")

    config = load_config(path)

    assert config.get("report.timezone") == "Asia/Tokyo"
    assert config.get("source.timeout") == 3.0


def test_invalid_yaml_raises_config_error(tmp_path):
    path = tmp_path / "timetally.yaml"
    path.write_text("report: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(path)


def test_non_mapping_yaml_raises_config_error(tmp_path):
    path = tmp_path / "timetally.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="must be a mapping"):
        load_config(path)


def test_set_creates_nested_keys():
    config = Config()

    config.set("report.timezone", "Europe/Brussels")

    assert config.to_dict() == {"report": {"timezone": "Europe/Brussels"}}


def test_save_and_reload(tmp_path):
    config = Config.load()
    config.set("source.entries_path", "entries.json")
    path = tmp_path / "saved.yaml"

    save_config(config, path)

    assert load_config(path).get("source.entries_path") == "entries.json"


def test_settings_from_config(tmp_path):
    path = tmp_path / "timetally.yaml"
    path.write_text(
        "source:\n  entries_path: data/entries.json\n  timeout: 4\n"
        "report:\n  timezone: America/New_York\n  period: day\n"
        "logging:\n  level: debug\n  dir: logs\n",
        encoding="utf-8",
    )

    settings = settings_from_config(load_config(path), api_token="t0k")

    assert settings.entries_path == Path("data/entries.json")
    assert settings.default_timezone == "America/New_York"
    assert settings.default_period == "day"
    assert settings.http_timeout == 4.0
    assert settings.log_level == "DEBUG"
    assert settings.log_dir == Path("logs")
    assert settings.api_token == "t0k"


def test_settings_from_config_invalid_values(tmp_path):
    path = tmp_path / "timetally.yaml"
    path.write_text("report:\n  period: fortnight\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid period"):
        settings_from_config(load_config(path))
