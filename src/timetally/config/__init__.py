"""Settings for timetally."""

from .settings import ConfigError, Settings, generate_example_env, get_settings, load_env_file, load_settings

__all__ = [
    "ConfigError",
    "Settings",
    "generate_example_env",
    "get_settings",
    "load_env_file",
    "load_settings",
]
