"""Configuration for the project synthesis engine."""

from project_synth.config.exceptions import ConfigError
from project_synth.config.settings import ENV_PREFIX, Settings, load_settings

__all__ = [
    "ConfigError",
    "ENV_PREFIX",
    "Settings",
    "load_settings",
]
