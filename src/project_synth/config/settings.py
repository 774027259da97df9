"""Engine settings, loaded from ``PROJECT_SYNTH_*`` environment variables."""

import os
from typing import Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from project_synth.config.exceptions import ConfigError

ENV_PREFIX = "PROJECT_SYNTH_"
MAX_CORRECTION_ATTEMPTS_LIMIT = 10

DEFAULT_REACT_URL = "https://unpkg.com/react@18/umd/react.development.js"
DEFAULT_REACT_DOM_URL = "https://unpkg.com/react-dom@18/umd/react-dom.development.js"
DEFAULT_BABEL_URL = "https://unpkg.com/@babel/standalone/babel.min.js"
DEFAULT_TAILWIND_URL = "https://cdn.tailwindcss.com"


class Settings(BaseModel):
    """Runtime configuration for parsing, preview and correction."""

    max_correction_attempts: int = Field(3, description="Automatic corrections per session")
    allow_same_origin: bool = Field(False, description="Grant the preview same-origin privileges")
    log_level: str = Field("WARNING", description="Level used by the CLI logging setup")
    max_console_entries: int = Field(200, gt=0, description="Console entries kept per preview")
    context_max_file_chars: int = Field(2000, gt=0, description="Per-file cap in context prompts")
    context_max_total_chars: int = Field(12000, gt=0, description="Total cap in context prompts")
    react_url: str = DEFAULT_REACT_URL
    react_dom_url: str = DEFAULT_REACT_DOM_URL
    babel_url: str = DEFAULT_BABEL_URL
    tailwind_url: str = DEFAULT_TAILWIND_URL

    @field_validator("max_correction_attempts")
    @classmethod
    def clamp_attempts(cls, v: int) -> int:
        return max(1, min(v, MAX_CORRECTION_ATTEMPTS_LIMIT))

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {v!r}")
        return level

    @field_validator("react_url", "react_dom_url", "babel_url", "tailwind_url")
    @classmethod
    def require_absolute_url(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"library URLs must be absolute, got {v!r}")
        return v


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``PROJECT_SYNTH_<FIELD>`` variables.

    Args:
        environ: Mapping to read instead of ``os.environ``.

    Raises:
        ConfigError: If a variable holds an invalid value.
    """
    environ = os.environ if environ is None else environ
    values = {}
    for name in Settings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw != "":
            values[name] = raw
    try:
        return Settings(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid {ENV_PREFIX}* configuration: {exc}") from exc
