"""Exceptions for configuration loading."""


class ConfigError(Exception):
    """Raised when environment configuration is invalid."""
