"""Exceptions for response parsing.

The parser itself never raises out of ``parse``; these are used internally to
reject individual markers.
"""


class ParsingError(Exception):
    """Base exception for all parsing operations."""


class InvalidPathError(ParsingError):
    """Raised when a marker names a path that cannot be normalized."""
