"""Exceptions for diagnostics and correction prompts."""


class CorrectionError(Exception):
    """Base exception for all correction operations."""


class DiagnosticPayloadError(CorrectionError):
    """Raised when a bridge message is not a well-formed console message."""
