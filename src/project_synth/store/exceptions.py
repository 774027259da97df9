"""Exceptions for project store operations."""


class StoreError(Exception):
    """Base exception for all project store operations."""


class ProjectImportError(StoreError):
    """Raised when an exported project payload cannot be read back."""
