"""Utilities for the project synthesis engine."""

from project_synth.utils.diff_generator import generate_unified_diff

__all__ = [
    "generate_unified_diff",
]
