"""Surgical edits to existing file content."""

from project_synth.editing.patch_applier import (
    PatchOutcome,
    apply_block,
    apply_patch,
    apply_patch_blocks,
    find_normalized_range,
)

__all__ = [
    "PatchOutcome",
    "apply_block",
    "apply_patch",
    "apply_patch_blocks",
    "find_normalized_range",
]
