"""Unified diffs between two versions of a project file."""

import difflib


def generate_unified_diff(
    file_path: str,
    original_content: str,
    modified_content: str,
) -> str:
    """Generate a git-style unified diff for one file.

    Args:
        file_path: Project path (e.g. "src/App.jsx").
        original_content: Content before the edit ("" for a new file).
        modified_content: Content after the edit ("" for a deleted file).

    Returns:
        Unified diff with a/ b/ prefixes. Empty string if nothing changed.
    """
    if original_content == modified_content:
        return ""

    hunks = difflib.unified_diff(
        original_content.splitlines(keepends=True),
        modified_content.splitlines(keepends=True),
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
        lineterm="",
    )
    # Body lines still carry their newline; headers do not
    return "\n".join(line[:-1] if line.endswith("\n") else line for line in hunks)
