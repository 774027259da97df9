"""Prompt text sent back to the model: error corrections and project context."""

from project_synth.correction.exceptions import CorrectionError
from project_synth.models import Diagnostic
from project_synth.store import ProjectStore

DEFAULT_MAX_FILE_CHARS = 2000
DEFAULT_MAX_TOTAL_CHARS = 12000
TRUNCATION_MARKER = "\n... (truncated)"
LISTED_ONLY_MARKER = "[Content too large, listed only]"
# Budget charged for a file listed by name only.
LISTED_ONLY_COST = 50

EDIT_INSTRUCTIONS = """Fix these errors. Only touch the files that actually need changes and keep the fixes minimal.
- For a small change, use [EDIT_FILE: path] followed by one or more blocks of the form:
<<<<<<< SEARCH
exact lines to find
=======
replacement lines
>>>>>>> REPLACE
- To rewrite a whole file, use [EDIT_FILE: path] followed by a code block with the complete new content.
- To add a file, use [NEW_FILE: path] followed by a code block.
- To remove a file, use [DELETE_FILE: path]."""

CONTEXT_INSTRUCTIONS = """CRITICAL INSTRUCTIONS FOR EDITING:
- This project already has files. Do NOT regenerate files that don't need changes.
- To modify part of an existing file, use [EDIT_FILE: path] followed by SEARCH/REPLACE blocks.
- To replace an existing file, use [EDIT_FILE: path] followed by a code block with the COMPLETE updated content.
- To create a new file, use [NEW_FILE: path] followed by a code block.
- To delete a file, use [DELETE_FILE: path]
- ONLY include files that actually need changes. Leave unchanged files alone.
- NEVER use "// filename:" markers when editing existing projects. Always use [EDIT_FILE:] or [NEW_FILE:]."""


def build_correction_prompt(diagnostics: list[Diagnostic], store: ProjectStore) -> str:
    """Build the request asking the model to fix preview failures.

    Lists each diagnostic with its kind, then the full content of every
    current file, then the editing rules.

    Raises:
        CorrectionError: If there are no diagnostics to report.
    """
    if not diagnostics:
        raise CorrectionError("Cannot build a correction prompt without diagnostics")

    error_list = "\n".join(f"- [{d.kind.value}] {d.message}" for d in diagnostics)
    file_list = "\n\n".join(f"--- {record.path} ---\n{record.content}" for record in store.records())
    return (
        "The following errors were detected in the preview:\n\n"
        f"{error_list}\n\n"
        "Current project files:\n"
        f"{file_list}\n\n"
        f"{EDIT_INSTRUCTIONS}"
    )


def build_file_context_prompt(
    store: ProjectStore,
    max_file_chars: int = DEFAULT_MAX_FILE_CHARS,
    max_total_chars: int = DEFAULT_MAX_TOTAL_CHARS,
) -> str:
    """Describe the existing project so a follow-up request edits instead of regenerating.

    Each file is cut at ``max_file_chars``. Once ``max_total_chars`` would be
    exceeded, remaining files are listed by name only. Returns an empty string
    for an empty project.
    """
    if store.is_empty:
        return ""

    total = 0
    sections = []
    for record in store.records():
        line_count = len(record.content.split("\n"))
        header = f"--- {record.path} ({record.kind.value}, {line_count} lines) ---"
        content = record.content
        if len(content) > max_file_chars:
            content = content[:max_file_chars] + TRUNCATION_MARKER
        if total + len(content) > max_total_chars:
            total += LISTED_ONLY_COST
            sections.append(f"{header}\n{LISTED_ONLY_MARKER}")
            continue
        total += len(content)
        sections.append(f"{header}\n{content}")

    return (
        f"\n\nEXISTING PROJECT FILES ({len(store)} files):\n"
        + "\n\n".join(sections)
        + f"\n\n{CONTEXT_INSTRUCTIONS}"
    )
