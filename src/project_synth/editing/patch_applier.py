"""Applies SEARCH/REPLACE patch blocks to file content."""

import logging

from pydantic import BaseModel, ConfigDict, Field

from project_synth.models import PatchBlock

logger = logging.getLogger(__name__)


class PatchOutcome(BaseModel):
    """New content plus a record of which blocks took effect."""

    model_config = ConfigDict(frozen=False)

    content: str
    applied: list[int] = Field(default_factory=list)  # Block indexes, exact or fuzzy
    fuzzy: list[int] = Field(default_factory=list)  # Subset of applied
    skipped: list[int] = Field(default_factory=list)

    @property
    def fully_applied(self) -> bool:
        return not self.skipped


def _normalized_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n")]


def _trim_blank_edges(lines: list[str]) -> list[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start]:
        start += 1
    while end > start and not lines[end - 1]:
        end -= 1
    return lines[start:end]


def find_normalized_range(content: str, search: str) -> tuple[int, int] | None:
    """Locate ``search`` in ``content`` ignoring per-line surrounding whitespace.

    Both texts are normalized by trimming each line, then the search lines are
    compared against whole-line windows of the content. A window never starts
    or ends mid-line. The first occurrence wins.

    Returns:
        (first_line, last_line_exclusive) in the original content, or None.
    """
    search_lines = _trim_blank_edges(_normalized_lines(search))
    if not search_lines:
        return None

    content_lines = _normalized_lines(content)
    size = len(search_lines)
    for first_line in range(len(content_lines) - size + 1):
        if content_lines[first_line:first_line + size] == search_lines:
            return first_line, first_line + size
    return None


def apply_block(content: str, block: PatchBlock) -> tuple[str, str | None]:
    """Apply one block.

    Returns:
        (new_content, mode) where mode is "exact", "fuzzy" or None when the
        search text could not be located.
    """
    if block.search:
        if block.search in content:
            return content.replace(block.search, block.replace, 1), "exact"
    elif not content:
        # Empty search against an empty file fills it.
        return block.replace, "exact"

    line_range = find_normalized_range(content, block.search)
    if line_range is None:
        return content, None

    first_line, last_line = line_range
    lines = content.split("\n")
    spliced = lines[:first_line] + block.replace.split("\n") + lines[last_line:]
    return "\n".join(spliced), "fuzzy"


def apply_patch_blocks(content: str, blocks: list[PatchBlock]) -> PatchOutcome:
    """Apply blocks in declaration order, each one working on the previous result.

    A block whose search text cannot be found is skipped; the remaining blocks
    still run.
    """
    outcome = PatchOutcome(content=content)
    for index, block in enumerate(blocks):
        updated, mode = apply_block(outcome.content, block)
        if mode is None:
            logger.warning(
                "Patch block %d skipped: search text not found (%d chars)",
                index,
                len(block.search),
            )
            outcome.skipped.append(index)
            continue
        outcome.content = updated
        outcome.applied.append(index)
        if mode == "fuzzy":
            outcome.fuzzy.append(index)
    return outcome


def apply_patch(existing_content: str, blocks: list[PatchBlock]) -> str:
    """Apply patch blocks to existing content and return the new content."""
    return apply_patch_blocks(existing_content, blocks).content
