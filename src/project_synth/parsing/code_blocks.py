"""Anonymous code blocks: fenced blocks in a response that carry no filename."""

import re

from pydantic import BaseModel, ConfigDict

from project_synth.models import FileRecord
from project_synth.parsing.languages import (
    FENCE_EXTENSIONS,
    RENDERABLE_FENCES,
    resolve_kind,
)

_CODE_BLOCK = re.compile(r"```(\w+)?[^\n]*\n(.*?)```", re.DOTALL)


class CodeBlock(BaseModel):
    """A fenced code block and its (lower-cased) language annotation."""

    model_config = ConfigDict(frozen=True)

    language: str
    code: str


def extract_code_blocks(text: str) -> list[CodeBlock]:
    """Extract every non-empty fenced code block from a response.

    Blocks without an annotation get the language "text".
    """
    blocks: list[CodeBlock] = []
    for match in _CODE_BLOCK.finditer(text):
        code = match.group(2).strip()
        if code:
            blocks.append(CodeBlock(language=(match.group(1) or "text").lower(), code=code))
    return blocks


def is_renderable(blocks: list[CodeBlock]) -> bool:
    """Return True if at least one block is in a language the preview can render."""
    return any(block.language in RENDERABLE_FENCES for block in blocks)


def virtual_files_from_blocks(blocks: list[CodeBlock]) -> dict[str, FileRecord]:
    """Name renderable anonymous blocks so they can join the project.

    A single renderable block becomes ``index.<ext>``; several become
    ``file1.<ext>``, ``file2.<ext>`` and so on, numbered in response order.
    Blocks in languages the preview cannot render are ignored.
    """
    renderable = [block for block in blocks if block.language in RENDERABLE_FENCES]
    files: dict[str, FileRecord] = {}
    for position, block in enumerate(renderable, start=1):
        extension = FENCE_EXTENSIONS.get(block.language, "js")
        name = f"index.{extension}" if len(renderable) == 1 else f"file{position}.{extension}"
        files[name] = FileRecord(
            path=name,
            content=block.code,
            kind=resolve_kind(name, block.language),
        )
    return files
