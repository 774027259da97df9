"""Response parsing: language classification, marker matching, code blocks."""

from project_synth.parsing.block_parser import (
    has_explicit_markers,
    has_legacy_markers,
    parse,
    parse_response,
    strip_markers,
)
from project_synth.parsing.code_blocks import (
    CodeBlock,
    extract_code_blocks,
    is_renderable,
    virtual_files_from_blocks,
)
from project_synth.parsing.exceptions import InvalidPathError, ParsingError
from project_synth.parsing.languages import kind_for_fence, kind_for_path, resolve_kind
from project_synth.parsing.paths import is_network_url, normalize_path

__all__ = [
    "CodeBlock",
    "InvalidPathError",
    "ParsingError",
    "extract_code_blocks",
    "has_explicit_markers",
    "has_legacy_markers",
    "is_network_url",
    "is_renderable",
    "kind_for_fence",
    "kind_for_path",
    "normalize_path",
    "parse",
    "parse_response",
    "resolve_kind",
    "strip_markers",
    "virtual_files_from_blocks",
]
