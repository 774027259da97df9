"""Extracts file operations from free-form AI responses.

Each marker format has its own matcher function. A matcher scans the whole
response and returns MarkerMatch objects (one operation plus the span of text
it consumed). The parser runs the matchers in priority order and keeps a
candidate only if its span does not overlap one already accepted:

1. ``[EDIT_FILE: path]`` followed by SEARCH/REPLACE blocks
2. ``[NEW_FILE: path]`` / ``[EDIT_FILE: path]`` followed by a fenced block
3. ``[DELETE_FILE: path]``

Legacy filename markers are only consulted when none of the explicit markers
appear anywhere in the response. Parsing never raises: text that matches no
marker is ordinary prose.
"""

import logging
import re
from typing import Callable

from project_synth.models import (
    DeleteFile,
    FileOperation,
    MarkerMatch,
    NewFile,
    ParsedResponse,
    PatchBlock,
    PatchFile,
    ReplaceFile,
    ResponseSource,
)
from project_synth.parsing.exceptions import InvalidPathError
from project_synth.parsing.languages import kind_for_fence
from project_synth.parsing.paths import normalize_path

logger = logging.getLogger(__name__)

Matcher = Callable[[str], list[MarkerMatch]]

# A fenced code block; the closing fence must start its own line.
FENCE = r"```(?P<lang>[\w+#.-]*)[^\n]*\n(?P<body>.*?)^[ \t]*```[ \t]*$"

_EXPLICIT_MARKER = re.compile(r"\[(?:NEW_FILE|EDIT_FILE|DELETE_FILE):")

_EDIT_HEADER = re.compile(
    r"^[ \t]*\[EDIT_FILE:[ \t]*(?P<path>[^\]\n]+?)[ \t]*\][ \t]*$",
    re.MULTILINE,
)
_PATCH_BLOCK = re.compile(
    r"<<<<<<< SEARCH[ \t]*\n(?P<search>.*?)^=======[ \t]*\n(?P<replace>.*?)^>>>>>>> REPLACE[ \t]*$",
    re.MULTILINE | re.DOTALL,
)
_FENCE_OPEN = re.compile(r"```[^\n]*\n")
_FENCE_CLOSE = re.compile(r"\s*```[ \t]*$", re.MULTILINE)
_WHITESPACE = re.compile(r"\s*")

_WHOLE_FILE = re.compile(
    r"^[ \t]*\[(?P<marker>NEW_FILE|EDIT_FILE):[ \t]*(?P<path>[^\]\n]+?)[ \t]*\][ \t]*\n\s*" + FENCE,
    re.MULTILINE | re.DOTALL,
)
_DELETE = re.compile(r"\[DELETE_FILE:[ \t]*(?P<path>[^\]\n]+?)[ \t]*\]")

_FILENAME_COMMENT = re.compile(
    r"^[ \t]*(?://|#)[ \t]*filename:[ \t]*(?P<path>[^\n]+?)[ \t]*\n\s*" + FENCE,
    re.MULTILINE | re.DOTALL | re.IGNORECASE,
)
_HTML_COMMENT = re.compile(
    r"<!--[ \t]*filename:[ \t]*(?P<path>[^\n]+?)[ \t]*-->[ \t]*\n\s*" + FENCE,
    re.MULTILINE | re.DOTALL | re.IGNORECASE,
)
_BOLD_FILENAME = re.compile(
    r"\*\*`?(?P<path>[^`*\n]+\.\w+)`?\*\*:?[ \t]*\n\s*" + FENCE,
    re.MULTILINE | re.DOTALL,
)
_HEADING_FILENAME = re.compile(
    r"^[ \t]*#{1,6}[ \t]*`?(?P<path>[^`\n]+\.\w+)`?:?[ \t]*\n\s*" + FENCE,
    re.MULTILINE | re.DOTALL,
)
# Routing-style marker: a comment line holding nothing but a path.
_PATH_COMMENT = re.compile(
    r"^[ \t]*(?://|--|;)[ \t]*(?P<path>[\w@+.-]+(?:/[\w@+.-]+)*\.\w+)[ \t]*\n\s*" + FENCE,
    re.MULTILINE | re.DOTALL,
)
_ANY_FENCE = re.compile(FENCE, re.MULTILINE | re.DOTALL)
_IN_BLOCK_FILENAME = re.compile(r"\A[ \t]*//[ \t]*filename:[ \t]*(?P<path>[^\n]+?)[ \t]*(?:\n|\Z)")

_FILENAME_TOKEN = re.compile(r"[\w@+./-]*\w\.\w+")
_BLANK_RUNS = re.compile(r"\n{3,}")


def _safe_path(raw_path: str) -> str | None:
    try:
        return normalize_path(raw_path)
    except InvalidPathError as exc:
        logger.warning("Ignoring marker with unusable path: %s", exc)
        return None


def _filename_from_label(label: str) -> str | None:
    """Pull the filename out of a heading or bold label like "1. `src/app.js`"."""
    tokens = _FILENAME_TOKEN.findall(label)
    if not tokens:
        return None
    return _safe_path(tokens[-1])


def _drop_trailing_newline(value: str) -> str:
    if value.endswith("\r\n"):
        return value[:-2]
    if value.endswith("\n"):
        return value[:-1]
    return value


def _skip_whitespace(text: str, pos: int) -> int:
    return _WHITESPACE.match(text, pos).end()


# ---------------------------------------------------------------------------
# Explicit markers
# ---------------------------------------------------------------------------

def match_patch_edits(text: str) -> list[MarkerMatch]:
    """Match ``[EDIT_FILE: path]`` headers followed by SEARCH/REPLACE blocks.

    The blocks may optionally be wrapped in a single code fence.
    """
    matches: list[MarkerMatch] = []
    for header in _EDIT_HEADER.finditer(text):
        pos = _skip_whitespace(text, header.end())
        fenced = False
        fence = _FENCE_OPEN.match(text, pos)
        if fence is not None:
            inner = _skip_whitespace(text, fence.end())
            if _PATCH_BLOCK.match(text, inner) is not None:
                fenced = True
                pos = inner

        blocks: list[PatchBlock] = []
        end = pos
        while True:
            block = _PATCH_BLOCK.match(text, pos)
            if block is None:
                break
            blocks.append(
                PatchBlock(
                    search=_drop_trailing_newline(block.group("search")),
                    replace=_drop_trailing_newline(block.group("replace")),
                )
            )
            end = block.end()
            pos = _skip_whitespace(text, end)

        if not blocks:
            continue
        if fenced:
            closing = _FENCE_CLOSE.match(text, end)
            if closing is not None:
                end = closing.end()

        path = _safe_path(header.group("path"))
        if path is None:
            continue
        matches.append(
            MarkerMatch(
                operation=PatchFile(path=path, blocks=blocks),
                start=header.start(),
                end=end,
            )
        )
    return matches


def match_whole_file_markers(text: str) -> list[MarkerMatch]:
    """Match ``[NEW_FILE: path]`` / ``[EDIT_FILE: path]`` followed by a fenced block."""
    matches: list[MarkerMatch] = []
    for match in _WHOLE_FILE.finditer(text):
        path = _safe_path(match.group("path"))
        if path is None:
            continue
        content = match.group("body").strip()
        kind = kind_for_fence(match.group("lang"))
        if match.group("marker") == "NEW_FILE":
            operation = NewFile(path=path, content=content, kind=kind)
        else:
            operation = ReplaceFile(path=path, content=content, kind=kind)
        matches.append(MarkerMatch(operation=operation, start=match.start(), end=match.end()))
    return matches


def match_delete_markers(text: str) -> list[MarkerMatch]:
    """Match ``[DELETE_FILE: path]`` markers (no body)."""
    matches: list[MarkerMatch] = []
    for match in _DELETE.finditer(text):
        path = _safe_path(match.group("path"))
        if path is None:
            continue
        matches.append(
            MarkerMatch(operation=DeleteFile(path=path), start=match.start(), end=match.end())
        )
    return matches


# ---------------------------------------------------------------------------
# Legacy markers
# ---------------------------------------------------------------------------

def _legacy_matcher(pattern: re.Pattern, from_label: bool = False) -> Matcher:
    def matcher(text: str) -> list[MarkerMatch]:
        matches: list[MarkerMatch] = []
        for match in pattern.finditer(text):
            raw_path = match.group("path")
            path = _filename_from_label(raw_path) if from_label else _safe_path(raw_path)
            if path is None:
                continue
            content = match.group("body").strip()
            if not content:
                continue
            operation = ReplaceFile(
                path=path,
                content=content,
                kind=kind_for_fence(match.group("lang")),
            )
            matches.append(MarkerMatch(operation=operation, start=match.start(), end=match.end()))
        return matches

    return matcher


match_filename_comments = _legacy_matcher(_FILENAME_COMMENT)
match_html_comment_markers = _legacy_matcher(_HTML_COMMENT)
match_bold_filenames = _legacy_matcher(_BOLD_FILENAME, from_label=True)
match_heading_filenames = _legacy_matcher(_HEADING_FILENAME, from_label=True)
match_path_comments = _legacy_matcher(_PATH_COMMENT)


def match_in_block_filenames(text: str) -> list[MarkerMatch]:
    """Match code blocks whose first line is a ``// filename: path`` comment.

    The marker line is removed from the file content.
    """
    matches: list[MarkerMatch] = []
    for match in _ANY_FENCE.finditer(text):
        body = match.group("body")
        marker = _IN_BLOCK_FILENAME.match(body)
        if marker is None:
            continue
        path = _safe_path(marker.group("path"))
        if path is None:
            continue
        operation = ReplaceFile(
            path=path,
            content=body[marker.end():].strip(),
            kind=kind_for_fence(match.group("lang")),
        )
        matches.append(MarkerMatch(operation=operation, start=match.start(), end=match.end()))
    return matches


EXPLICIT_MATCHERS: tuple[Matcher, ...] = (
    match_patch_edits,
    match_whole_file_markers,
    match_delete_markers,
)

LEGACY_MATCHERS: tuple[Matcher, ...] = (
    match_filename_comments,
    match_html_comment_markers,
    match_bold_filenames,
    match_heading_filenames,
    match_path_comments,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def has_explicit_markers(text: str) -> bool:
    """Check whether the response uses any NEW_FILE/EDIT_FILE/DELETE_FILE marker."""
    return _EXPLICIT_MARKER.search(text) is not None


def has_legacy_markers(text: str) -> bool:
    """Check whether any legacy filename marker precedes a code block."""
    return any(matcher(text) for matcher in LEGACY_MATCHERS) or bool(match_in_block_filenames(text))


def _select(text: str, matchers: tuple[Matcher, ...]) -> tuple[list[MarkerMatch], list[MarkerMatch]]:
    """Run matchers in priority order.

    Returns:
        (accepted, consumed): accepted matches in document order, and every
        match whose span belongs to a marker (accepted or excluded duplicates).
    """
    accepted: list[MarkerMatch] = []
    consumed: list[MarkerMatch] = []
    patched_paths: set[str] = set()

    for matcher in matchers:
        for candidate in matcher(text):
            if any(candidate.overlaps(existing) for existing in accepted):
                continue
            operation = candidate.operation
            consumed.append(candidate)
            if isinstance(operation, (NewFile, ReplaceFile)) and operation.path in patched_paths:
                logger.debug("Dropping whole-file edit for %s: already patched", operation.path)
                continue
            if isinstance(operation, PatchFile):
                patched_paths.add(operation.path)
            accepted.append(candidate)

    accepted.sort(key=lambda item: item.start)
    return accepted, consumed


def collect_matches(text: str) -> tuple[list[MarkerMatch], list[MarkerMatch], ResponseSource]:
    """Find every marker in a response, honouring family and priority rules."""
    if has_explicit_markers(text):
        accepted, consumed = _select(text, EXPLICIT_MATCHERS)
        return accepted, consumed, ResponseSource.EXPLICIT

    accepted, consumed = _select(text, LEGACY_MATCHERS)
    if not accepted:
        accepted, consumed = _select(text, (match_in_block_filenames,))
    source = ResponseSource.LEGACY if accepted else ResponseSource.NONE
    return accepted, consumed, source


def strip_spans(text: str, matches: list[MarkerMatch]) -> str:
    """Remove the text consumed by matches, leaving the surrounding prose."""
    if not matches:
        return text

    pieces: list[str] = []
    cursor = 0
    for match in sorted(matches, key=lambda item: item.start):
        if match.start > cursor:
            pieces.append(text[cursor:match.start])
        cursor = max(cursor, match.end)
    pieces.append(text[cursor:])
    return _BLANK_RUNS.sub("\n\n", "".join(pieces)).strip()


def parse_response(text: str) -> ParsedResponse:
    """Parse an AI response into file operations and display text.

    Args:
        text: Raw response text.

    Returns:
        ParsedResponse with operations in document order, the response with
        all markers stripped, and which marker family was used. A response
        without markers yields no operations and its text unchanged.
        CRLF line endings are read as LF.
    """
    normalized = text.replace("\r\n", "\n")
    accepted, consumed, source = collect_matches(normalized)
    operations = [match.operation for match in accepted]
    if operations:
        logger.debug("Parsed %d %s operation(s)", len(operations), source.value)
    return ParsedResponse(
        operations=operations,
        clean_text=strip_spans(normalized, consumed) if consumed else text,
        source=source,
    )


def parse(text: str) -> list[FileOperation]:
    """Parse an AI response into an ordered list of FileOperation objects."""
    return parse_response(text).operations


def strip_markers(text: str) -> str:
    """Return the response with all recognized markers removed."""
    return parse_response(text).clean_text
