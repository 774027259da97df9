"""Rewrites ES module syntax so component files run as one global script.

The preview loads React, ReactDOM and Babel as globals, so import and
export statements are removed and declarations stay in place.
"""

import re
from pathlib import PurePosixPath

from project_synth.models import FileRecord

_IMPORT_FROM = re.compile(
    r"^[ \t]*import\s+(?:type\s+)?[\w$*{}\s,]+?\s+from\s*['\"][^'\"]+['\"][ \t]*;?[ \t]*$\n?",
    re.MULTILINE,
)
_IMPORT_SIDE_EFFECT = re.compile(r"^[ \t]*import\s*['\"][^'\"]+['\"][ \t]*;?[ \t]*$\n?", re.MULTILINE)

_EXPORT_LIST = re.compile(
    r"^[ \t]*export\s+(?:type\s+)?\{[^}]*\}\s*(?:from\s*['\"][^'\"]+['\"])?[ \t]*;?[ \t]*$\n?",
    re.MULTILINE,
)
_EXPORT_STAR = re.compile(
    r"^[ \t]*export\s*\*\s*(?:as\s+[\w$]+\s+)?from\s*['\"][^'\"]+['\"][ \t]*;?[ \t]*$\n?",
    re.MULTILINE,
)
_EXPORT_DEFAULT_NAME = re.compile(r"^[ \t]*export\s+default\s+[\w$.]+[ \t]*;?[ \t]*$\n?", re.MULTILINE)
_EXPORT_DEFAULT_ANONYMOUS_FUNCTION = re.compile(
    r"^([ \t]*)export\s+default\s+(async\s+)?function\s*(\*?)\s*\(", re.MULTILINE
)
_EXPORT_DEFAULT_ANONYMOUS_CLASS = re.compile(r"^([ \t]*)export\s+default\s+class\s*(\{|extends\b)", re.MULTILINE)
_EXPORT_DEFAULT_ARROW = re.compile(r"^([ \t]*)export\s+default\s+(?=(?:async\s*)?\()", re.MULTILINE)
_EXPORT_DEFAULT = re.compile(r"^([ \t]*)export\s+default\s+", re.MULTILINE)
_EXPORT_DECLARATION = re.compile(r"^([ \t]*)export\s+(?=[\w$])", re.MULTILINE)

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")

# Entry files run last, in this order, so they see every component.
ENTRY_STEMS = ("app", "index", "main")


def default_export_name(path: str) -> str | None:
    """Name for an anonymous default export, from the file stem."""
    stem = PurePosixPath(path).stem
    if not _IDENTIFIER.match(stem):
        return None
    return stem[0].upper() + stem[1:]


def _is_declared(source: str, name: str) -> bool:
    pattern = rf"\b(?:function\*?|class|const|let|var)\s+{re.escape(name)}\b"
    return re.search(pattern, source) is not None


def strip_module_syntax(source: str, default_name: str | None = None) -> str:
    """Remove import/export statements, keeping the declarations they wrap.

    Args:
        source: Module source text.
        default_name: Identifier given to an anonymous default export, when
            the module does not already declare it.
    """
    text = _IMPORT_FROM.sub("", source)
    text = _IMPORT_SIDE_EFFECT.sub("", text)
    text = _EXPORT_LIST.sub("", text)
    text = _EXPORT_STAR.sub("", text)
    text = _EXPORT_DEFAULT_NAME.sub("", text)

    name = default_name if default_name and not _is_declared(text, default_name) else None
    if name:
        text = _EXPORT_DEFAULT_ANONYMOUS_FUNCTION.sub(
            lambda m: f"{m.group(1)}{m.group(2) or ''}function{m.group(3)} {name}(", text
        )
        text = _EXPORT_DEFAULT_ANONYMOUS_CLASS.sub(lambda m: f"{m.group(1)}class {name} {m.group(2)}", text)
        text = _EXPORT_DEFAULT_ARROW.sub(lambda m: f"{m.group(1)}const {name} = ", text)

    text = _EXPORT_DEFAULT.sub(r"\1", text)
    text = _EXPORT_DECLARATION.sub(r"\1", text)
    return text.strip()


def _component_rank(record: FileRecord) -> tuple[int, int, str]:
    path = PurePosixPath(record.path.lower())
    if "components" in path.parts[:-1]:
        return (0, 0, record.path)
    if path.stem in ENTRY_STEMS:
        return (2, ENTRY_STEMS.index(path.stem), record.path)
    return (1, 0, record.path)


def order_component_files(records: list[FileRecord]) -> list[FileRecord]:
    """Order files so dependencies come before the files that use them.

    Files under a ``components`` folder come first, then all other files by
    path, then the entry files app, index and main.
    """
    return sorted(records, key=_component_rank)
