"""Maps file paths and code-fence annotations to a ContentKind."""

from pathlib import PurePosixPath

from project_synth.models import ContentKind

EXTENSION_KINDS: dict[str, ContentKind] = {
    "html": ContentKind.MARKUP,
    "htm": ContentKind.MARKUP,
    "svg": ContentKind.MARKUP,
    "css": ContentKind.STYLE,
    "scss": ContentKind.STYLE,
    "less": ContentKind.STYLE,
    "js": ContentKind.SCRIPT,
    "mjs": ContentKind.SCRIPT,
    "cjs": ContentKind.SCRIPT,
    "jsx": ContentKind.COMPONENT_SYNTAX,
    "tsx": ContentKind.COMPONENT_SYNTAX,
    "ts": ContentKind.COMPONENT_SYNTAX,
    "json": ContentKind.DATA,
    "yaml": ContentKind.DATA,
    "yml": ContentKind.DATA,
    "toml": ContentKind.DATA,
    "xml": ContentKind.DATA,
    "csv": ContentKind.DATA,
    "md": ContentKind.TEXT,
    "markdown": ContentKind.TEXT,
    "txt": ContentKind.TEXT,
}

# Code-fence annotations. Unknown annotations fall back to the path.
FENCE_KINDS: dict[str, ContentKind] = {
    "html": ContentKind.MARKUP,
    "htm": ContentKind.MARKUP,
    "xhtml": ContentKind.MARKUP,
    "svg": ContentKind.MARKUP,
    "css": ContentKind.STYLE,
    "scss": ContentKind.STYLE,
    "less": ContentKind.STYLE,
    "javascript": ContentKind.SCRIPT,
    "js": ContentKind.SCRIPT,
    "mjs": ContentKind.SCRIPT,
    "jsx": ContentKind.COMPONENT_SYNTAX,
    "tsx": ContentKind.COMPONENT_SYNTAX,
    "react": ContentKind.COMPONENT_SYNTAX,
    "typescript": ContentKind.COMPONENT_SYNTAX,
    "ts": ContentKind.COMPONENT_SYNTAX,
    "json": ContentKind.DATA,
    "yaml": ContentKind.DATA,
    "yml": ContentKind.DATA,
    "toml": ContentKind.DATA,
    "xml": ContentKind.DATA,
    "markdown": ContentKind.TEXT,
    "md": ContentKind.TEXT,
    "text": ContentKind.TEXT,
    "txt": ContentKind.TEXT,
    "plaintext": ContentKind.TEXT,
}

# Fence annotations the preview can render when no filename is given.
RENDERABLE_FENCES = frozenset({"html", "htm", "css", "javascript", "js", "jsx", "tsx", "react"})

# Extension used when naming an anonymous block.
FENCE_EXTENSIONS: dict[str, str] = {
    "html": "html",
    "htm": "html",
    "css": "css",
    "javascript": "js",
    "js": "js",
    "jsx": "jsx",
    "tsx": "jsx",
    "react": "jsx",
}


def kind_for_path(path: str) -> ContentKind:
    """Infer the content kind from a path's extension.

    Args:
        path: Project path (e.g. "src/App.jsx").

    Returns:
        The matching ContentKind, TEXT when the extension is unknown.
    """
    suffix = PurePosixPath(path).suffix.lower().lstrip(".")
    return EXTENSION_KINDS.get(suffix, ContentKind.TEXT)


def kind_for_fence(language: str | None) -> ContentKind | None:
    """Map a code-fence annotation to a kind, or None if it is absent/unknown."""
    if not language:
        return None
    return FENCE_KINDS.get(language.strip().lower())


def resolve_kind(path: str, fence_language: str | None = None) -> ContentKind:
    """Pick the kind for a file: an explicit fence annotation wins over the path."""
    return kind_for_fence(fence_language) or kind_for_path(path)
