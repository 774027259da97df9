"""Path normalization for project files."""

import re

from project_synth.parsing.exceptions import InvalidPathError

_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(raw_path: str) -> str:
    """Normalize a project path.

    Paths are case-sensitive and slash-delimited. Backslashes become slashes,
    surrounding quotes and backticks are dropped, and leading ``./`` or ``/``
    segments are removed.

    Args:
        raw_path: Path as written by the model or the user.

    Returns:
        Normalized path, never starting with a slash.

    Raises:
        InvalidPathError: If nothing usable remains or the path escapes the
            project root.
    """
    path = raw_path.strip().strip("`'\"").strip()
    path = path.replace("\\", "/")
    path = _REPEATED_SLASHES.sub("/", path)

    while path.startswith("./"):
        path = path[2:]
    path = path.lstrip("/")

    if not path or path.endswith("/"):
        raise InvalidPathError(f"Not a file path: {raw_path!r}")
    if ".." in path.split("/"):
        raise InvalidPathError(f"Path escapes the project root: {raw_path!r}")
    return path


def is_network_url(url: str) -> bool:
    """Return True for references that are fetched from the network or inline.

    Everything else is treated as a project-local path.
    """
    lowered = url.strip().lower()
    return lowered.startswith(("http://", "https://", "//", "data:", "blob:"))
