"""Export and import of whole projects (JSON, ZIP, single HTML document)."""

import io
import json
import zipfile
from datetime import datetime, timezone
from typing import Any

from project_synth.models import ContentKind
from project_synth.parsing import kind_for_fence
from project_synth.store.exceptions import ProjectImportError
from project_synth.store.project_store import ProjectStore

EXPORT_FORMAT_VERSION = 1
DEFAULT_PROJECT_NAME = "project"


def export_json(store: ProjectStore, name: str = DEFAULT_PROJECT_NAME) -> str:
    """Serialize a project with its metadata to a JSON document."""
    payload = {
        "version": EXPORT_FORMAT_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "name": name,
        "files": {
            record.path: {"content": record.content, "kind": record.kind.value}
            for record in store.records()
        },
    }
    return json.dumps(payload, indent=2)


def _record_kind(path: str, entry: dict[str, Any]) -> dict[str, ContentKind]:
    kind = entry.get("kind")
    if kind is not None:
        try:
            return {path: ContentKind(kind)}
        except ValueError:
            pass
    # Older exports carry a language name instead of a kind
    fence_kind = kind_for_fence(entry.get("language"))
    return {path: fence_kind} if fence_kind is not None else {}


def import_json(text: str) -> tuple[ProjectStore, str]:
    """Read a project exported by ``export_json``.

    Entries may use ``content``/``kind`` or the older ``code``/``language``
    keys.

    Returns:
        (store, name)

    Raises:
        ProjectImportError: If the payload is not a project export.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProjectImportError(f"Project file is not valid JSON: {exc}") from exc

    if not isinstance(data, dict) or not isinstance(data.get("files"), dict):
        raise ProjectImportError("Project file has no 'files' object")

    contents: dict[str, str] = {}
    kinds: dict[str, ContentKind] = {}
    for path, entry in data["files"].items():
        if isinstance(entry, str):
            contents[path] = entry
            continue
        if not isinstance(entry, dict):
            raise ProjectImportError(f"Invalid entry for {path!r}")
        content = entry.get("content", entry.get("code"))
        if not isinstance(content, str):
            raise ProjectImportError(f"Entry for {path!r} has no text content")
        contents[path] = content
        kinds.update(_record_kind(path, entry))

    name = data.get("name") or "Imported Project"
    return ProjectStore.from_contents(contents, kinds), name


def export_zip(store: ProjectStore) -> bytes:
    """Pack every file into a ZIP archive at its project path."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for record in store.records():
            archive.writestr(record.path, record.content)
    return buffer.getvalue()


def export_html(store: ProjectStore, **compile_options: Any) -> str:
    """Compile the project into its single preview document."""
    from project_synth.preview.compiler import compile_preview

    return compile_preview(store, **compile_options).html
