"""Virtual file store for one editing session.

A ProjectStore is an immutable snapshot. Every operation returns a new
snapshot, so callers holding an older one can keep using it.
"""

import logging
from typing import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from project_synth.editing import apply_patch_blocks
from project_synth.models import (
    ContentKind,
    DeleteFile,
    FileChange,
    FileOperation,
    FileRecord,
    FileTreeNode,
    NewFile,
    PatchFile,
    ReplaceFile,
)
from project_synth.parsing import InvalidPathError, kind_for_path, normalize_path
from project_synth.utils.diff_generator import generate_unified_diff

logger = logging.getLogger(__name__)


class ProjectStore(BaseModel):
    """Mapping from normalized path to FileRecord."""

    model_config = ConfigDict(frozen=True)

    files: dict[str, FileRecord] = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> "ProjectStore":
        return cls()

    @classmethod
    def from_contents(
        cls,
        contents: Mapping[str, str],
        kinds: Mapping[str, ContentKind] | None = None,
    ) -> "ProjectStore":
        """Seed a store from {path: content}, inferring kinds unless given.

        Unusable paths are skipped with a warning.
        """
        kinds = kinds or {}
        files: dict[str, FileRecord] = {}
        for raw_path, content in contents.items():
            try:
                path = normalize_path(raw_path)
            except InvalidPathError as exc:
                logger.warning("Skipping seed file: %s", exc)
                continue
            kind = kinds.get(raw_path) or kinds.get(path) or kind_for_path(path)
            files[path] = FileRecord(path=path, content=content, kind=kind)
        return cls(files=files)

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def get(self, path: str) -> FileRecord | None:
        return self.files.get(path)

    @property
    def paths(self) -> list[str]:
        """All paths, sorted."""
        return sorted(self.files)

    @property
    def is_empty(self) -> bool:
        return not self.files

    def records(self) -> list[FileRecord]:
        """All records in path order."""
        return [self.files[path] for path in self.paths]

    def contents(self) -> dict[str, str]:
        """Plain {path: content} copy."""
        return {path: record.content for path, record in self.files.items()}


def _resolve_write_kind(path: str, kind: ContentKind | None) -> ContentKind:
    return kind if kind is not None else kind_for_path(path)


def apply_operations(store: ProjectStore, operations: Iterable[FileOperation]) -> ProjectStore:
    """Apply operations in order and return the resulting snapshot.

    * New/Replace insert or overwrite, inferring the kind when absent.
    * Patch applies its blocks to the existing file; when the file does not
      exist it becomes a Replace with the concatenated replace bodies.
    * Delete removes the path if present.

    The input snapshot is never modified.
    """
    files = dict(store.files)

    for operation in operations:
        path = operation.path
        if isinstance(operation, (NewFile, ReplaceFile)):
            files[path] = FileRecord(
                path=path,
                content=operation.content,
                kind=_resolve_write_kind(path, operation.kind),
            )
        elif isinstance(operation, PatchFile):
            existing = files.get(path)
            if existing is None:
                logger.warning("Patch targets missing file %s; treating it as a replace", path)
                files[path] = FileRecord(
                    path=path,
                    content="\n".join(block.replace for block in operation.blocks),
                    kind=kind_for_path(path),
                )
                continue
            outcome = apply_patch_blocks(existing.content, operation.blocks)
            if outcome.skipped:
                logger.warning(
                    "Patch for %s applied %d of %d block(s)",
                    path,
                    len(outcome.applied),
                    len(operation.blocks),
                )
            files[path] = existing.model_copy(update={"content": outcome.content})
        elif isinstance(operation, DeleteFile):
            if files.pop(path, None) is None:
                logger.debug("Delete of absent path %s ignored", path)

    return ProjectStore(files=files)


def merge(previous: ProjectStore, incoming: ProjectStore) -> ProjectStore:
    """Overlay ``incoming`` on ``previous``.

    An empty ``previous`` returns ``incoming`` as is. Otherwise every path in
    ``incoming`` overwrites the same path in ``previous`` and nothing is ever
    removed.
    """
    if previous.is_empty:
        return incoming
    if incoming.is_empty:
        return previous
    return ProjectStore(files={**previous.files, **incoming.files})


def _sort_key(node: FileTreeNode) -> tuple[bool, str, str]:
    return (not node.is_folder, node.name.lower(), node.name)


def _build_nodes(prefix: str, folder: dict) -> list[FileTreeNode]:
    nodes: list[FileTreeNode] = []
    for name, child in folder["folders"].items():
        path = f"{prefix}{name}"
        nodes.append(
            FileTreeNode(
                name=name,
                path=path,
                is_folder=True,
                children=_build_nodes(f"{path}/", child),
            )
        )
    for name, record in folder["files"].items():
        nodes.append(FileTreeNode(name=name, path=record.path, is_folder=False, kind=record.kind))
    return sorted(nodes, key=_sort_key)


def derive_tree(store: ProjectStore) -> list[FileTreeNode]:
    """Group paths into a folder tree.

    At every level folders come before files and each group is sorted by
    name. The result depends only on the snapshot's paths.
    """
    root: dict = {"folders": {}, "files": {}}
    for path in store.paths:
        parts = path.split("/")
        folder = root
        for part in parts[:-1]:
            folder = folder["folders"].setdefault(part, {"folders": {}, "files": {}})
        folder["files"][parts[-1]] = store.files[path]
    return _build_nodes("", root)


def describe_changes(previous: ProjectStore, current: ProjectStore) -> list[FileChange]:
    """List added, modified and deleted paths between two snapshots."""
    changes: list[FileChange] = []
    for path in sorted(set(previous.files) | set(current.files)):
        before = previous.get(path)
        after = current.get(path)
        if before is None and after is not None:
            changes.append(
                FileChange(path=path, change="added", diff_text=generate_unified_diff(path, "", after.content))
            )
        elif before is not None and after is None:
            changes.append(
                FileChange(path=path, change="deleted", diff_text=generate_unified_diff(path, before.content, ""))
            )
        elif before is not None and after is not None and before != after:
            changes.append(
                FileChange(
                    path=path,
                    change="modified",
                    diff_text=generate_unified_diff(path, before.content, after.content),
                )
            )
    return changes
