"""Virtual file store: snapshots, tree derivation, merging and export."""

from project_synth.store.exceptions import ProjectImportError, StoreError
from project_synth.store.exporter import export_html, export_json, export_zip, import_json
from project_synth.store.project_store import (
    ProjectStore,
    apply_operations,
    derive_tree,
    describe_changes,
    merge,
)

__all__ = [
    "ProjectImportError",
    "ProjectStore",
    "StoreError",
    "apply_operations",
    "derive_tree",
    "describe_changes",
    "export_html",
    "export_json",
    "export_zip",
    "import_json",
    "merge",
]
