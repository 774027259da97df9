"""Preview compilation: project snapshot to a single sandboxed document."""

from project_synth.preview.compiler import (
    ProjectRoles,
    bundle_components,
    classify_files,
    compile_preview,
    find_document_shell,
    placeholder_document,
    sandbox_attributes,
    strip_local_references,
    uses_utility_classes,
)
from project_synth.preview.module_syntax import order_component_files, strip_module_syntax
from project_synth.preview.templates import (
    BRIDGE_SOURCE,
    ENTRY_COMPONENT_NAMES,
    NO_CONTENT_MESSAGE,
    bridge_script,
)

__all__ = [
    "BRIDGE_SOURCE",
    "ENTRY_COMPONENT_NAMES",
    "NO_CONTENT_MESSAGE",
    "ProjectRoles",
    "bridge_script",
    "bundle_components",
    "classify_files",
    "compile_preview",
    "find_document_shell",
    "order_component_files",
    "placeholder_document",
    "sandbox_attributes",
    "strip_local_references",
    "strip_module_syntax",
    "uses_utility_classes",
]
