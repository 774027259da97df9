"""Data models for the project synthesis engine."""

from project_synth.models.diagnostic_models import (
    ConsoleEntry,
    CorrectionBudget,
    CorrectionOutcome,
    CorrectionPhase,
    Diagnostic,
    DiagnosticKind,
    PreviewDocument,
    RenderStrategy,
    SurfaceReason,
)
from project_synth.models.file_models import (
    ContentKind,
    FileChange,
    FileRecord,
    FileTreeNode,
)
from project_synth.models.operation_models import (
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

__all__ = [
    "ConsoleEntry",
    "ContentKind",
    "CorrectionBudget",
    "CorrectionOutcome",
    "CorrectionPhase",
    "DeleteFile",
    "Diagnostic",
    "DiagnosticKind",
    "FileChange",
    "FileOperation",
    "FileRecord",
    "FileTreeNode",
    "MarkerMatch",
    "NewFile",
    "ParsedResponse",
    "PatchBlock",
    "PatchFile",
    "PreviewDocument",
    "RenderStrategy",
    "ReplaceFile",
    "ResponseSource",
    "SurfaceReason",
]
