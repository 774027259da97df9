"""Models for project files and the derived file tree."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ContentKind(str, Enum):
    """What a file holds, as far as the preview compiler is concerned."""

    MARKUP = "markup"
    STYLE = "style"
    SCRIPT = "script"
    COMPONENT_SYNTAX = "componentSyntax"
    DATA = "data"
    TEXT = "text"


class FileRecord(BaseModel):
    """A single file in the virtual project."""

    model_config = ConfigDict(frozen=True)

    path: str  # Normalized, slash-delimited, no leading slash
    content: str
    kind: ContentKind  # Derived once at creation/edit time


class FileTreeNode(BaseModel):
    """Read-only view of one folder or file in the project tree."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    is_folder: bool
    kind: ContentKind | None = None  # Files only
    children: list["FileTreeNode"] | None = Field(default=None)  # Folders only


class FileChange(BaseModel):
    """What happened to one path when a response was applied."""

    model_config = ConfigDict(frozen=False)

    path: str
    change: str  # "added" | "modified" | "deleted"
    diff_text: str  # Unified diff output, empty when only the kind changed
