"""File operations extracted from AI responses.

Operations are transient: they exist only between parsing a response and
applying it to a ProjectStore.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from project_synth.models.file_models import ContentKind


class PatchBlock(BaseModel):
    """One SEARCH/REPLACE pair inside an edit."""

    model_config = ConfigDict(frozen=True)

    search: str
    replace: str


class NewFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    op: Literal["new"] = "new"
    path: str
    content: str
    kind: ContentKind | None = None  # None means infer from the path


class ReplaceFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    op: Literal["replace"] = "replace"
    path: str
    content: str
    kind: ContentKind | None = None


class PatchFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    op: Literal["patch"] = "patch"
    path: str
    blocks: list[PatchBlock] = Field(min_length=1)


class DeleteFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    op: Literal["delete"] = "delete"
    path: str


FileOperation = Annotated[
    Union[NewFile, ReplaceFile, PatchFile, DeleteFile],
    Field(discriminator="op"),
]


class MarkerMatch(BaseModel):
    """An operation together with the span of response text it consumed."""

    model_config = ConfigDict(frozen=True)

    operation: FileOperation
    start: int
    end: int

    def overlaps(self, other: "MarkerMatch") -> bool:
        return self.start < other.end and other.start < self.end


class ResponseSource(str, Enum):
    """Which family of markers produced the operations of a response."""

    EXPLICIT = "explicit"
    LEGACY = "legacy"
    ANONYMOUS = "anonymous"
    NONE = "none"


class ParsedResponse(BaseModel):
    """Result of parsing one AI response."""

    model_config = ConfigDict(frozen=False)

    operations: list[FileOperation] = Field(default_factory=list)
    clean_text: str
    source: ResponseSource = ResponseSource.NONE
