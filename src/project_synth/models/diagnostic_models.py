"""Models for preview output, sandbox diagnostics and the correction loop."""

import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DiagnosticKind(str, Enum):
    RUNTIME = "runtime"
    SYNTAX = "syntax"
    COMPONENT_FRAMEWORK = "componentFramework"
    NETWORK = "network"


class Diagnostic(BaseModel):
    """A failure observed inside the rendered preview."""

    model_config = ConfigDict(frozen=True)

    kind: DiagnosticKind
    message: str
    timestamp: float = Field(default_factory=time.time)
    generation: int | None = None  # Preview generation that emitted it


class ConsoleEntry(BaseModel):
    """One console message forwarded by the instrumentation bridge."""

    model_config = ConfigDict(frozen=True)

    level: str  # "log" | "info" | "warn" | "error"
    message: str
    generation: int
    timestamp: float = Field(default_factory=time.time)


class RenderStrategy(str, Enum):
    FULL_DOCUMENT = "full_document"
    COMPONENT = "component"
    FRAGMENT = "fragment"


class PreviewDocument(BaseModel):
    """A compiled, self-contained preview document."""

    model_config = ConfigDict(frozen=True)

    html: str
    strategy: RenderStrategy
    generation: int = 0
    uses_utility_classes: bool = False
    has_renderable_content: bool = True
    sandbox: str = "allow-scripts"


class CorrectionPhase(str, Enum):
    IDLE = "idle"
    AWAITING_DIAGNOSTICS = "awaiting_diagnostics"
    BUILDING_PROMPT = "building_prompt"
    SURFACED_TO_USER = "surfaced_to_user"


class SurfaceReason(str, Enum):
    NOT_CORRECTABLE = "not_correctable"
    BUDGET_EXHAUSTED = "budget_exhausted"
    INTERNAL_ERROR = "internal_error"


class CorrectionBudget(BaseModel):
    """Session-scoped count of automatic correction attempts."""

    model_config = ConfigDict(frozen=True)

    attempts: int = Field(default=0, ge=0)
    max_attempts: int = Field(default=3, ge=1)

    @property
    def remaining(self) -> int:
        return max(0, self.max_attempts - self.attempts)

    @property
    def exhausted(self) -> bool:
        return self.attempts >= self.max_attempts

    def spend(self) -> "CorrectionBudget":
        """Return a budget with one more attempt used."""
        return self.model_copy(update={"attempts": self.attempts + 1})


class CorrectionOutcome(BaseModel):
    """Terminal result of one pass through the correction loop."""

    model_config = ConfigDict(frozen=False)

    phase: CorrectionPhase
    prompt: str | None = None
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    surfaced: list[Diagnostic] = Field(default_factory=list)
    reason: SurfaceReason | None = None
    attempts: int = 0
