"""State definition for the LangGraph correction loop."""

import operator
from typing import Annotated, TypedDict

from project_synth.models import CorrectionPhase, Diagnostic, SurfaceReason
from project_synth.store import ProjectStore

MAX_ATTEMPTS_LIMIT = 10


class CorrectionState(TypedDict):
    """State for one pass through the correction loop.

    ``errors`` accumulates across nodes; every other field is overwritten.
    """

    # Input
    diagnostics: list[Diagnostic]
    store: ProjectStore
    attempts: int
    max_attempts: int

    # Triage
    phase: CorrectionPhase
    fixable: list[Diagnostic]
    surfaced: list[Diagnostic]

    # Result
    prompt: str | None
    reason: SurfaceReason | None

    errors: Annotated[list[str], operator.add]


def make_initial_state(
    diagnostics: list[Diagnostic],
    store: ProjectStore,
    attempts: int = 0,
    max_attempts: int = 3,
) -> CorrectionState:
    """Create the initial state for one correction pass.

    Args:
        diagnostics: Failures reported by the current preview.
        store: Project snapshot the preview was compiled from.
        attempts: Corrections already requested in this session.
        max_attempts: Session budget, clamped to 1..MAX_ATTEMPTS_LIMIT.

    Returns:
        CorrectionState with every field initialised.
    """
    return {
        "diagnostics": list(diagnostics),
        "store": store,
        "attempts": attempts,
        "max_attempts": max(1, min(max_attempts, MAX_ATTEMPTS_LIMIT)),
        "phase": CorrectionPhase.IDLE,
        "fixable": [],
        "surfaced": [],
        "prompt": None,
        "reason": None,
        "errors": [],
    }
