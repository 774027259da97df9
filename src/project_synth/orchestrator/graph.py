"""LangGraph state machine for the bounded correction loop.

Idle -> AwaitingDiagnostics -> BuildingPrompt -> Idle
                            -> SurfacedToUser

A pass always ends in Idle (nothing to do, or a prompt was built) or in
SurfacedToUser (not auto-fixable, budget exhausted, or an internal error).
"""

import logging
from typing import Callable

from langgraph.graph import END, START, StateGraph

from project_synth.correction import (
    build_correction_prompt,
    can_auto_correct,
    partition_diagnostics,
)
from project_synth.models import CorrectionOutcome, CorrectionPhase, Diagnostic, SurfaceReason
from project_synth.orchestrator.exceptions import GraphBuildError
from project_synth.orchestrator.state import CorrectionState
from project_synth.store import ProjectStore

logger = logging.getLogger(__name__)

PromptBuilder = Callable[[list[Diagnostic], ProjectStore], str]


def collect_node(state: CorrectionState) -> dict:
    """Split the incoming diagnostics into auto-fixable and user-only.

    On error: returns {"errors": [str], "fixable": []} so the pass is surfaced.
    """
    try:
        fixable, user_only = partition_diagnostics(state["diagnostics"])
        return {
            "phase": CorrectionPhase.AWAITING_DIAGNOSTICS,
            "fixable": fixable,
            "surfaced": user_only,
        }
    except Exception as exc:
        return {
            "phase": CorrectionPhase.AWAITING_DIAGNOSTICS,
            "errors": [f"collect_node error: {exc}"],
            "fixable": [],
        }


def make_decide_fn() -> Callable[[CorrectionState], str]:
    """Factory: returns the router for the post-collect conditional edge.

    Decision logic:
    1. no diagnostics -> "idle"
    2. an earlier node failed -> "surface"
    3. nothing auto-fixable -> "surface"
    4. attempts >= max_attempts -> "surface"
    5. else -> "correct"
    """

    def decide_fn(state: CorrectionState) -> str:
        if not state["diagnostics"]:
            return "idle"
        if state["errors"]:
            return "surface"
        if not state["fixable"]:
            return "surface"
        if not can_auto_correct(state["attempts"], state["max_attempts"]):
            return "surface"
        return "correct"

    return decide_fn


def idle_node(state: CorrectionState) -> dict:
    return {"phase": CorrectionPhase.IDLE}


def make_build_prompt_node(
    prompt_builder: PromptBuilder = build_correction_prompt,
) -> Callable[[CorrectionState], dict]:
    """Factory: returns a node closure that builds the correction prompt.

    The closure spends one attempt and returns to Idle with the prompt. Every
    diagnostic is included so the model sees the whole failure picture.

    On error: surfaces all diagnostics with reason INTERNAL_ERROR.
    """

    def build_prompt_node(state: CorrectionState) -> dict:
        try:
            prompt = prompt_builder(state["diagnostics"], state["store"])
        except Exception as exc:
            logger.warning("Correction prompt could not be built: %s", exc)
            return {
                "phase": CorrectionPhase.SURFACED_TO_USER,
                "reason": SurfaceReason.INTERNAL_ERROR,
                "surfaced": list(state["diagnostics"]),
                "errors": [f"build_prompt_node error: {exc}"],
            }
        return {
            "phase": CorrectionPhase.IDLE,
            "prompt": prompt,
            "attempts": state["attempts"] + 1,
            "surfaced": [],
        }

    return build_prompt_node


def surface_node(state: CorrectionState) -> dict:
    """Hand every diagnostic to the user, recording why no retry happens."""
    if state["errors"]:
        reason = SurfaceReason.INTERNAL_ERROR
    elif not state["fixable"]:
        reason = SurfaceReason.NOT_CORRECTABLE
    else:
        reason = SurfaceReason.BUDGET_EXHAUSTED
    logger.info(
        "Surfacing %d diagnostic(s) to the user: %s",
        len(state["diagnostics"]),
        reason.value,
    )
    return {
        "phase": CorrectionPhase.SURFACED_TO_USER,
        "reason": reason,
        "surfaced": list(state["diagnostics"]),
    }


def build_graph(prompt_builder: PromptBuilder = build_correction_prompt):
    """Build and compile the correction StateGraph.

    Edge topology:
      START -> collect_node
      collect_node -> conditional(decide_fn) -> {idle_node, build_prompt_node, surface_node}
      idle_node, build_prompt_node, surface_node -> END

    Args:
        prompt_builder: Callable producing the prompt text from diagnostics
            and the project snapshot.

    Returns:
        CompiledStateGraph ready to invoke.

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        graph = StateGraph(CorrectionState)

        graph.add_node("collect_node", collect_node)
        graph.add_node("idle_node", idle_node)
        graph.add_node("build_prompt_node", make_build_prompt_node(prompt_builder))
        graph.add_node("surface_node", surface_node)

        graph.add_edge(START, "collect_node")
        graph.add_conditional_edges(
            "collect_node",
            make_decide_fn(),
            {
                "idle": "idle_node",
                "correct": "build_prompt_node",
                "surface": "surface_node",
            },
        )
        graph.add_edge("idle_node", END)
        graph.add_edge("build_prompt_node", END)
        graph.add_edge("surface_node", END)

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build correction graph: {exc}") from exc


def outcome_from_state(state: CorrectionState) -> CorrectionOutcome:
    """Convert the final graph state into a CorrectionOutcome."""
    return CorrectionOutcome(
        phase=state["phase"],
        prompt=state["prompt"],
        diagnostics=list(state["diagnostics"]),
        surfaced=list(state["surfaced"]),
        reason=state["reason"],
        attempts=state["attempts"],
    )
