"""Correction loop orchestration and the editing session."""

from project_synth.orchestrator.exceptions import GraphBuildError, OrchestratorError
from project_synth.orchestrator.graph import build_graph, outcome_from_state
from project_synth.orchestrator.session import EditingSession, ResponseUpdate
from project_synth.orchestrator.state import CorrectionState, make_initial_state

__all__ = [
    "CorrectionState",
    "EditingSession",
    "GraphBuildError",
    "OrchestratorError",
    "ResponseUpdate",
    "build_graph",
    "make_initial_state",
    "outcome_from_state",
]
