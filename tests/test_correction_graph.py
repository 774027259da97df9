"""Unit tests for the correction loop graph (project_synth.orchestrator.graph)."""

from unittest.mock import MagicMock, patch

import pytest

from project_synth.models import CorrectionPhase, Diagnostic, DiagnosticKind, SurfaceReason
from project_synth.orchestrator import GraphBuildError, build_graph, make_initial_state, outcome_from_state
from project_synth.orchestrator.graph import (
    collect_node,
    idle_node,
    make_build_prompt_node,
    make_decide_fn,
    surface_node,
)
from project_synth.store import ProjectStore


# ---------------------------------------------------------------------------
# Helpers / shared fixtures
# ---------------------------------------------------------------------------

def make_diag(message: str, kind: DiagnosticKind = DiagnosticKind.RUNTIME) -> Diagnostic:
    return Diagnostic(kind=kind, message=message)


FIXABLE = make_diag("App is not defined")
NOT_FIXABLE = make_diag("Failed to fetch", DiagnosticKind.NETWORK)


def make_state(diagnostics, attempts: int = 0, max_attempts: int = 3, **overrides):
    state = make_initial_state(
        diagnostics,
        ProjectStore.from_contents({"src/App.jsx": "const Ap = () => null;"}),
        attempts=attempts,
        max_attempts=max_attempts,
    )
    state.update(overrides)
    return state


def run(state, **graph_kwargs):
    return outcome_from_state(build_graph(**graph_kwargs).invoke(state))


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

class TestInitialState:
    def test_defaults(self):
        state = make_state([FIXABLE])
        assert state["phase"] == CorrectionPhase.IDLE
        assert state["prompt"] is None
        assert state["errors"] == []

    @pytest.mark.parametrize("requested, clamped", [(0, 1), (3, 3), (50, 10)])
    def test_max_attempts_clamped(self, requested, clamped):
        assert make_state([], max_attempts=requested)["max_attempts"] == clamped


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------

class TestNodes:
    def test_collect_partitions(self):
        result = collect_node(make_state([FIXABLE, NOT_FIXABLE]))
        assert result["phase"] == CorrectionPhase.AWAITING_DIAGNOSTICS
        assert result["fixable"] == [FIXABLE]
        assert result["surfaced"] == [NOT_FIXABLE]

    def test_collect_reports_errors(self):
        with patch("project_synth.orchestrator.graph.partition_diagnostics", side_effect=RuntimeError("bad")):
            result = collect_node(make_state([FIXABLE]))
        assert result["fixable"] == []
        assert "collect_node error: bad" in result["errors"][0]

    def test_idle_node(self):
        assert idle_node(make_state([])) == {"phase": CorrectionPhase.IDLE}

    def test_build_prompt_spends_attempt(self):
        builder = MagicMock(return_value="PROMPT")
        result = make_build_prompt_node(builder)(make_state([FIXABLE], attempts=1))
        assert result["prompt"] == "PROMPT"
        assert result["attempts"] == 2
        assert result["phase"] == CorrectionPhase.IDLE
        builder.assert_called_once()

    def test_build_prompt_failure_is_surfaced(self):
        builder = MagicMock(side_effect=ValueError("nope"))
        result = make_build_prompt_node(builder)(make_state([FIXABLE]))
        assert result["phase"] == CorrectionPhase.SURFACED_TO_USER
        assert result["reason"] == SurfaceReason.INTERNAL_ERROR
        assert "attempts" not in result

    @pytest.mark.parametrize(
        "overrides, reason",
        [
            ({"fixable": []}, SurfaceReason.NOT_CORRECTABLE),
            ({"fixable": [FIXABLE]}, SurfaceReason.BUDGET_EXHAUSTED),
            ({"fixable": [FIXABLE], "errors": ["x"]}, SurfaceReason.INTERNAL_ERROR),
        ],
    )
    def test_surface_reason(self, overrides, reason):
        result = surface_node(make_state([FIXABLE], **overrides))
        assert result["phase"] == CorrectionPhase.SURFACED_TO_USER
        assert result["reason"] == reason
        assert result["surfaced"] == [FIXABLE]


# ---------------------------------------------------------------------------
# Decision function
# ---------------------------------------------------------------------------

class TestDecideFn:
    @pytest.fixture
    def decide(self):
        return make_decide_fn()

    def test_no_diagnostics(self, decide):
        assert decide(make_state([])) == "idle"

    def test_correctable_within_budget(self, decide):
        assert decide(make_state([FIXABLE], fixable=[FIXABLE])) == "correct"

    def test_not_correctable(self, decide):
        assert decide(make_state([NOT_FIXABLE], fixable=[])) == "surface"

    def test_budget_exhausted(self, decide):
        assert decide(make_state([FIXABLE], attempts=3, fixable=[FIXABLE])) == "surface"

    def test_errors_surface(self, decide):
        assert decide(make_state([FIXABLE], fixable=[FIXABLE], errors=["boom"])) == "surface"


# ---------------------------------------------------------------------------
# Compiled graph
# ---------------------------------------------------------------------------

class TestBuildGraph:
    def test_idle_when_nothing_reported(self):
        outcome = run(make_state([]))
        assert outcome.phase == CorrectionPhase.IDLE
        assert outcome.prompt is None
        assert outcome.attempts == 0

    def test_builds_prompt_and_returns_to_idle(self):
        outcome = run(make_state([FIXABLE, NOT_FIXABLE]))
        assert outcome.phase == CorrectionPhase.IDLE
        assert "App is not defined" in outcome.prompt
        assert "Failed to fetch" in outcome.prompt
        assert outcome.attempts == 1
        assert outcome.surfaced == []

    def test_not_correctable_surfaced(self):
        outcome = run(make_state([NOT_FIXABLE]))
        assert outcome.phase == CorrectionPhase.SURFACED_TO_USER
        assert outcome.reason == SurfaceReason.NOT_CORRECTABLE
        assert outcome.surfaced == [NOT_FIXABLE]

    def test_budget_exhausted_surfaced(self):
        outcome = run(make_state([FIXABLE], attempts=3))
        assert outcome.reason == SurfaceReason.BUDGET_EXHAUSTED
        assert outcome.attempts == 3

    def test_prompt_builder_failure(self):
        outcome = run(make_state([FIXABLE]), prompt_builder=MagicMock(side_effect=RuntimeError("x")))
        assert outcome.phase == CorrectionPhase.SURFACED_TO_USER
        assert outcome.reason == SurfaceReason.INTERNAL_ERROR
        assert outcome.attempts == 0

    def test_terminal_phase_is_always_idle_or_surfaced(self):
        for diagnostics, attempts in [([], 0), ([FIXABLE], 0), ([NOT_FIXABLE], 0), ([FIXABLE], 5)]:
            outcome = run(make_state(diagnostics, attempts=attempts))
            assert outcome.phase in (CorrectionPhase.IDLE, CorrectionPhase.SURFACED_TO_USER)

    def test_build_failure_wrapped(self):
        with patch("project_synth.orchestrator.graph.StateGraph", side_effect=RuntimeError("broken")):
            with pytest.raises(GraphBuildError, match="broken"):
                build_graph()
