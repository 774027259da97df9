"""Unit tests for diagnostic classification (project_synth.correction.classifier)."""

import pytest

from project_synth.correction import (
    can_auto_correct,
    classify,
    make_diagnostic,
    partition_diagnostics,
    should_auto_correct,
)
from project_synth.models import Diagnostic, DiagnosticKind


def make_diag(message: str) -> Diagnostic:
    return Diagnostic(kind=classify(message), message=message)


class TestClassify:
    @pytest.mark.parametrize(
        "message, kind",
        [
            ("Invalid hook call. Hooks can only be called inside a function component", DiagnosticKind.COMPONENT_FRAMEWORK),
            ("Minified React error #130", DiagnosticKind.COMPONENT_FRAMEWORK),
            ("Uncaught SyntaxError: Unexpected token '<'", DiagnosticKind.SYNTAX),
            ("Unexpected token in JSON at position 0", DiagnosticKind.SYNTAX),
            ("TypeError: Failed to fetch", DiagnosticKind.NETWORK),
            ("Blocked by CORS policy", DiagnosticKind.NETWORK),
            ("ReferenceError: foo is not defined", DiagnosticKind.RUNTIME),
        ],
    )
    def test_kinds(self, message, kind):
        assert classify(message) == kind

    def test_component_keywords_checked_first(self):
        """A message matching several families takes the first in order."""
        assert classify("SyntaxError while rendering") == DiagnosticKind.COMPONENT_FRAMEWORK

    def test_make_diagnostic_records_generation(self):
        diagnostic = make_diagnostic("x is not defined", generation=3)
        assert diagnostic.kind == DiagnosticKind.RUNTIME
        assert diagnostic.generation == 3


class TestShouldAutoCorrect:
    @pytest.mark.parametrize(
        "message",
        [
            "ReferenceError: App is not defined",
            "TypeError: items.map is not a function",
            "SyntaxError: Unexpected token '}'",
            "Syntax error in script",
            "Cannot read properties of undefined (reading 'x')",
            "undefined is not an object",
            "Missing default import",
            "Module not found: Can't resolve './x'",
            "Failed to compile",
        ],
    )
    def test_auto_fixable(self, message):
        assert should_auto_correct(make_diag(message))

    @pytest.mark.parametrize(
        "message",
        ["Failed to fetch", "Script error.", "Maximum call stack size exceeded"],
    )
    def test_surfaced_to_user(self, message):
        assert not should_auto_correct(make_diag(message))

    def test_accepts_raw_message(self):
        assert should_auto_correct("x is not defined")


class TestCanAutoCorrect:
    @pytest.mark.parametrize("attempts", [0, 1, 2])
    def test_within_budget(self, attempts):
        assert can_auto_correct(attempts)

    @pytest.mark.parametrize("attempts", [3, 4, 10])
    def test_budget_exhausted(self, attempts):
        assert not can_auto_correct(attempts)

    def test_custom_budget(self):
        assert can_auto_correct(4, max_attempts=5)
        assert not can_auto_correct(5, max_attempts=5)


def test_partition_keeps_order():
    diagnostics = [make_diag("a is not defined"), make_diag("Failed to fetch"), make_diag("b is not defined")]
    fixable, user_only = partition_diagnostics(diagnostics)
    assert [d.message for d in fixable] == ["a is not defined", "b is not defined"]
    assert [d.message for d in user_only] == ["Failed to fetch"]
