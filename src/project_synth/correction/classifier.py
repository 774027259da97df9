"""Classification of preview failures and the auto-correction policy."""

import re
from typing import Iterable

from project_synth.models import Diagnostic, DiagnosticKind

MAX_AUTO_CORRECT_ATTEMPTS = 3

# Checked in order; the first match decides the kind.
_KIND_PATTERNS: tuple[tuple[DiagnosticKind, re.Pattern], ...] = (
    (DiagnosticKind.COMPONENT_FRAMEWORK, re.compile(r"react|hook|render", re.IGNORECASE)),
    (DiagnosticKind.SYNTAX, re.compile(r"syntax|unexpected token", re.IGNORECASE)),
    (DiagnosticKind.NETWORK, re.compile(r"fetch|network|cors", re.IGNORECASE)),
)

# Failure signatures an AI edit can usually fix on its own.
AUTO_FIXABLE_PATTERNS: tuple[re.Pattern, ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"is not defined",
        r"is not a function",
        r"unexpected token",
        r"syntax error",
        r"cannot read propert",
        r"undefined is not",
        r"missing.*import",
        r"module not found",
        r"failed to compile",
    )
)


def classify(message: str) -> DiagnosticKind:
    """Map a raw error message to a DiagnosticKind, defaulting to runtime."""
    for kind, pattern in _KIND_PATTERNS:
        if pattern.search(message):
            return kind
    return DiagnosticKind.RUNTIME


def make_diagnostic(message: str, generation: int | None = None) -> Diagnostic:
    """Build a classified Diagnostic from a raw message."""
    return Diagnostic(kind=classify(message), message=message, generation=generation)


def should_auto_correct(diagnostic: Diagnostic | str) -> bool:
    """Return True if the failure matches a known auto-fixable signature."""
    message = diagnostic if isinstance(diagnostic, str) else diagnostic.message
    return any(pattern.search(message) for pattern in AUTO_FIXABLE_PATTERNS)


def can_auto_correct(attempts: int, max_attempts: int = MAX_AUTO_CORRECT_ATTEMPTS) -> bool:
    """Return True while the session still has correction attempts left."""
    return attempts < max_attempts


def partition_diagnostics(
    diagnostics: Iterable[Diagnostic],
) -> tuple[list[Diagnostic], list[Diagnostic]]:
    """Split diagnostics into (auto_fixable, user_only), keeping order."""
    fixable: list[Diagnostic] = []
    user_only: list[Diagnostic] = []
    for diagnostic in diagnostics:
        (fixable if should_auto_correct(diagnostic) else user_only).append(diagnostic)
    return fixable, user_only
