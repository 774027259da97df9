"""Receiving end of the preview instrumentation bridge.

The preview posts ``{source, generation, type, message}`` objects. The channel
accepts only messages carrying the bridge tag and the generation of the
document currently shown; anything from a replaced document is dropped.
"""

import json
import logging
from collections import deque
from typing import Any, Mapping

from pydantic import BaseModel, ValidationError, field_validator

from project_synth.correction.classifier import make_diagnostic
from project_synth.correction.exceptions import DiagnosticPayloadError
from project_synth.models import ConsoleEntry, Diagnostic
from project_synth.preview.templates import BRIDGE_SOURCE

logger = logging.getLogger(__name__)

CONSOLE_LEVELS = ("log", "info", "warn", "error")
DEFAULT_MAX_ENTRIES = 200


class BridgeMessage(BaseModel):
    """One message as posted by the bridge script."""

    source: str
    generation: int
    type: str = "log"
    message: str = ""

    @field_validator("type")
    @classmethod
    def known_level(cls, v: str) -> str:
        return v if v in CONSOLE_LEVELS else "log"


def parse_payload(payload: Mapping[str, Any] | str) -> BridgeMessage:
    """Validate a raw bridge payload (a mapping or its JSON text).

    Raises:
        DiagnosticPayloadError: If the payload is not a bridge message.
    """
    try:
        if isinstance(payload, str):
            return BridgeMessage.model_validate(json.loads(payload))
        return BridgeMessage.model_validate(payload)
    except (ValidationError, json.JSONDecodeError, TypeError) as exc:
        raise DiagnosticPayloadError(f"Malformed bridge message: {exc}") from exc


class DiagnosticChannel:
    """Generation-filtered intake for console messages from one preview.

    Keeps the most recent console entries and the error diagnostics that
    have not yet been handed to the correction loop.
    """

    def __init__(self, generation: int = 0, max_entries: int = DEFAULT_MAX_ENTRIES):
        self._generation = generation
        self._entries: deque[ConsoleEntry] = deque(maxlen=max_entries)
        self._pending: list[Diagnostic] = []

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def entries(self) -> list[ConsoleEntry]:
        return list(self._entries)

    @property
    def pending(self) -> list[Diagnostic]:
        return list(self._pending)

    def reset(self, generation: int) -> None:
        """Switch to a new preview generation, discarding everything received."""
        self._generation = generation
        self._entries.clear()
        self._pending.clear()

    def receive(self, payload: Mapping[str, Any] | str) -> Diagnostic | None:
        """Accept one bridge message.

        Returns:
            The Diagnostic recorded for an error message, otherwise None
            (non-error level, foreign or stale message).
        """
        try:
            message = parse_payload(payload)
        except DiagnosticPayloadError as exc:
            logger.debug("Ignoring message: %s", exc)
            return None

        if message.source != BRIDGE_SOURCE:
            logger.debug("Ignoring message from source %r", message.source)
            return None
        if message.generation != self._generation:
            logger.debug(
                "Dropping stale message from generation %d (current %d)",
                message.generation,
                self._generation,
            )
            return None

        self._entries.append(
            ConsoleEntry(level=message.type, message=message.message, generation=message.generation)
        )
        if message.type != "error":
            return None

        diagnostic = make_diagnostic(message.message, generation=message.generation)
        self._pending.append(diagnostic)
        return diagnostic

    def drain(self) -> list[Diagnostic]:
        """Return and clear the pending diagnostics, in arrival order."""
        drained, self._pending = self._pending, []
        return drained
