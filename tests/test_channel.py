"""Unit tests for the bridge message intake (project_synth.correction.channel)."""

import json

import pytest

from project_synth.correction import DiagnosticChannel, DiagnosticPayloadError, parse_payload
from project_synth.models import DiagnosticKind
from project_synth.preview import BRIDGE_SOURCE


def make_payload(message: str = "x is not defined", level: str = "error", generation: int = 1, source: str = BRIDGE_SOURCE) -> dict:
    return {"source": source, "generation": generation, "type": level, "message": message}


class TestParsePayload:
    def test_mapping_and_json_text(self):
        payload = make_payload()
        assert parse_payload(payload) == parse_payload(json.dumps(payload))

    def test_unknown_level_becomes_log(self):
        assert parse_payload(make_payload(level="debug")).type == "log"

    @pytest.mark.parametrize("payload", ["{not json", {"message": "no source"}, "[1, 2]"])
    def test_malformed(self, payload):
        with pytest.raises(DiagnosticPayloadError):
            parse_payload(payload)


class TestDiagnosticChannel:
    def test_error_becomes_classified_diagnostic(self):
        channel = DiagnosticChannel(generation=1)
        diagnostic = channel.receive(make_payload("Uncaught SyntaxError: Unexpected token"))
        assert diagnostic.kind == DiagnosticKind.SYNTAX
        assert diagnostic.generation == 1
        assert channel.pending == [diagnostic]

    def test_non_error_levels_are_console_only(self):
        channel = DiagnosticChannel(generation=1)
        assert channel.receive(make_payload("hello", level="log")) is None
        assert [e.message for e in channel.entries] == ["hello"]
        assert channel.pending == []

    def test_stale_generation_dropped(self):
        """Messages from a replaced preview are never attributed to the current one."""
        channel = DiagnosticChannel(generation=2)
        assert channel.receive(make_payload(generation=1)) is None
        assert channel.entries == []
        assert channel.pending == []

    def test_foreign_source_dropped(self):
        channel = DiagnosticChannel(generation=1)
        assert channel.receive(make_payload(source="some-extension")) is None
        assert channel.entries == []

    def test_malformed_payload_dropped(self):
        assert DiagnosticChannel().receive({"unexpected": True}) is None

    def test_console_entries_are_bounded(self):
        channel = DiagnosticChannel(generation=1, max_entries=3)
        for i in range(5):
            channel.receive(make_payload(f"m{i}", level="info"))
        assert [e.message for e in channel.entries] == ["m2", "m3", "m4"]

    def test_order_preserved_within_generation(self):
        channel = DiagnosticChannel(generation=1)
        for message in ("a is not defined", "b is not defined"):
            channel.receive(make_payload(message))
        assert [d.message for d in channel.drain()] == ["a is not defined", "b is not defined"]
        assert channel.pending == []

    def test_reset_switches_generation_and_clears(self):
        channel = DiagnosticChannel(generation=1)
        channel.receive(make_payload())
        channel.reset(2)
        assert channel.generation == 2
        assert channel.entries == []
        assert channel.pending == []
        assert channel.receive(make_payload(generation=1)) is None
        assert channel.receive(make_payload(generation=2)) is not None
