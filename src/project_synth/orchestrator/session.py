"""Editing session: owns the project store, preview generation and correction budget.

One session corresponds to one conversation. Nothing here is shared between
sessions, so concurrent sessions never see each other's counters.
"""

import logging
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

from project_synth.config import Settings
from project_synth.correction import DiagnosticChannel, build_file_context_prompt
from project_synth.models import (
    CorrectionBudget,
    CorrectionOutcome,
    Diagnostic,
    FileChange,
    FileOperation,
    PreviewDocument,
    ReplaceFile,
    ResponseSource,
)
from project_synth.orchestrator.graph import build_graph, outcome_from_state
from project_synth.orchestrator.state import make_initial_state
from project_synth.parsing import extract_code_blocks, is_renderable, parse_response, virtual_files_from_blocks
from project_synth.preview import compile_preview
from project_synth.store import ProjectStore, apply_operations, describe_changes, merge

logger = logging.getLogger(__name__)


class ResponseUpdate(BaseModel):
    """What ingesting one AI response did to the project."""

    model_config = ConfigDict(frozen=True)

    operations: list[FileOperation] = Field(default_factory=list)
    clean_text: str
    source: ResponseSource
    store: ProjectStore
    changes: list[FileChange] = Field(default_factory=list)


class EditingSession:
    """Threads a ProjectStore through parse, apply, preview and correction.

    Args:
        settings: Engine settings; ``Settings()`` when omitted.
        store: Snapshot to start from; an empty project when omitted.
    """

    def __init__(self, settings: Settings | None = None, store: ProjectStore | None = None):
        self.settings = settings or Settings()
        self.store = store or ProjectStore.empty()
        self.budget = CorrectionBudget(max_attempts=self.settings.max_correction_attempts)
        self.generation = 0
        self.channel = DiagnosticChannel(
            generation=self.generation,
            max_entries=self.settings.max_console_entries,
        )
        self._graph = build_graph()

    def ingest_response(self, text: str) -> ResponseUpdate:
        """Parse a response and fold its operations into the session store.

        Explicit markers go through ``apply_operations``. Legacy markers and
        anonymous renderable code blocks are merged so files the response
        does not mention survive.
        """
        parsed = parse_response(text)
        previous = self.store
        operations: list[FileOperation] = list(parsed.operations)
        source = parsed.source

        if source == ResponseSource.EXPLICIT:
            current = apply_operations(previous, operations)
        elif source == ResponseSource.LEGACY:
            current = merge(previous, apply_operations(ProjectStore.empty(), operations))
        else:
            blocks = extract_code_blocks(text)
            if is_renderable(blocks):
                files = virtual_files_from_blocks(blocks)
                operations = [
                    ReplaceFile(path=record.path, content=record.content, kind=record.kind)
                    for record in files.values()
                ]
                current = merge(previous, ProjectStore(files=files))
                source = ResponseSource.ANONYMOUS
            else:
                current = previous

        self.store = current
        changes = describe_changes(previous, current)
        logger.debug(
            "Ingested %s response: %d operation(s), %d change(s)",
            source.value,
            len(operations),
            len(changes),
        )
        return ResponseUpdate(
            operations=operations,
            clean_text=parsed.clean_text,
            source=source,
            store=current,
            changes=changes,
        )

    def context_prompt(self) -> str:
        """File context to append to the next request for this project."""
        return build_file_context_prompt(
            self.store,
            max_file_chars=self.settings.context_max_file_chars,
            max_total_chars=self.settings.context_max_total_chars,
        )

    def render(self) -> PreviewDocument:
        """Compile the current store as a new preview generation.

        Messages still arriving from earlier generations are dropped from
        now on.
        """
        self.generation += 1
        self.channel.reset(self.generation)
        return compile_preview(self.store, generation=self.generation, settings=self.settings)

    def receive(self, payload: Mapping[str, Any] | str) -> Diagnostic | None:
        """Feed one bridge message from the hosted preview."""
        return self.channel.receive(payload)

    def correct(self, diagnostics: list[Diagnostic] | None = None) -> CorrectionOutcome:
        """Run one pass of the correction loop.

        Uses ``diagnostics`` when given, otherwise drains those received from
        the current preview. A built prompt spends one attempt of the budget.
        """
        if diagnostics is None:
            diagnostics = self.channel.drain()

        state = make_initial_state(
            diagnostics,
            self.store,
            attempts=self.budget.attempts,
            max_attempts=self.budget.max_attempts,
        )
        outcome = outcome_from_state(self._graph.invoke(state))
        if outcome.attempts > self.budget.attempts:
            self.budget = self.budget.spend()
        return outcome

    def reset(self) -> None:
        """Start over from an empty project with a fresh correction budget.

        The generation keeps counting up so late messages from the old
        preview are still recognized as stale.
        """
        self.store = ProjectStore.empty()
        self.budget = CorrectionBudget(max_attempts=self.settings.max_correction_attempts)
        self.channel.reset(self.generation)
