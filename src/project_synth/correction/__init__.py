"""Diagnostics intake, classification and correction prompts."""

from project_synth.correction.channel import BridgeMessage, DiagnosticChannel, parse_payload
from project_synth.correction.classifier import (
    MAX_AUTO_CORRECT_ATTEMPTS,
    can_auto_correct,
    classify,
    make_diagnostic,
    partition_diagnostics,
    should_auto_correct,
)
from project_synth.correction.exceptions import CorrectionError, DiagnosticPayloadError
from project_synth.correction.prompts import build_correction_prompt, build_file_context_prompt

__all__ = [
    "BridgeMessage",
    "CorrectionError",
    "DiagnosticChannel",
    "DiagnosticPayloadError",
    "MAX_AUTO_CORRECT_ATTEMPTS",
    "build_correction_prompt",
    "build_file_context_prompt",
    "can_auto_correct",
    "classify",
    "make_diagnostic",
    "parse_payload",
    "partition_diagnostics",
    "should_auto_correct",
]
