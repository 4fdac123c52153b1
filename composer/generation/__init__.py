"""Prompt rendering, error mapping and the generation state machine."""

from .prompt_builder import build_prompt, build_response_schema
from .errors import (
    ErrorKind,
    ComposerError,
    classify_failure,
    classify_init_failure,
)
from .orchestrator import (
    GenerateOutcome,
    GenerationOrchestrator,
    OrchestratorState,
)

__all__ = [
    "build_prompt",
    "build_response_schema",
    "ErrorKind",
    "ComposerError",
    "classify_failure",
    "classify_init_failure",
    "GenerateOutcome",
    "GenerationOrchestrator",
    "OrchestratorState",
]
