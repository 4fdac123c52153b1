"""Data models for the composer orchestration layer."""

from .base import (
    Message,
    MessageRole,
    LLMResponse,
)
from .context import Tone, Audience, RequestContext
from .result import (
    GenerationResult,
    count_words,
    MIN_FORMALITY_SCORE,
    MAX_FORMALITY_SCORE,
)
from .availability import (
    AvailabilityStatus,
    UnavailableReason,
    EngineAvailability,
)

__all__ = [
    "Message",
    "MessageRole",
    "LLMResponse",
    "Tone",
    "Audience",
    "RequestContext",
    "GenerationResult",
    "count_words",
    "MIN_FORMALITY_SCORE",
    "MAX_FORMALITY_SCORE",
    "AvailabilityStatus",
    "UnavailableReason",
    "EngineAvailability",
]
