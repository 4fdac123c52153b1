"""The value produced by one successful generation."""

import uuid
from dataclasses import dataclass, field

from .context import Audience, Tone

MIN_FORMALITY_SCORE = 1
MAX_FORMALITY_SCORE = 10


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens; an empty string has zero words."""
    return len(text.split())


@dataclass(frozen=True)
class GenerationResult:
    """A generated response and its derived metrics.

    ``word_count`` is derived from ``text`` on construction and cannot be
    supplied by the caller, so it always matches the text it describes.
    """
    tone: Tone
    audience: Audience
    text: str
    formality_score: int
    word_count: int = field(init=False)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        if not MIN_FORMALITY_SCORE <= self.formality_score <= MAX_FORMALITY_SCORE:
            raise ValueError(
                f"formality_score must be between {MIN_FORMALITY_SCORE} and "
                f"{MAX_FORMALITY_SCORE}, got {self.formality_score}"
            )
        object.__setattr__(self, "word_count", count_words(self.text))
