"""Wire-level models shared by engine providers."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class MessageRole(Enum):
    """Role of a message sent to the engine."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    """A single message in an engine request."""
    role: MessageRole
    content: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dict format for API calls."""
        return {
            "role": self.role.value,
            "content": self.content
        }


@dataclass
class LLMResponse:
    """Raw response from one engine call."""
    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens
