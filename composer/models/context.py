"""Request parameters: the tone and audience a response is written for."""

from dataclasses import dataclass
from enum import Enum
from typing import List


class Tone(Enum):
    """Communication tone requested for a generated response."""
    FORMAL = "formal"
    CASUAL = "casual"
    EMPATHETIC = "empathetic"
    DIRECT = "direct"
    DIPLOMATIC = "diplomatic"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, name: str) -> "Tone":
        """Look up a tone by value, case-insensitively.

        Raises:
            ValueError: If the name is not a known tone.
        """
        return cls(name.strip().lower())


class Audience(Enum):
    """Target audience of a generated response."""
    EXECUTIVE = "executive"
    PEER = "peer"
    CLIENT = "client"
    TEAM = "team"
    PUBLIC = "public"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, name: str) -> "Audience":
        """Look up an audience by value, case-insensitively.

        Raises:
            ValueError: If the name is not a known audience.
        """
        return cls(name.strip().lower())


@dataclass(frozen=True)
class RequestContext:
    """Parameters of a single generation request."""
    tone: Tone
    audience: Audience = Audience.PEER
