"""Application-facing error taxonomy.

Engine and session exceptions are converted here, at the orchestrator
boundary; the presentation layer only ever sees ``ComposerError`` values.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..llm.provider import LLMContextWindowError, LLMError
from ..llm.session import CapabilityUnavailableError, SessionInitError
from ..models import UnavailableReason


class ErrorKind(Enum):
    CAPABILITY_UNAVAILABLE = "capability_unavailable"
    SESSION_NOT_INITIALIZED = "session_not_initialized"
    SESSION_CONSTRUCTION_FAILED = "session_construction_failed"
    INPUT_TOO_LARGE = "input_too_large"
    GENERATION_FAILED = "generation_failed"


UNAVAILABLE_MESSAGES = {
    UnavailableReason.DEVICE_INELIGIBLE: (
        "This device cannot run the local language model. Please run the app "
        "on a capable device with the engine installed locally."
    ),
    UnavailableReason.CAPABILITY_DISABLED: (
        "The local language model is disabled or not running. Please enable it "
        "(start the Ollama service) on a capable device and try again."
    ),
    UnavailableReason.NOT_READY: (
        "The language model is not ready on this device yet. Please wait for the "
        "model download to finish and try again."
    ),
    UnavailableReason.OTHER: (
        "The local language model is unavailable. Please ensure it is installed "
        "and enabled on a capable device."
    ),
}

SESSION_NOT_INITIALIZED_MESSAGE = (
    "Session not initialized. This is usually temporary; please relaunch the app and try again."
)
INPUT_TOO_LARGE_MESSAGE = "Input text is too long. Please shorten your message and try again."
GENERIC_FAILURE_MESSAGE = "Failed to generate response. Please try again."


@dataclass(frozen=True)
class ComposerError:
    """The single live error shown to the user."""
    kind: ErrorKind
    message: str
    detail: str = ""
    reason: Optional[UnavailableReason] = None

    @classmethod
    def capability_unavailable(cls, reason: UnavailableReason, detail: str = "") -> "ComposerError":
        return cls(ErrorKind.CAPABILITY_UNAVAILABLE, UNAVAILABLE_MESSAGES[reason], detail, reason)

    @classmethod
    def session_not_initialized(cls) -> "ComposerError":
        return cls(ErrorKind.SESSION_NOT_INITIALIZED, SESSION_NOT_INITIALIZED_MESSAGE)

    @classmethod
    def session_construction_failed(cls, detail: str) -> "ComposerError":
        return cls(
            ErrorKind.SESSION_CONSTRUCTION_FAILED,
            f"Could not start a session with the language model: {detail}",
            detail,
        )

    @classmethod
    def input_too_large(cls, detail: str = "") -> "ComposerError":
        return cls(ErrorKind.INPUT_TOO_LARGE, INPUT_TOO_LARGE_MESSAGE, detail)

    @classmethod
    def generation_failed(cls, detail: str = "") -> "ComposerError":
        message = f"Failed to generate response: {detail}" if detail else GENERIC_FAILURE_MESSAGE
        return cls(ErrorKind.GENERATION_FAILED, message, detail)


def classify_init_failure(exc: SessionInitError) -> ComposerError:
    """Map a session initialization failure."""
    if isinstance(exc, CapabilityUnavailableError):
        return ComposerError.capability_unavailable(exc.reason, exc.detail)
    return ComposerError.session_construction_failed(str(exc))


def classify_failure(exc: Exception) -> ComposerError:
    """Map a failed generation call to a stable error."""
    if isinstance(exc, LLMContextWindowError):
        return ComposerError.input_too_large(str(exc))
    if isinstance(exc, LLMError):
        return ComposerError.generation_failed(str(exc))
    return ComposerError.generation_failed()
