"""Generation session and its lifecycle."""

import threading
from typing import Any, Dict, Optional

from ..models import EngineAvailability, UnavailableReason
from ..utils.logging import get_logger
from .probe import AvailabilityProbe
from .provider import LLMProvider

logger = get_logger(__name__)


class SessionInitError(Exception):
    """Base class for session initialization failures."""


class CapabilityUnavailableError(SessionInitError):
    """The probe reported the engine as unusable; no session was built."""

    def __init__(self, reason: UnavailableReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"Engine unavailable ({reason.value}): {detail}" if detail
                         else f"Engine unavailable ({reason.value})")


class SessionConstructionError(SessionInitError):
    """The engine was available but the session could not be created."""


class Session:
    """A handle to the engine bound to one fixed instruction string.

    Single-turn: each ``respond`` sends the instructions plus one prompt and
    keeps no history. The lock makes sure two calls never reach the engine
    through the same session at once.
    """

    def __init__(self, provider: LLMProvider, instructions: str):
        if not instructions or not instructions.strip():
            raise ValueError("Session instructions must not be empty")
        self.provider = provider
        self.instructions = instructions
        self._lock = threading.Lock()

    @property
    def model(self) -> str:
        return self.provider.config.model

    def respond(self, prompt: str, schema: Optional[Dict[str, Any]] = None) -> str:
        """Send one prompt and return the raw response text.

        Raises:
            LLMError: On any engine failure.
        """
        with self._lock:
            return self.provider.call(self.instructions, prompt, schema=schema)


class SessionManager:
    """Owns the single session of the process.

    The session is created by ``initialize`` and reused afterwards; nothing
    here creates it implicitly, and nothing retries a failed attempt.
    """

    def __init__(self, provider: LLMProvider, instructions: str):
        if not instructions or not instructions.strip():
            raise ValueError("Session instructions must not be empty")
        self.provider = provider
        self.instructions = instructions
        self.probe = AvailabilityProbe(provider)
        self._session: Optional[Session] = None
        self.last_availability: Optional[EngineAvailability] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_initialized(self) -> bool:
        return self._session is not None

    def initialize(self) -> Session:
        """Probe the engine and create the session.

        Returns:
            The session, which is also kept as owned state.

        Raises:
            CapabilityUnavailableError: The engine is not available.
            SessionConstructionError: Creating the session failed.
        """
        if self._session is not None:
            return self._session

        availability = self.probe.probe()
        self.last_availability = availability
        if not availability.is_available:
            reason = availability.reason or UnavailableReason.OTHER
            logger.warning(
                f"Not creating a session: engine unavailable ({reason.value})",
                extra_data={"detail": availability.detail},
            )
            raise CapabilityUnavailableError(reason, availability.detail)

        try:
            self.provider.load_model()
            session = Session(self.provider, self.instructions)
        except Exception as e:
            logger.exception("Session construction failed")
            raise SessionConstructionError(str(e)) from e

        self._session = session
        logger.info(
            f"Session ready on {self.provider.provider_name}",
            extra_data={"model": session.model},
        )
        return session

    def reinitialize(self) -> Session:
        """Explicit retry: release any current session and initialize again."""
        self.shutdown()
        return self.initialize()

    def shutdown(self) -> None:
        """Release the engine model and forget the session. Safe to repeat."""
        if self._session is None:
            return
        self._session = None
        try:
            self.provider.unload_model()
        except Exception as e:
            # Process is going away; the engine frees the model on keep_alive expiry
            logger.warning(f"Could not unload model on shutdown: {e}")
        logger.info("Session closed")
