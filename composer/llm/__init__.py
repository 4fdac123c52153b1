"""Engine provider abstraction and session lifecycle."""

from .provider import (
    LLMProvider,
    LLMError,
    LLMTimeoutError,
    LLMResponseError,
    LLMContextWindowError,
    get_provider,
    create_provider_from_config,
    register_provider,
)
from .probe import AvailabilityProbe
from .session import (
    Session,
    SessionManager,
    SessionInitError,
    CapabilityUnavailableError,
    SessionConstructionError,
)

# Import providers to register them
from . import ollama

__all__ = [
    # Provider base
    "LLMProvider",
    "LLMError",
    "LLMTimeoutError",
    "LLMResponseError",
    "LLMContextWindowError",
    "get_provider",
    "create_provider_from_config",
    "register_provider",
    # Probe and session
    "AvailabilityProbe",
    "Session",
    "SessionManager",
    "SessionInitError",
    "CapabilityUnavailableError",
    "SessionConstructionError",
]
