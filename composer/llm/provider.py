"""Engine provider interface, exceptions and registry."""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Type

from ..config import LLMConfig, LLMProviderConfig
from ..models import EngineAvailability, LLMResponse, Message, MessageRole
from ..utils.logging import get_logger, log_llm_call

logger = get_logger(__name__)


class LLMError(Exception):
    """Base class for engine failures."""


class LLMTimeoutError(LLMError):
    """The engine did not answer within the configured timeout."""


class LLMResponseError(LLMError):
    """The engine answered with something unusable."""


class LLMContextWindowError(LLMError):
    """The prompt does not fit in the engine's context window."""


class LLMProvider(ABC):
    """A local text-generation engine.

    Subclasses implement the availability check, model lifecycle and the raw
    chat call; this base class adds message assembly, timing and usage
    accounting around every call.
    """

    def __init__(self, config: LLMProviderConfig):
        self.config = config
        self._usage = {"total_calls": 0, "total_input_tokens": 0, "total_output_tokens": 0}

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short name used in logs and the registry."""

    @property
    def supports_structured_output(self) -> bool:
        """Whether calls may pass a JSON schema to constrain the output."""
        return self.config.structured_output

    def estimate_tokens(self, text: str) -> int:
        """Rough token estimate: ~4 characters per token for English."""
        return len(text) // 4

    @abstractmethod
    def check_availability(self) -> EngineAvailability:
        """Report whether the engine can serve requests on this host."""

    def load_model(self, keep_alive: Optional[str] = None) -> None:
        """Make the configured model resident. No-op by default."""

    def unload_model(self) -> None:
        """Release the configured model. No-op by default."""

    @abstractmethod
    def _call_api(
        self,
        messages: List[Message],
        schema: Optional[Dict[str, Any]] = None,
    ) -> LLMResponse:
        """Send one non-streaming chat request."""

    def call(
        self,
        system_prompt: str,
        user_prompt: str,
        schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Make a single-shot call and return the response text.

        Args:
            system_prompt: Fixed session instructions.
            user_prompt: The rendered request.
            schema: Optional JSON schema for structured output. Ignored by
                providers that do not support it.

        Returns:
            Raw response content.

        Raises:
            LLMError: On any engine failure.
        """
        if schema is not None and not self.supports_structured_output:
            schema = None

        messages = [
            Message(role=MessageRole.SYSTEM, content=system_prompt),
            Message(role=MessageRole.USER, content=user_prompt),
        ]

        start = time.monotonic()
        try:
            response = self._call_api(messages, schema=schema)
        except LLMError as e:
            log_llm_call(
                logger,
                provider=self.provider_name,
                model=self.config.model,
                input_tokens=0,
                output_tokens=0,
                duration_ms=int((time.monotonic() - start) * 1000),
                success=False,
                error=str(e),
            )
            raise

        self._usage["total_calls"] += 1
        self._usage["total_input_tokens"] += response.input_tokens
        self._usage["total_output_tokens"] += response.output_tokens

        log_llm_call(
            logger,
            provider=self.provider_name,
            model=response.model or self.config.model,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return response.content

    def get_usage_stats(self) -> Dict[str, int]:
        """Accumulated token usage since creation or the last reset."""
        return {
            **self._usage,
            "total_tokens": self._usage["total_input_tokens"] + self._usage["total_output_tokens"],
        }

    def reset_usage_stats(self) -> None:
        for key in self._usage:
            self._usage[key] = 0


_PROVIDERS: Dict[str, Type[LLMProvider]] = {}


def register_provider(name: str) -> Callable[[Type[LLMProvider]], Type[LLMProvider]]:
    """Class decorator registering a provider under ``name``."""
    def decorator(cls: Type[LLMProvider]) -> Type[LLMProvider]:
        _PROVIDERS[name] = cls
        return cls
    return decorator


def get_provider(name: str, config: LLMProviderConfig) -> LLMProvider:
    """Instantiate a registered provider.

    Raises:
        ValueError: If no provider is registered under ``name``.
    """
    if name not in _PROVIDERS:
        raise ValueError(
            f"Unknown LLM provider: {name}. Available: {', '.join(sorted(_PROVIDERS))}"
        )
    return _PROVIDERS[name](config)


def create_provider_from_config(llm_config: LLMConfig) -> LLMProvider:
    """Instantiate the provider selected in the configuration."""
    return get_provider(llm_config.provider, llm_config.get_provider_config())
