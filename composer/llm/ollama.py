"""Ollama provider: a local engine reached over the loopback interface."""

import ipaddress
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests

from ..config import LLMProviderConfig
from ..models import EngineAvailability, LLMResponse, Message, UnavailableReason
from ..utils.logging import get_logger
from .provider import (
    LLMProvider,
    LLMError,
    LLMTimeoutError,
    LLMResponseError,
    LLMContextWindowError,
    register_provider,
)

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:11434"
PROBE_TIMEOUT = 5
LOCAL_HOSTNAMES = {"localhost", "localhost.localdomain"}
_CONTEXT_ERROR_MARKERS = ("context length", "context window", "context size", "exceeds the context")


def is_local_host(host: Optional[str]) -> bool:
    """True when ``host`` names this machine (loopback address or localhost)."""
    if not host:
        return False
    if host.lower() in LOCAL_HOSTNAMES:
        return True
    try:
        return ipaddress.ip_address(host).is_loopback
    except ValueError:
        return False


def normalize_model_name(name: str) -> str:
    """Ollama treats an untagged name as ``:latest``."""
    return name if ":" in name else f"{name}:latest"


def _error_text(response: requests.Response) -> str:
    try:
        data = response.json()
        if isinstance(data, dict) and "error" in data:
            return str(data["error"])
    except ValueError:
        pass
    return response.text[:200]


def _is_context_error(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _CONTEXT_ERROR_MARKERS)


@register_provider("ollama")
class OllamaProvider(LLMProvider):
    """LLM provider for a local Ollama instance.

    Only loopback hosts are accepted; a remote ``base_url`` makes the
    engine report itself as ineligible instead of sending text off-device.
    """

    def __init__(self, config: LLMProviderConfig):
        super().__init__(config)
        if not config.model:
            raise ValueError("Ollama model name is required")
        base_url = config.base_url.strip().rstrip("/") or DEFAULT_BASE_URL
        # OLLAMA_HOST is usually written as host:port
        if "://" not in base_url:
            base_url = f"http://{base_url}"
        self.base_url = base_url

    @property
    def provider_name(self) -> str:
        return "ollama"

    def check_availability(self) -> EngineAvailability:
        """Classify whether the configured model can be served right now."""
        if not self.config.enabled:
            return EngineAvailability.unavailable(
                UnavailableReason.CAPABILITY_DISABLED, "disabled in configuration"
            )

        try:
            host = urlparse(self.base_url).hostname
        except ValueError as e:
            host = None
            logger.warning(f"Cannot parse base_url {self.base_url!r}: {e}")
        if not host:
            return EngineAvailability.unavailable(
                UnavailableReason.OTHER, f"invalid base_url: {self.base_url}"
            )
        if not is_local_host(host):
            return EngineAvailability.unavailable(
                UnavailableReason.DEVICE_INELIGIBLE,
                f"{host} is not a local engine host",
            )

        try:
            response = requests.get(f"{self.base_url}/api/tags", timeout=PROBE_TIMEOUT)
        except requests.exceptions.ConnectionError:
            return EngineAvailability.unavailable(
                UnavailableReason.CAPABILITY_DISABLED,
                f"cannot connect to Ollama at {self.base_url}",
            )
        except requests.exceptions.Timeout:
            return EngineAvailability.unknown(f"Ollama at {self.base_url} did not answer")

        if response.status_code != 200:
            return EngineAvailability.unavailable(
                UnavailableReason.OTHER,
                f"Ollama returned status {response.status_code}: {_error_text(response)}",
            )

        try:
            installed = {
                normalize_model_name(model.get("name", ""))
                for model in response.json().get("models", [])
            }
        except (ValueError, AttributeError) as e:
            return EngineAvailability.unavailable(
                UnavailableReason.OTHER, f"unreadable model list: {e}"
            )

        if normalize_model_name(self.config.model) not in installed:
            return EngineAvailability.unavailable(
                UnavailableReason.NOT_READY,
                f"model {self.config.model} is not pulled yet (ollama pull {self.config.model})",
            )

        logger.debug(f"Ollama available with {len(installed)} models", extra_data={
            "base_url": self.base_url,
            "model": self.config.model,
        })
        return EngineAvailability.available()

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST to the Ollama API and return the decoded body."""
        try:
            response = requests.post(
                f"{self.base_url}{path}",
                json=payload,
                timeout=self.config.timeout,
            )
        except requests.exceptions.Timeout:
            raise LLMTimeoutError(f"Ollama request timed out after {self.config.timeout}s")
        except requests.exceptions.ConnectionError as e:
            raise LLMError(f"Ollama connection error: {e}. Is Ollama running?")
        except requests.exceptions.RequestException as e:
            raise LLMError(f"Ollama request error: {e}")

        if response.status_code != 200:
            detail = _error_text(response)
            if _is_context_error(detail):
                raise LLMContextWindowError(f"Ollama rejected the prompt: {detail}")
            raise LLMError(f"Ollama API error: {response.status_code} - {detail}")

        try:
            return response.json()
        except ValueError as e:
            raise LLMResponseError(f"Invalid JSON from Ollama: {e}")

    def load_model(self, keep_alive: Optional[str] = None) -> None:
        """Preload the model; a generate request without a prompt only loads it."""
        self._post("/api/generate", {
            "model": self.config.model,
            "keep_alive": keep_alive or self.config.keep_alive,
        })
        logger.info(f"Loaded Ollama model {self.config.model}")

    def unload_model(self) -> None:
        self._post("/api/generate", {"model": self.config.model, "keep_alive": 0})
        logger.info(f"Unloaded Ollama model {self.config.model}")

    def _call_api(
        self,
        messages: List[Message],
        schema: Optional[Dict[str, Any]] = None,
    ) -> LLMResponse:
        """Make a non-streaming chat call.

        Ollama silently drops the start of a prompt that does not fit in
        ``num_ctx``; both the estimate below and the evaluated prompt size
        in the response turn that into an explicit error instead.
        """
        context_window = self.config.context_window
        estimated = self.estimate_tokens("".join(m.content for m in messages))
        if estimated > context_window:
            raise LLMContextWindowError(
                f"Prompt needs ~{estimated} tokens, context window is {context_window}"
            )

        payload = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
            "keep_alive": self.config.keep_alive,
            "options": {
                "temperature": self.config.temperature,
                "num_ctx": context_window,
            },
        }
        if schema is not None:
            payload["format"] = schema

        data = self._post("/api/chat", payload)

        input_tokens = data.get("prompt_eval_count", 0) or 0
        if input_tokens >= context_window:
            raise LLMContextWindowError(
                f"Prompt filled the whole context window ({input_tokens}/{context_window} tokens)"
            )

        content = (data.get("message") or {}).get("content", "")
        if not content or not content.strip():
            raise LLMResponseError("Empty content in Ollama response")

        return LLMResponse(
            content=content,
            input_tokens=input_tokens,
            output_tokens=data.get("eval_count", 0) or 0,
            model=data.get("model", self.config.model),
        )
