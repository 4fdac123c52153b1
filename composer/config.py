"""Configuration management for the composer."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .models.result import MAX_FORMALITY_SCORE, MIN_FORMALITY_SCORE
from .utils.logging import get_logger, parse_log_level

logger = get_logger(__name__)

DEFAULT_INSTRUCTIONS = (
    "You are a helpful assistant that generates contextually appropriate "
    "responses for different audiences and tones."
)
DEFAULT_PLACEHOLDER_FORMALITY_SCORE = 7


@dataclass
class LLMProviderConfig:
    """Configuration for a specific engine provider."""
    base_url: str = ""
    model: str = ""
    temperature: float = 0.7
    timeout: int = 120
    context_window: int = 4096
    keep_alive: str = "10m"
    structured_output: bool = True
    enabled: bool = True


@dataclass
class LLMConfig:
    """Configuration for engine providers."""
    provider: str = "ollama"
    providers: Dict[str, LLMProviderConfig] = field(default_factory=dict)

    def get_provider_config(self, provider_name: Optional[str] = None) -> LLMProviderConfig:
        """Get configuration for a specific provider."""
        name = provider_name or self.provider
        if name not in self.providers:
            raise ValueError(f"Unknown LLM provider: {name}")
        return self.providers[name]


@dataclass
class SessionConfig:
    """Fixed behaviour of the generation session."""
    instructions: str = DEFAULT_INSTRUCTIONS


@dataclass
class GenerationConfig:
    """Configuration for generation requests."""
    # Used when the engine returns free text without a score
    placeholder_formality_score: int = DEFAULT_PLACEHOLDER_FORMALITY_SCORE


@dataclass
class Config:
    """Main configuration container."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    log_level: str = "INFO"
    log_json: bool = False


def _resolve_env_vars(value: Any) -> Any:
    """Resolve ${VAR} references in string values."""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        env_var = value[2:-1]
        resolved = os.environ.get(env_var, "")
        if not resolved:
            logger.warning(f"Environment variable {env_var} not set")
        return resolved
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(v) for v in value]
    return value


def _parse_llm_provider_config(data: Dict) -> LLMProviderConfig:
    """Parse one provider section."""
    return LLMProviderConfig(
        base_url=data.get("base_url", ""),
        model=data.get("model", ""),
        temperature=data.get("temperature", 0.7),
        timeout=data.get("timeout", 120),
        context_window=data.get("context_window", 4096),
        keep_alive=data.get("keep_alive", "10m"),
        structured_output=data.get("structured_output", True),
        enabled=data.get("enabled", True),
    )


def _parse_llm_config(data: Dict) -> LLMConfig:
    """Parse the engine configuration section."""
    providers = {}
    for name, provider_data in data.get("providers", {}).items():
        providers[name] = _parse_llm_provider_config(provider_data)

    return LLMConfig(
        provider=data.get("provider", "ollama"),
        providers=providers,
    )


def _parse_generation_config(data: Dict) -> GenerationConfig:
    """Parse the generation section, falling back on an out-of-range score."""
    score = data.get("placeholder_formality_score", DEFAULT_PLACEHOLDER_FORMALITY_SCORE)
    if (
        isinstance(score, bool)
        or not isinstance(score, int)
        or not MIN_FORMALITY_SCORE <= score <= MAX_FORMALITY_SCORE
    ):
        logger.warning(
            f"Invalid placeholder_formality_score {score!r}, "
            f"using {DEFAULT_PLACEHOLDER_FORMALITY_SCORE}"
        )
        score = DEFAULT_PLACEHOLDER_FORMALITY_SCORE
    return GenerationConfig(placeholder_formality_score=score)


def load_config(config_path: str = "config.json") -> Config:
    """Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Parsed configuration object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config file is invalid.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n"
            "Please copy config.json.sample to config.json and configure it."
        )

    try:
        with open(path) as f:
            data = _resolve_env_vars(json.load(f))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")

    if not isinstance(data, dict):
        raise ValueError("Invalid config file: top level must be an object")

    # Sections the file leaves out keep their defaults
    config = default_config()

    if "llm" in data:
        llm = _parse_llm_config(data["llm"])
        config.llm = LLMConfig(
            provider=llm.provider,
            providers={**config.llm.providers, **llm.providers},
        )

    if "session" in data:
        instructions = data["session"].get("instructions", DEFAULT_INSTRUCTIONS)
        if not instructions or not instructions.strip():
            raise ValueError("session.instructions must not be empty")
        config.session = SessionConfig(instructions=instructions)

    if "generation" in data:
        config.generation = _parse_generation_config(data["generation"])

    config.log_level = data.get("log_level", "INFO")
    parse_log_level(config.log_level)
    config.log_json = data.get("log_json", False)

    logger.info(f"Loaded configuration from {config_path}")
    return config


def create_default_config() -> Dict:
    """Create a default configuration dictionary."""
    return {
        "llm": {
            "provider": "ollama",
            "providers": {
                "ollama": {
                    "base_url": "http://localhost:11434",
                    "model": "llama3.2",
                    "temperature": 0.7,
                    "timeout": 120,
                    "context_window": 4096,
                    "keep_alive": "10m",
                    "structured_output": True,
                    "enabled": True
                }
            }
        },
        "session": {
            "instructions": DEFAULT_INSTRUCTIONS
        },
        "generation": {
            "placeholder_formality_score": DEFAULT_PLACEHOLDER_FORMALITY_SCORE
        },
        "log_level": "INFO",
        "log_json": False
    }


def default_config() -> Config:
    """Configuration used when no config file is present."""
    data = create_default_config()
    return Config(llm=_parse_llm_config(data["llm"]))
