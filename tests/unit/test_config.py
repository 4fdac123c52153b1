"""Unit tests for configuration loading."""

import json

import pytest

from composer.config import (
    Config,
    DEFAULT_INSTRUCTIONS,
    LLMConfig,
    LLMProviderConfig,
    create_default_config,
    default_config,
    load_config,
)


def _write(tmp_path, data) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return str(path)


class TestLoadConfig:
    """Test load_config."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError) as exc_info:
            load_config(str(tmp_path / "absent.json"))
        assert "config.json.sample" in str(exc_info.value)

    def test_invalid_json(self, tmp_path):
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, "{not json"))

    def test_non_object_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, [1, 2]))

    def test_empty_object_gives_defaults(self, tmp_path):
        config = load_config(_write(tmp_path, {}))
        assert config.llm.provider == "ollama"
        assert config.session.instructions == DEFAULT_INSTRUCTIONS
        assert config.generation.placeholder_formality_score == 7
        assert config.log_level == "INFO"

    def test_default_config_round_trip(self, tmp_path):
        config = load_config(_write(tmp_path, create_default_config()))

        provider = config.llm.get_provider_config()
        assert provider.base_url == "http://localhost:11434"
        assert provider.model == "llama3.2"
        assert provider.context_window == 4096
        assert provider.structured_output is True
        assert provider.enabled is True

    def test_provider_fields(self, tmp_path):
        config = load_config(_write(tmp_path, {
            "llm": {
                "provider": "ollama",
                "providers": {
                    "ollama": {
                        "model": "mistral",
                        "timeout": 30,
                        "context_window": 8192,
                        "structured_output": False,
                        "enabled": False,
                    }
                },
            },
            "log_level": "DEBUG",
            "log_json": True,
        }))

        provider = config.llm.get_provider_config("ollama")
        assert provider.model == "mistral"
        assert provider.timeout == 30
        assert provider.context_window == 8192
        assert provider.structured_output is False
        assert provider.enabled is False
        assert config.log_level == "DEBUG"
        assert config.log_json is True

    def test_env_var_resolution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("COMPOSER_TEST_URL", "http://127.0.0.1:11500")
        config = load_config(_write(tmp_path, {
            "llm": {"providers": {"ollama": {"base_url": "${COMPOSER_TEST_URL}", "model": "m"}}},
        }))
        assert config.llm.get_provider_config().base_url == "http://127.0.0.1:11500"

    def test_unset_env_var_resolves_empty(self, tmp_path, monkeypatch):
        monkeypatch.delenv("COMPOSER_UNSET_VAR", raising=False)
        config = load_config(_write(tmp_path, {
            "llm": {"providers": {"ollama": {"base_url": "${COMPOSER_UNSET_VAR}", "model": "m"}}},
        }))
        assert config.llm.get_provider_config().base_url == ""

    def test_custom_instructions(self, tmp_path):
        config = load_config(_write(tmp_path, {"session": {"instructions": "Be brief."}}))
        assert config.session.instructions == "Be brief."

    def test_empty_instructions_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, {"session": {"instructions": "  "}}))

    def test_placeholder_score(self, tmp_path):
        config = load_config(_write(tmp_path, {"generation": {"placeholder_formality_score": 4}}))
        assert config.generation.placeholder_formality_score == 4

    @pytest.mark.parametrize("score", [0, 11, "7", True, 5.5])
    def test_invalid_placeholder_score_falls_back(self, tmp_path, score):
        config = load_config(_write(tmp_path, {"generation": {"placeholder_formality_score": score}}))
        assert config.generation.placeholder_formality_score == 7

    def test_missing_llm_section_keeps_default_engine(self, tmp_path):
        config = load_config(_write(tmp_path, {"log_level": "DEBUG"}))

        provider = config.llm.get_provider_config()
        assert config.llm.provider == "ollama"
        assert provider.model == "llama3.2"
        assert provider.base_url == "http://localhost:11434"
        assert config.log_level == "DEBUG"

    def test_llm_section_without_providers_keeps_default_engine(self, tmp_path):
        config = load_config(_write(tmp_path, {"llm": {"provider": "ollama"}}))
        assert config.llm.get_provider_config().model == "llama3.2"

    def test_extra_provider_keeps_default_engine(self, tmp_path):
        config = load_config(_write(tmp_path, {
            "llm": {"provider": "other", "providers": {"other": {"model": "x"}}},
        }))
        assert config.llm.get_provider_config().model == "x"
        assert config.llm.get_provider_config("ollama").model == "llama3.2"

    def test_invalid_log_level_rejected(self, tmp_path):
        with pytest.raises(ValueError) as exc_info:
            load_config(_write(tmp_path, {"log_level": "LOUD"}))
        assert "Invalid log level" in str(exc_info.value)


class TestLLMConfig:
    """Test provider lookup."""

    def test_unknown_provider(self):
        config = LLMConfig(provider="missing")
        with pytest.raises(ValueError) as exc_info:
            config.get_provider_config()
        assert "Unknown LLM provider" in str(exc_info.value)

    def test_named_lookup(self):
        provider = LLMProviderConfig(model="x")
        config = LLMConfig(providers={"ollama": provider})
        assert config.get_provider_config("ollama") is provider


class TestDefaultConfig:
    """Test the fallback configuration."""

    def test_default_config(self):
        config = default_config()
        assert isinstance(config, Config)
        assert config.llm.get_provider_config().model == "llama3.2"
        assert config.session.instructions == DEFAULT_INSTRUCTIONS
