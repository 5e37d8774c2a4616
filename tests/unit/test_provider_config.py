"""Tests for provider configuration loading."""

import os

import pytest

from blogforge_providers import ProviderConfig, load_candidate_configs, load_provider_config
from blogforge_providers.config import CANDIDATES_ENV_VAR, DEFAULT_PROVIDER, PROVIDER_ENV_VAR, parse_bool
from blogforge_providers.exceptions import ProviderConfigError


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith(("OPENAI_", "GEMINI_", "GROQ_")):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv(PROVIDER_ENV_VAR, raising=False)
    monkeypatch.delenv(CANDIDATES_ENV_VAR, raising=False)


def test_load_openai_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PROVIDER_ENV_VAR, "openai")
    monkeypatch.setenv("OPENAI_API_KEY", "key")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("OPENAI_MAX_OUTPUT_TOKENS", "512")
    cfg = load_provider_config()
    assert isinstance(cfg, ProviderConfig)
    assert cfg.name == "openai"
    assert cfg.api_key == "key"
    assert cfg.base_url is None
    assert cfg.settings.max_output_tokens == 512


def test_groq_is_default_and_gets_public_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GROQ_API_KEY", "gsk")
    monkeypatch.setenv("GROQ_MODEL", "llama-3.1-8b-instant")
    cfg = load_provider_config()
    assert DEFAULT_PROVIDER == "groq"
    assert cfg.name == "groq"
    assert cfg.base_url == "https://api.groq.com/openai/v1"


def test_missing_variables_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PROVIDER_ENV_VAR, "gemini")
    with pytest.raises(ProviderConfigError):
        load_provider_config()


def test_invalid_temperature_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "key")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("OPENAI_TEMPERATURE", "warm")
    with pytest.raises(ProviderConfigError):
        load_provider_config(prefix="openai")


def test_custom_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MYPROV_API_KEY", "abc")
    monkeypatch.setenv("MYPROV_MODEL", "model")
    monkeypatch.setenv("MYPROV_JSON_MODE", "yes")
    cfg = load_provider_config(prefix="myprov")
    assert cfg.name == "myprov"
    assert cfg.settings.temperature == 0.7
    assert cfg.settings.json_mode is True


def test_candidate_list_keeps_order_and_model_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GROQ_API_KEY", "gsk")
    monkeypatch.setenv("GROQ_MODEL", "llama-3.1-8b-instant")
    monkeypatch.setenv(CANDIDATES_ENV_VAR, "groq:llama-3.3-70b-versatile, groq ,mock")
    configs = load_candidate_configs()
    assert [cfg.name for cfg in configs] == ["groq", "groq", "mock"]
    assert configs[0].model == "llama-3.3-70b-versatile"
    assert configs[1].model == "llama-3.1-8b-instant"


def test_candidate_list_falls_back_to_single_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(PROVIDER_ENV_VAR, "mock")
    configs = load_candidate_configs()
    assert len(configs) == 1
    assert configs[0].name == "mock"


def test_candidate_entry_without_provider_raises() -> None:
    with pytest.raises(ProviderConfigError):
        load_candidate_configs(":gpt-4o")


@pytest.mark.parametrize("value, expected", [("true", True), ("1", True), ("off", False), (None, False)])
def test_parse_bool(value, expected) -> None:
    assert parse_bool(value) is expected
