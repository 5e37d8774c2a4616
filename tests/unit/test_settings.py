"""Tests for environment-driven service settings."""

import pytest

from services.orchestrator.app.settings import ServiceSettings, load_settings

_ENV_KEYS = (
    "DATABASE_URL",
    "STORAGE_BACKEND",
    "LLM_CANDIDATES",
    "LLM_PROVIDER",
    "JOB_DEADLINE_SECONDS",
    "LLM_PACING_SECONDS",
)


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_run_offline() -> None:
    settings = load_settings()
    assert settings.storage_backend == "memory"
    assert settings.llm_candidates == "mock"
    assert settings.job_deadline_seconds is None
    assert settings.retry_policy().pacing_seconds == 3.0


def test_database_url_selects_postgres(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://blog:blog@db:5432/blogforge")
    settings = load_settings()
    assert settings.storage_backend == "postgres"
    assert settings.database_url == "postgresql://blog:blog@db:5432/blogforge"


def test_candidates_and_deadline(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_CANDIDATES", "groq:llama-3.3-70b-versatile,gemini")
    monkeypatch.setenv("JOB_DEADLINE_SECONDS", "900")
    monkeypatch.setenv("LLM_PACING_SECONDS", "0")
    settings = load_settings()
    assert settings.llm_candidates == "groq:llama-3.3-70b-versatile,gemini"
    assert settings.job_deadline_seconds == 900.0
    assert settings.retry_policy().pacing_seconds == 0.0


def test_settings_are_frozen() -> None:
    settings = ServiceSettings()
    with pytest.raises(Exception):
        settings.max_attempts = 5
