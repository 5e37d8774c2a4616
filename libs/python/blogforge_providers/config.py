"""Provider candidate configuration read from the environment.

Each candidate ``NAME`` is configured with ``NAME_API_KEY`` and
``NAME_MODEL`` plus the optional ``NAME_BASE_URL``, ``NAME_TEMPERATURE``,
``NAME_MAX_OUTPUT_TOKENS``, ``NAME_TOP_P`` and ``NAME_JSON_MODE``.
"""

from __future__ import annotations

import os
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ProviderConfigError

PROVIDER_ENV_VAR = "LLM_PROVIDER"
CANDIDATES_ENV_VAR = "LLM_CANDIDATES"
DEFAULT_PROVIDER = "groq"

_KEYLESS_PROVIDERS = frozenset({"mock"})

DEFAULT_BASE_URLS = {
    "groq": "https://api.groq.com/openai/v1",
}

_T = TypeVar("_T")


class ProviderSettings(BaseModel):
    """Defaults applied when a request leaves a parameter unset."""

    temperature: float = Field(0.7, ge=0, le=2)
    max_output_tokens: int | None = Field(None, ge=16)
    top_p: float | None = Field(None, ge=0, le=1)
    json_mode: bool = False


class ProviderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    api_key: str
    model: str
    base_url: str | None = None
    settings: ProviderSettings = Field(default_factory=ProviderSettings)


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"} if value is not None else False


def _parse_env(name: str, cast: Callable[[str], _T], expected: str) -> _T | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise ProviderConfigError(f"{name} must be {expected}, got {raw!r}") from exc


def load_provider_config(prefix: str | None = None, model: str | None = None) -> ProviderConfig:
    """Build the config for provider ``prefix`` (default: ``LLM_PROVIDER``).

    ``model`` overrides ``<PREFIX>_MODEL``. Raises
    :class:`ProviderConfigError` when the key or model is missing or a
    numeric setting does not parse.
    """

    name = (prefix or os.getenv(PROVIDER_ENV_VAR) or DEFAULT_PROVIDER).strip().lower()
    env = name.upper()
    if name in _KEYLESS_PROVIDERS:
        return ProviderConfig(name=name, api_key=name, model=model or name)

    api_key = os.getenv(f"{env}_API_KEY")
    model = model or os.getenv(f"{env}_MODEL")
    if not api_key or not model:
        raise ProviderConfigError(f"{env}_API_KEY and {env}_MODEL must be configured")

    temperature = _parse_env(f"{env}_TEMPERATURE", float, "a float")
    max_output_tokens = _parse_env(f"{env}_MAX_OUTPUT_TOKENS", int, "a positive integer")
    settings = ProviderSettings(
        temperature=0.7 if temperature is None else temperature,
        max_output_tokens=max_output_tokens if max_output_tokens and max_output_tokens > 0 else None,
        top_p=_parse_env(f"{env}_TOP_P", float, "a float between 0 and 1"),
        json_mode=parse_bool(os.getenv(f"{env}_JSON_MODE")),
    )
    return ProviderConfig(
        name=name,
        api_key=api_key,
        model=model,
        base_url=os.getenv(f"{env}_BASE_URL") or DEFAULT_BASE_URLS.get(name),
        settings=settings,
    )


def load_candidate_configs(candidates: str | None = None) -> list[ProviderConfig]:
    """Resolve the ordered fallback chain.

    ``candidates`` (or ``LLM_CANDIDATES``) lists ``provider[:model]`` entries
    separated by commas, e.g. ``groq:llama-3.3-70b-versatile,gemini,mock``.
    When both are empty the single ``LLM_PROVIDER`` is used.
    """

    raw = os.getenv(CANDIDATES_ENV_VAR, "") if candidates is None else candidates
    entries = [entry.strip() for entry in raw.split(",") if entry.strip()]
    if not entries:
        return [load_provider_config()]

    configs = []
    for entry in entries:
        provider, _, model = (part.strip() for part in entry.partition(":"))
        if not provider:
            raise ProviderConfigError(f"Invalid provider candidate entry: {entry!r}")
        configs.append(load_provider_config(prefix=provider, model=model or None))
    return configs
