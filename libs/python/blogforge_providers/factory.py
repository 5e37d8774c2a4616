"""Turn provider configs into adapter instances."""

from __future__ import annotations

from typing import Callable, Sequence

from .base import LLMProvider
from .config import ProviderConfig, load_candidate_configs
from .exceptions import ProviderConfigError
from .gemini import GeminiProvider
from .mock import MockProvider
from .openai import OpenAIProvider

# Groq speaks the chat-completions protocol, so it shares the OpenAI adapter.
PROVIDER_MAP: dict[str, Callable[[ProviderConfig], LLMProvider]] = {
    "openai": OpenAIProvider,
    "groq": OpenAIProvider,
    "gemini": GeminiProvider,
    "mock": MockProvider,
}


class ProviderFactory:
    @staticmethod
    def create(config: ProviderConfig) -> LLMProvider:
        try:
            build = PROVIDER_MAP[config.name.lower()]
        except KeyError:
            known = ", ".join(sorted(PROVIDER_MAP))
            raise ProviderConfigError(f"Unknown provider {config.name!r} (expected one of: {known})") from None
        return build(config)

    @staticmethod
    def create_candidates(configs: Sequence[ProviderConfig] | None = None) -> list[LLMProvider]:
        """Build the fallback chain in order; ``None`` reads ``LLM_CANDIDATES``."""

        configs = load_candidate_configs() if configs is None else configs
        if not configs:
            raise ProviderConfigError("At least one provider candidate is required")
        return [ProviderFactory.create(config) for config in configs]
