"""Provider interface plus the request/response shapes every backend speaks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, MutableMapping

if TYPE_CHECKING:  # pragma: no cover
    from .config import ProviderSettings


@dataclass(slots=True)
class ProviderRequest:
    """One generation call.

    ``metadata["stage"]`` names the article step issuing the call and is
    used for logs and metrics only.
    """

    prompt: str
    system_prompt: str | None = None
    json_mode: bool = False
    temperature: float | None = None
    max_output_tokens: int | None = None
    top_p: float | None = None
    metadata: MutableMapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ProviderResponse:
    text: str
    raw: Any
    model: str
    prompt_tokens: int
    completion_tokens: int
    cost_usd: float | None = None
    latency_ms: float | None = None
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass(slots=True)
class ProviderCapabilities:
    supports_json_mode: bool = False
    max_input_tokens: int | None = None
    max_output_tokens: int | None = None


@dataclass(frozen=True, slots=True)
class CallParameters:
    """Sampling parameters after request overrides are applied to provider defaults."""

    temperature: float
    top_p: float | None
    max_output_tokens: int | None
    json_mode: bool

    @classmethod
    def resolve(cls, request: ProviderRequest, settings: "ProviderSettings") -> "CallParameters":
        def pick(override, default):
            return default if override is None else override

        return cls(
            temperature=pick(request.temperature, settings.temperature),
            top_p=pick(request.top_p, settings.top_p),
            max_output_tokens=pick(request.max_output_tokens, settings.max_output_tokens) or None,
            json_mode=request.json_mode or settings.json_mode,
        )


class LLMProvider(ABC):
    """A single text-generation backend (one provider and model)."""

    name: str

    @property
    def model(self) -> str:
        config = getattr(self, "_config", None)
        return getattr(config, "model", None) or self.name

    @property
    def label(self) -> str:
        """``provider:model``, as written in logs and error messages."""

        return f"{self.name}:{self.model}"

    @abstractmethod
    def capabilities(self) -> ProviderCapabilities:
        ...

    @abstractmethod
    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        """Run one call; failures raise :class:`~blogforge_providers.exceptions.ProviderError`."""
