"""Ordered provider fallback with rate-limit backoff."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from blogforge_observability import log_context, observe_provider_attempt, observe_provider_response

from .base import LLMProvider, ProviderRequest, ProviderResponse
from .exceptions import (
    GenerationUnavailable,
    ProviderConfigError,
    ProviderError,
    ProviderRateLimitError,
    ProviderResponseError,
)

logger = logging.getLogger(__name__)

_REASONING_BLOCK = re.compile(r"<(think|thinking)>.*?</\1>", re.DOTALL | re.IGNORECASE)

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Per-candidate retry settings.

    ``pacing_seconds`` is waited before every call to stay under provider
    throughput quotas; ``backoff_seconds`` is multiplied by the attempt
    number after a 429.
    """

    max_attempts: int = 3
    backoff_seconds: float = 5.0
    pacing_seconds: float = 3.0


def strip_reasoning(text: str) -> str:
    """Remove reasoning-model ``<think>`` wrappers and surrounding whitespace."""

    return _REASONING_BLOCK.sub("", text or "").strip()


class GenerationGateway:
    """Try an ordered list of provider candidates until one returns usable text."""

    def __init__(
        self,
        candidates: Sequence[LLMProvider],
        *,
        retry_policy: RetryPolicy | None = None,
        sleep: Sleeper = asyncio.sleep,
        service_name: str = "orchestrator",
    ) -> None:
        if not candidates:
            raise ProviderConfigError("GenerationGateway requires at least one candidate")
        self._candidates = list(candidates)
        self._policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._service_name = service_name

    @property
    def candidates(self) -> list[LLMProvider]:
        return list(self._candidates)

    async def complete(
        self,
        system_prompt: str | None,
        user_prompt: str,
        max_tokens: int | None = None,
        *,
        json_mode: bool = False,
        stage: str = "generation",
        temperature: float | None = None,
    ) -> str:
        """Return cleaned text from the first candidate that succeeds."""

        request = ProviderRequest(
            prompt=user_prompt,
            system_prompt=system_prompt,
            json_mode=json_mode,
            temperature=temperature,
            max_output_tokens=max_tokens,
            metadata={"stage": stage},
        )
        response = await self.generate(request, stage=stage)
        return response.text

    async def generate(self, request: ProviderRequest, *, stage: str = "generation") -> ProviderResponse:
        last_error: ProviderError | None = None

        for candidate in self._ordered_candidates(request.json_mode):
            with log_context(provider=candidate.name, model=candidate.model):
                for attempt in range(1, self._policy.max_attempts + 1):
                    if self._policy.pacing_seconds > 0:
                        await self._sleep(self._policy.pacing_seconds)
                    try:
                        response = await candidate.generate(request)
                    except ProviderRateLimitError as exc:
                        last_error = exc
                        observe_provider_attempt(
                            provider=candidate.label,
                            stage=stage,
                            outcome="rate_limited",
                            service_name=self._service_name,
                        )
                        logger.warning(
                            "Provider rate limited",
                            extra={"attempt": attempt, "max_attempts": self._policy.max_attempts, "error": str(exc)},
                        )
                        if attempt < self._policy.max_attempts:
                            await self._sleep(self._policy.backoff_seconds * attempt)
                        continue
                    except ProviderError as exc:
                        last_error = exc
                        observe_provider_attempt(
                            provider=candidate.label,
                            stage=stage,
                            outcome="error",
                            service_name=self._service_name,
                        )
                        logger.warning(
                            "Provider call failed; trying next candidate",
                            extra={"attempt": attempt, "error": str(exc)},
                        )
                        break

                    cleaned = strip_reasoning(response.text)
                    if not cleaned:
                        last_error = ProviderResponseError(f"Empty response from {candidate.label}")
                        observe_provider_attempt(
                            provider=candidate.label,
                            stage=stage,
                            outcome="empty",
                            service_name=self._service_name,
                        )
                        logger.warning("Provider returned empty content; trying next candidate")
                        break

                    response.text = cleaned
                    observe_provider_attempt(
                        provider=candidate.label,
                        stage=stage,
                        outcome="success",
                        service_name=self._service_name,
                    )
                    observe_provider_response(
                        stage=stage,
                        provider=candidate.name,
                        service_name=self._service_name,
                        response=response,
                    )
                    logger.info(
                        "Generated with provider",
                        extra={
                            "attempt": attempt,
                            "prompt_tokens": response.prompt_tokens,
                            "completion_tokens": response.completion_tokens,
                            "latency_ms": response.latency_ms or 0,
                        },
                    )
                    return response

        detail = str(last_error) if last_error else "no candidates attempted"
        raise GenerationUnavailable(
            f"All generation providers exhausted: {detail}", last_error=detail
        ) from last_error

    def _ordered_candidates(self, json_mode: bool) -> list[LLMProvider]:
        if not json_mode:
            return list(self._candidates)
        preferred = [c for c in self._candidates if c.capabilities().supports_json_mode]
        others = [c for c in self._candidates if not c.capabilities().supports_json_mode]
        return preferred + others
