"""Chat-completions adapter for OpenAI and OpenAI-compatible hosts (Groq)."""

from __future__ import annotations

import time
from typing import Any

import openai
from openai import AsyncOpenAI

from .base import CallParameters, LLMProvider, ProviderCapabilities, ProviderRequest, ProviderResponse
from .config import ProviderConfig
from .exceptions import ProviderHTTPError, ProviderRateLimitError, ProviderResponseError
from .pricing import estimate_cost


class OpenAIProvider(LLMProvider):
    name = "openai"

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        # Groq and other compatible hosts reuse this adapter under their own name.
        self.name = config.name
        self._client = AsyncOpenAI(api_key=config.api_key, base_url=config.base_url)

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_json_mode=True,
            max_output_tokens=self._config.settings.max_output_tokens,
        )

    def _build_params(self, request: ProviderRequest) -> dict[str, Any]:
        call = CallParameters.resolve(request, self._config.settings)
        messages = [{"role": "user", "content": request.prompt}]
        if request.system_prompt:
            messages.insert(0, {"role": "system", "content": request.system_prompt})

        params: dict[str, Any] = {
            "model": self._config.model,
            "messages": messages,
            "temperature": call.temperature,
        }
        if call.top_p is not None:
            params["top_p"] = call.top_p
        if call.max_output_tokens:
            params["max_tokens"] = call.max_output_tokens
        if call.json_mode:
            params["response_format"] = {"type": "json_object"}
        return params

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        started = time.perf_counter()
        try:
            completion = await self._client.chat.completions.create(**self._build_params(request))
        except openai.APIError as err:
            raise self._translate_error(err) from err
        latency_ms = (time.perf_counter() - started) * 1000

        choices = getattr(completion, "choices", None) or []
        if not choices or getattr(choices[0], "message", None) is None:
            raise ProviderResponseError(f"{self.label} returned no choices")
        text = choices[0].message.content or ""

        usage = getattr(completion, "usage", None)
        prompt_tokens = getattr(usage, "prompt_tokens", None) or 0
        completion_tokens = getattr(usage, "completion_tokens", None) or 0
        model = getattr(completion, "model", None) or self._config.model
        return ProviderResponse(
            text=text,
            raw=completion,
            model=model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost_usd=estimate_cost(self._config.name, model, prompt_tokens, completion_tokens),
            latency_ms=latency_ms,
        )

    def _translate_error(self, err: openai.APIError) -> ProviderHTTPError:
        if isinstance(err, openai.RateLimitError):
            return ProviderRateLimitError(f"{self.label} rate limited: {_error_message(err)}")
        if isinstance(err, openai.APIStatusError):
            return ProviderHTTPError(
                f"{self.label} returned {err.status_code}: {_error_message(err)}",
                status_code=err.status_code,
            )
        # Connection errors and timeouts carry no status code.
        return ProviderHTTPError(f"{self.label} request failed: {err}")


def _error_message(err: openai.APIError) -> str:
    body = err.body if isinstance(err.body, dict) else {}
    detail = body.get("error", body)
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    return str(err)
