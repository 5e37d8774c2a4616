"""Google Gemini adapter built on the ``google-genai`` SDK."""

from __future__ import annotations

import time

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from .base import CallParameters, LLMProvider, ProviderCapabilities, ProviderRequest, ProviderResponse
from .config import ProviderConfig
from .exceptions import ProviderHTTPError, ProviderRateLimitError, ProviderResponseError
from .pricing import estimate_cost


class GeminiProvider(LLMProvider):
    name = "gemini"

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        self._client = genai.Client(api_key=config.api_key)

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_json_mode=True,
            max_output_tokens=self._config.settings.max_output_tokens,
        )

    def _build_config(self, request: ProviderRequest) -> genai_types.GenerateContentConfig:
        call = CallParameters.resolve(request, self._config.settings)
        return genai_types.GenerateContentConfig(
            system_instruction=request.system_prompt or None,
            temperature=call.temperature,
            top_p=call.top_p,
            max_output_tokens=call.max_output_tokens,
            response_mime_type="application/json" if call.json_mode else None,
        )

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        started = time.perf_counter()
        try:
            result = await self._client.aio.models.generate_content(
                model=self._config.model,
                contents=request.prompt,
                config=self._build_config(request),
            )
        except genai_errors.APIError as err:
            if err.code == 429:
                raise ProviderRateLimitError(f"{self.label} rate limited: {err.message}") from err
            raise ProviderHTTPError(f"{self.label} returned {err.code}: {err.message}", status_code=err.code) from err
        latency_ms = (time.perf_counter() - started) * 1000

        try:
            text = result.text or ""
        except ValueError as err:
            # Raised by the SDK when the candidate was blocked.
            raise ProviderResponseError(f"{self.label} returned no text: {err}") from err

        usage = result.usage_metadata
        prompt_tokens = (usage.prompt_token_count or 0) if usage else 0
        completion_tokens = (usage.candidates_token_count or 0) if usage else 0
        return ProviderResponse(
            text=text,
            raw=result,
            model=self._config.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost_usd=estimate_cost(self.name, self._config.model, prompt_tokens, completion_tokens),
            latency_ms=latency_ms,
        )
