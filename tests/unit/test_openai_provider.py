"""Tests for the OpenAI-compatible adapter's request shape and error mapping."""

from types import SimpleNamespace

import httpx
import openai
import pytest

from blogforge_providers import ProviderConfig, ProviderRequest, ProviderSettings
from blogforge_providers.exceptions import ProviderHTTPError, ProviderRateLimitError
from blogforge_providers.openai import OpenAIProvider


pytestmark = pytest.mark.anyio("asyncio")

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"


@pytest.fixture
def anyio_backend():
    return "asyncio"


def _provider(create) -> OpenAIProvider:
    config = ProviderConfig(
        name="groq",
        api_key="gsk",
        model="llama-3.1-8b-instant",
        base_url="https://api.groq.com/openai/v1",
        settings=ProviderSettings(temperature=0.7),
    )
    provider = OpenAIProvider(config)
    provider._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
    return provider


def _status_response(code: int) -> httpx.Response:
    return httpx.Response(code, request=httpx.Request("POST", GROQ_URL))


async def test_request_parameters_and_usage() -> None:
    captured = {}

    async def create(**params):
        captured.update(params)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Hello"))],
            usage=SimpleNamespace(prompt_tokens=1000, completion_tokens=500),
            model="llama-3.1-8b-instant",
        )

    provider = _provider(create)
    response = await provider.generate(
        ProviderRequest(prompt="Write", system_prompt="Rules", json_mode=True, max_output_tokens=280)
    )

    assert captured["messages"] == [
        {"role": "system", "content": "Rules"},
        {"role": "user", "content": "Write"},
    ]
    assert captured["max_tokens"] == 280
    assert captured["temperature"] == 0.7
    assert captured["response_format"] == {"type": "json_object"}
    assert response.text == "Hello"
    assert response.prompt_tokens == 1000
    assert response.cost_usd == pytest.approx(0.00009)


async def test_rate_limit_maps_to_provider_rate_limit_error() -> None:
    async def create(**params):
        raise openai.RateLimitError(
            "Rate limit reached",
            response=_status_response(429),
            body={"error": {"message": "tokens per minute exceeded"}},
        )

    with pytest.raises(ProviderRateLimitError) as excinfo:
        await _provider(create).generate(ProviderRequest(prompt="Write"))
    assert excinfo.value.status_code == 429
    assert "tokens per minute exceeded" in str(excinfo.value)


async def test_status_error_maps_to_http_error() -> None:
    async def create(**params):
        raise openai.InternalServerError("upstream", response=_status_response(503), body=None)

    with pytest.raises(ProviderHTTPError) as excinfo:
        await _provider(create).generate(ProviderRequest(prompt="Write"))
    assert excinfo.value.status_code == 503
    assert not isinstance(excinfo.value, ProviderRateLimitError)


async def test_connection_error_maps_to_http_error_without_status() -> None:
    async def create(**params):
        raise openai.APIConnectionError(request=httpx.Request("POST", GROQ_URL))

    with pytest.raises(ProviderHTTPError) as excinfo:
        await _provider(create).generate(ProviderRequest(prompt="Write"))
    assert excinfo.value.status_code is None
