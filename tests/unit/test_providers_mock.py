"""Tests for the mock provider, the factory and cost estimates."""

import asyncio
import json

import pytest

from blogforge_providers import (
    MockProvider,
    ProviderConfig,
    ProviderFactory,
    ProviderRequest,
    ProviderSettings,
)
from blogforge_providers.base import CallParameters
from blogforge_providers.exceptions import ProviderConfigError
from blogforge_providers.openai import OpenAIProvider
from blogforge_providers.pricing import estimate_cost, lookup_price


def _generate(request: ProviderRequest):
    return asyncio.run(MockProvider().generate(request))


def test_mock_title_stage_returns_json() -> None:
    response = _generate(
        ProviderRequest(prompt='Create an SEO title for "home composting".', json_mode=True, metadata={"stage": "title"})
    )
    payload = json.loads(response.text)
    assert payload["title"] == "The Complete Guide to Home Composting"
    assert "home composting" in payload["meta_description"]
    assert response.model == "mock"
    assert response.cost_usd == 0.0


def test_mock_outline_stage_returns_headings() -> None:
    response = _generate(ProviderRequest(prompt='Headings for "crm"', metadata={"stage": "outline"}))
    lines = response.text.splitlines()
    assert len(lines) == 5
    assert lines[0] == "Crm Essentials Part 1"


def test_mock_closing_stage_has_conclusion_and_faq() -> None:
    response = _generate(ProviderRequest(prompt='Closing for "crm"', metadata={"stage": "closing"}))
    assert response.text.startswith("## Conclusion")
    assert "## Frequently Asked Questions" in response.text


def test_mock_refine_echoes_article() -> None:
    prompt = "Here is the blog content:\n\n---\n# Title\n\nBody.\n---\n\nApply this edit: shorten"
    response = _generate(ProviderRequest(prompt=prompt, metadata={"stage": "refine"}))
    assert response.text == "# Title\n\nBody."


def test_factory_creates_mock_when_config_provided() -> None:
    config = ProviderConfig(name="mock", api_key="mock", model="mock", settings=ProviderSettings())
    assert isinstance(ProviderFactory.create(config), MockProvider)


def test_factory_maps_groq_to_openai_compatible_client() -> None:
    config = ProviderConfig(
        name="groq",
        api_key="gsk",
        model="llama-3.1-8b-instant",
        base_url="https://api.groq.com/openai/v1",
    )
    provider = ProviderFactory.create(config)
    assert isinstance(provider, OpenAIProvider)
    assert provider.label == "groq:llama-3.1-8b-instant"


def test_factory_rejects_unknown_provider() -> None:
    with pytest.raises(ProviderConfigError, match="expected one of"):
        ProviderFactory.create(ProviderConfig(name="nope", api_key="x", model="y"))


def test_create_candidates_requires_one() -> None:
    with pytest.raises(ProviderConfigError):
        ProviderFactory.create_candidates([])


def test_call_parameters_prefer_request_overrides() -> None:
    settings = ProviderSettings(temperature=0.7, max_output_tokens=2000, top_p=0.9)
    call = CallParameters.resolve(ProviderRequest(prompt="x", temperature=0.0, max_output_tokens=300), settings)
    assert (call.temperature, call.max_output_tokens, call.top_p, call.json_mode) == (0.0, 300, 0.9, False)


def test_price_lookup_accepts_dated_snapshots() -> None:
    assert lookup_price("openai", "gpt-4o-mini-2024-07-18") == lookup_price("openai", "gpt-4o-mini")
    assert lookup_price("openai", "gpt-4o-2024-08-06") == lookup_price("openai", "gpt-4o")
    assert lookup_price("openai", "unknown-model") is None


def test_estimate_cost() -> None:
    assert estimate_cost("groq", "llama-3.1-8b-instant", 1000, 500) == pytest.approx(0.00009)
    assert estimate_cost("mock", "mock", 1000, 1000) == 0.0
    assert estimate_cost("gemini", "gemini-unknown", 10, 10) is None
