"""Offline provider that answers each article stage with canned Markdown."""

from __future__ import annotations

import json
import re

from .base import LLMProvider, ProviderCapabilities, ProviderRequest, ProviderResponse
from .config import ProviderConfig

MOCK_HEADING_COUNT = 5
_TOPIC = re.compile(r'"([^"]+)"')


class MockProvider(LLMProvider):
    """Deterministic replies keyed on ``metadata["stage"]``; never fails."""

    name = "mock"

    def __init__(self, config: ProviderConfig | None = None) -> None:
        self._config = config or ProviderConfig(name="mock", api_key="mock", model="mock")

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(supports_json_mode=True, max_input_tokens=32000, max_output_tokens=4000)

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        stage = str(request.metadata.get("stage") or "")
        topic = _topic(request.prompt)
        text = self._reply(stage, topic, request)
        return ProviderResponse(
            text=text,
            raw={"mock": True, "stage": stage},
            model="mock",
            prompt_tokens=len(request.prompt.split()),
            completion_tokens=len(text.split()),
            cost_usd=0.0,
            latency_ms=1.0,
        )

    @staticmethod
    def _reply(stage: str, topic: str, request: ProviderRequest) -> str:
        if request.json_mode or stage == "title":
            return json.dumps(
                {
                    "title": f"The Complete Guide to {topic.title()}",
                    "meta_description": f"Everything you need to know about {topic}, explained simply.",
                }
            )
        if stage == "outline":
            return "\n".join(f"{topic.title()} Essentials Part {index}" for index in range(1, MOCK_HEADING_COUNT + 1))
        if stage == "title_suggestion":
            return f"{topic.title()}: A Practical Guide"
        if stage == "introduction":
            return f"This guide walks through {topic} step by step."
        if stage == "body_section":
            return f"Here is what matters most about {topic} in this part of the article."
        if stage == "closing":
            return (
                f"## Conclusion\nStart small with {topic} and build from there.\n\n"
                "## Frequently Asked Questions\n\n"
                f"### 1. Where should I start with {topic}?\nPick one goal and measure it."
            )
        if stage == "refine":
            # Echo the article back unchanged.
            parts = request.prompt.split("---")
            return parts[1].strip() if len(parts) >= 3 else request.prompt
        return f"Mock response about {topic}."


def _topic(prompt: str) -> str:
    match = _TOPIC.search(prompt)
    return match.group(1) if match else "your topic"
