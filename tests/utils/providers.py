"""Stub providers and helpers shared by the generation tests."""

from __future__ import annotations

import json
from typing import Iterable, Union

from blogforge_providers import GenerationGateway, RetryPolicy
from blogforge_providers.base import LLMProvider, ProviderCapabilities, ProviderRequest, ProviderResponse
from blogforge_providers.exceptions import ProviderHTTPError, ProviderResponseError

Reply = Union[str, Exception]


def make_response(text: str) -> ProviderResponse:
    return ProviderResponse(text=text, raw={}, model="stub-model", prompt_tokens=3, completion_tokens=5)


class ScriptedProvider(LLMProvider):
    """Return (or raise) the scripted replies in order."""

    def __init__(self, replies: Iterable[Reply], *, name: str = "stub", supports_json_mode: bool = False) -> None:
        self.name = name
        self._replies = list(replies)
        self._supports_json_mode = supports_json_mode
        self.requests: list[ProviderRequest] = []

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(supports_json_mode=self._supports_json_mode)

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        self.requests.append(request)
        if not self._replies:
            raise ProviderResponseError(f"{self.name} has no scripted reply left")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return make_response(reply)


class ArticleProvider(LLMProvider):
    """Answer each article stage with fixed text.

    ``fail_on`` names a ``(stage, occurrence)`` pair that raises instead,
    e.g. ``("body_section", 2)`` for the second body section.
    """

    name = "article-stub"

    def __init__(
        self,
        *,
        title: str = "Stub Title",
        meta_description: str = "Stub meta description.",
        outline: str = "Generated One\nGenerated Two\nGenerated Three\nGenerated Four",
        fail_on: tuple[str, int] | None = None,
    ) -> None:
        self.title = title
        self.meta_description = meta_description
        self.outline = outline
        self.fail_on = fail_on
        self.requests: list[ProviderRequest] = []
        self._seen: dict[str, int] = {}

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(supports_json_mode=True)

    def stage_requests(self, stage: str) -> list[ProviderRequest]:
        return [request for request in self.requests if request.metadata.get("stage") == stage]

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        self.requests.append(request)
        stage = str(request.metadata.get("stage"))
        self._seen[stage] = self._seen.get(stage, 0) + 1
        if self.fail_on == (stage, self._seen[stage]):
            raise ProviderHTTPError(f"{stage} failed with status 500", status_code=500)

        if stage == "outline":
            return make_response(self.outline)
        if stage == "title":
            payload = {"title": self.title, "meta_description": self.meta_description}
            return make_response(json.dumps(payload))
        if stage == "introduction":
            return make_response(f"# {self.title}\nIntro paragraph for the reader.")
        if stage == "body_section":
            return make_response(f"Body text {self._seen[stage]}.")
        if stage == "closing":
            return make_response(
                "## Conclusion\nPick the option that fits your budget.\n\n"
                "## Frequently Asked Questions\n\n### 1. Is it worth it?\nYes, for most teams."
            )
        return make_response("Unexpected stage output.")


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def fast_gateway(*providers: LLMProvider, sleep: RecordingSleep | None = None) -> GenerationGateway:
    return GenerationGateway(
        list(providers),
        retry_policy=RetryPolicy(max_attempts=3, backoff_seconds=0.0, pacing_seconds=0.0),
        sleep=sleep or RecordingSleep(),
    )
