"""Decide which body headings an article run uses."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

from blogforge_providers import GenerationGateway

from .budget import round_half_up
from .prompts import OUTLINE_PROMPT, OUTLINE_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"Top Pick #|\[Item|^Step \d|^\d+\. \[")

# Intro plus conclusion/FAQ take roughly this many words; each heading ~200 more.
FIXED_SECTION_WORDS = 320
WORDS_PER_HEADING = 200
MIN_HEADINGS = 3
MAX_HEADINGS = 12
MAX_OUTLINE_ATTEMPTS = 2
OUTLINE_MAX_TOKENS = 400

_LEADING_HASHES = re.compile(r"^#+\s*")
_LEADING_BULLET = re.compile(r"^[-*•]\s+")
_LEADING_NUMBER = re.compile(r"^\d+[.)]?\s*")


def is_placeholder_heading(heading: str) -> bool:
    return bool(PLACEHOLDER_PATTERN.search(heading))


def needs_regeneration(headings: Sequence[str]) -> bool:
    return not headings or any(is_placeholder_heading(heading) for heading in headings)


def target_heading_count(word_count: int) -> int:
    count = round_half_up((word_count - FIXED_SECTION_WORDS) / WORDS_PER_HEADING)
    return min(max(count, MIN_HEADINGS), MAX_HEADINGS)


def minimum_accepted_count(target: int) -> int:
    return max(2, target - 2)


def parse_headings(text: str) -> list[str]:
    """Turn a one-heading-per-line response into clean heading strings."""

    headings: list[str] = []
    for line in (text or "").splitlines():
        heading = _LEADING_HASHES.sub("", line.strip())
        heading = _LEADING_BULLET.sub("", heading)
        heading = _LEADING_NUMBER.sub("", heading)
        heading = heading.strip().strip("\"'").replace("**", "").strip()
        if heading:
            headings.append(heading)
    return headings


@dataclass(frozen=True)
class OutlineResolution:
    headings: list[str]
    target_count: int
    regenerated: bool = False


class OutlineResolver:
    """Keep usable headings, otherwise ask the gateway for a fresh list."""

    def __init__(self, gateway: GenerationGateway, *, max_attempts: int = MAX_OUTLINE_ATTEMPTS) -> None:
        self._gateway = gateway
        self._max_attempts = max_attempts

    async def resolve(self, headings: Sequence[str], word_count: int, keyword: str) -> OutlineResolution:
        target = target_heading_count(word_count)
        requested = [heading.strip() for heading in headings if heading and heading.strip()]
        if not needs_regeneration(requested):
            return OutlineResolution(headings=requested[:target], target_count=target)

        minimum = minimum_accepted_count(target)
        best: list[str] = []
        accepted: list[str] | None = None
        for attempt in range(1, self._max_attempts + 1):
            response = await self._gateway.complete(
                OUTLINE_SYSTEM_PROMPT,
                OUTLINE_PROMPT.format(count=target, keyword=keyword),
                OUTLINE_MAX_TOKENS,
                stage="outline",
            )
            generated = parse_headings(response)
            if len(generated) > len(best):
                best = generated
            if len(generated) >= minimum:
                accepted = generated
                break
            logger.warning(
                "Generated outline too short",
                extra={"attempt": attempt, "heading_count": len(generated), "target_count": target},
            )

        if accepted is None:
            kept = [heading for heading in requested if not is_placeholder_heading(heading)]
            accepted = kept or best
            logger.info("Falling back to %s headings", "requested" if kept else "best generated")

        return OutlineResolution(headings=accepted[:target], target_count=target, regenerated=True)
