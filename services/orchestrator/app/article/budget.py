"""Word budget planning and per-call token ceilings."""

from __future__ import annotations

import math
from dataclasses import dataclass

MIN_WORD_COUNT = 500
DEFAULT_WORD_COUNT = 1000

INTRO_SHARE = 0.12
CONCLUSION_SHARE = 0.08
FAQ_SHARE = 0.12
# With H3 subsections the H2 sections keep three quarters of the remainder.
H2_SHARE_WITH_SUBHEADINGS = 0.75

TOKENS_PER_WORD = 1.5
DEFAULT_TOKEN_PADDING = 100
CLOSING_TOKEN_PADDING = 200


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class WordBudget:
    intro_words: int
    body_section_words: int
    conclusion_words: int
    faq_words: int
    subsection_words: int = 0

    @property
    def closing_words(self) -> int:
        return self.conclusion_words + self.faq_words


def plan_word_budget(total_words: int, body_section_count: int, subsection_count: int = 0) -> WordBudget:
    """Split ``total_words`` across the article's parts.

    Intro, conclusion and FAQ take fixed shares; whatever remains is shared
    evenly by the body sections (and, when present, the H3 subsections).
    """

    intro = round_half_up(total_words * INTRO_SHARE)
    conclusion = round_half_up(total_words * CONCLUSION_SHARE)
    faq = round_half_up(total_words * FAQ_SHARE)
    remaining = total_words - intro - conclusion - faq

    body = 0
    if body_section_count > 0:
        body_pool = remaining * H2_SHARE_WITH_SUBHEADINGS if subsection_count > 0 else remaining
        body = round_half_up(body_pool / body_section_count)
    subsection = 0
    if subsection_count > 0:
        subsection = round_half_up(remaining * (1 - H2_SHARE_WITH_SUBHEADINGS) / subsection_count)

    return WordBudget(
        intro_words=intro,
        body_section_words=body,
        conclusion_words=conclusion,
        faq_words=faq,
        subsection_words=subsection,
    )


def resolve_word_target(
    value: int | None,
    *,
    minimum: int = MIN_WORD_COUNT,
    default: int = DEFAULT_WORD_COUNT,
) -> int:
    """Replace a missing or implausibly small target with ``default``."""

    if not value or value < minimum:
        return default
    return value


def token_ceiling(words: int, padding: int = DEFAULT_TOKEN_PADDING) -> int:
    return round_half_up(words * TOKENS_PER_WORD) + padding
