"""Credit cost estimation for article runs."""

from __future__ import annotations

# (minimum word count, base credits), checked from the largest threshold down.
_WORD_TIERS = (
    (2500, 4),
    (1500, 3),
    (800, 2),
)
_BASE_CREDITS = 1


def estimate_credits(word_count: int, *, has_subheadings: bool = False, has_faq: bool = True) -> int:
    """Credits charged for one article run.

    Args:
        word_count: Target word count after clamping.
        has_subheadings: Whether H3 subsections are generated.
        has_faq: Whether the closing step writes an FAQ block.

    Returns:
        Whole number of credits (always at least 1).
    """

    credits = _BASE_CREDITS
    for threshold, tier_credits in _WORD_TIERS:
        if word_count >= threshold:
            credits = tier_credits
            break
    if has_subheadings:
        credits += 1
    if has_faq:
        credits += 1
    return credits
