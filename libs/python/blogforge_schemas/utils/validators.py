"""Reusable validation helpers."""

from __future__ import annotations

from typing import Iterable


def clean_string_list(values: Iterable[str] | None) -> list[str]:
    """Strip entries and drop blanks while keeping order.

    Args:
        values: Raw list as supplied by a form or database row (may be ``None``).

    Returns:
        A new list with surrounding whitespace removed and empty entries dropped.
    """

    if not values:
        return []
    cleaned: list[str] = []
    for value in values:
        text = str(value).strip()
        if text:
            cleaned.append(text)
    return cleaned

