"""Approximate USD prices for the models BlogForge is usually pointed at."""

from __future__ import annotations

from typing import NamedTuple


class ModelPrice(NamedTuple):
    input_per_million: float
    output_per_million: float


_PRICES: dict[tuple[str, str], ModelPrice] = {
    ("groq", "llama-3.1-8b-instant"): ModelPrice(0.05, 0.08),
    ("groq", "llama-3.3-70b-versatile"): ModelPrice(0.59, 0.79),
    ("groq", "openai/gpt-oss-20b"): ModelPrice(0.10, 0.50),
    ("groq", "openai/gpt-oss-120b"): ModelPrice(0.15, 0.75),
    ("openai", "gpt-4o-mini"): ModelPrice(0.15, 0.60),
    ("openai", "gpt-4o"): ModelPrice(2.50, 10.00),
    ("openai", "gpt-4.1-mini"): ModelPrice(0.40, 1.60),
    ("gemini", "gemini-2.5-flash"): ModelPrice(0.30, 2.50),
    ("gemini", "gemini-2.5-pro"): ModelPrice(1.25, 10.00),
}


def lookup_price(provider: str, model: str) -> ModelPrice | None:
    """Find the price row, accepting dated snapshots such as ``gpt-4o-mini-2024-07-18``.

    The longest matching model prefix wins.
    """

    provider = (provider or "").lower()
    model = (model or "").lower()
    exact = _PRICES.get((provider, model))
    if exact is not None:
        return exact
    matches = [
        (known_model, price)
        for (known_provider, known_model), price in _PRICES.items()
        if known_provider == provider and model.startswith(known_model + "-")
    ]
    if not matches:
        return None
    return max(matches, key=lambda item: len(item[0]))[1]


def estimate_cost(provider: str, model: str, prompt_tokens: int | None, completion_tokens: int | None) -> float | None:
    """Cost of one call in USD; ``None`` when the model is not priced.

    The keyless mock provider is always free.
    """

    if (provider or "").lower() == "mock":
        return 0.0
    price = lookup_price(provider, model)
    if price is None:
        return None
    prompt = max(prompt_tokens or 0, 0)
    completion = max(completion_tokens or 0, 0)
    return round((prompt * price.input_per_million + completion * price.output_per_million) / 1_000_000, 6)
