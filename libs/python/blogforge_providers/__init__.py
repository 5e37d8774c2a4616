"""Unified provider abstraction and fallback gateway for text generation."""

from .base import LLMProvider, ProviderCapabilities, ProviderRequest, ProviderResponse
from .config import ProviderConfig, ProviderSettings, load_candidate_configs, load_provider_config
from .exceptions import GenerationUnavailable
from .factory import ProviderFactory
from .gateway import GenerationGateway, RetryPolicy, strip_reasoning
from .mock import MockProvider

__all__ = [
    "LLMProvider",
    "ProviderCapabilities",
    "ProviderRequest",
    "ProviderResponse",
    "ProviderConfig",
    "ProviderSettings",
    "load_provider_config",
    "load_candidate_configs",
    "ProviderFactory",
    "GenerationGateway",
    "GenerationUnavailable",
    "RetryPolicy",
    "strip_reasoning",
    "MockProvider",
]
