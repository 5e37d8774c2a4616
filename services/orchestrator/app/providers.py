"""Build the generation gateway from service settings."""

from __future__ import annotations

import logging

from blogforge_providers import GenerationGateway, ProviderFactory, load_candidate_configs

from .settings import ServiceSettings

logger = logging.getLogger(__name__)


def build_gateway(settings: ServiceSettings, *, service_name: str = "orchestrator") -> GenerationGateway:
    configs = load_candidate_configs(settings.llm_candidates)
    candidates = ProviderFactory.create_candidates(configs)
    logger.info(
        "Configured generation candidates",
        extra={"candidates": [candidate.label for candidate in candidates]},
    )
    return GenerationGateway(candidates, retry_policy=settings.retry_policy(), service_name=service_name)
