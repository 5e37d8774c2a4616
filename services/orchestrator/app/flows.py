"""Prefect flow wrapping one article generation run."""

from __future__ import annotations

import logging
from uuid import UUID

from prefect import flow

from blogforge_observability import log_context

from .article import ContentOrchestrator
from .exceptions import OrchestratorError

logger = logging.getLogger(__name__)

_orchestrator: ContentOrchestrator | None = None


def bind_orchestrator(orchestrator: ContentOrchestrator | None) -> None:
    """Register the orchestrator the flow runs against (set once by the app)."""

    global _orchestrator
    _orchestrator = orchestrator


@flow(name="content-generation", version="0.1.0")
async def run_content_flow(job_id: UUID) -> str:
    if _orchestrator is None:
        raise OrchestratorError("No orchestrator bound to the content generation flow")

    with log_context(job_id=str(job_id)):
        logger.info("Starting content generation flow")
        status = await _orchestrator.run(job_id)
        logger.info("Content generation flow finished", extra={"status": status.value})
    return status.value
