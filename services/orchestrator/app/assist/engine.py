"""One-shot helpers that sit beside the article run: title ideas and edits."""

from __future__ import annotations

import logging
import re

from blogforge_observability import log_context
from blogforge_providers import GenerationGateway
from blogforge_schemas import ContentJob, ContentJobUpdate, ContentStatus

from ..exceptions import JobStateConflictError
from ..storage import JobStore
from .prompts import REFINE_PROMPT, REFINE_SYSTEM_PROMPT, TITLE_SUGGESTION_PROMPT

logger = logging.getLogger(__name__)

TITLE_MAX_TOKENS = 100
TITLE_TEMPERATURE = 0.7
REFINE_MAX_TOKENS = 4000
REFINE_TEMPERATURE = 0.3

_WRAPPING_QUOTES = re.compile(r"^[\"']|[\"']$")


async def suggest_title(gateway: GenerationGateway, keyword: str) -> str:
    """Ask for one SEO title containing ``keyword``; surrounding quotes are dropped."""

    text = await gateway.complete(
        None,
        TITLE_SUGGESTION_PROMPT.format(keyword=keyword.strip()),
        TITLE_MAX_TOKENS,
        stage="title_suggestion",
        temperature=TITLE_TEMPERATURE,
    )
    return _WRAPPING_QUOTES.sub("", text).strip()


async def refine_content(
    gateway: GenerationGateway,
    job_store: JobStore,
    job: ContentJob,
    instruction: str,
) -> ContentJob:
    """Rewrite the stored article with an editing instruction and save the result."""

    if job.status is ContentStatus.GENERATING:
        raise JobStateConflictError(f"Content job {job.id} is still generating")

    with log_context(job_id=str(job.id), user_id=str(job.owner_id), step="refine"):
        refined = await gateway.complete(
            REFINE_SYSTEM_PROMPT,
            REFINE_PROMPT.format(content=job.generated_content, instruction=instruction.strip()),
            REFINE_MAX_TOKENS,
            stage="refine",
            temperature=REFINE_TEMPERATURE,
        )
        logger.info(
            "Refined article",
            extra={"before_chars": len(job.generated_content), "after_chars": len(refined)},
        )
        return await job_store.write_job(job.id, ContentJobUpdate(generated_content=refined))
