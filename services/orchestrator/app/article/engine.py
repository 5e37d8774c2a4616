"""State machine that turns one content job into a finished article."""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Iterator
from uuid import UUID

from blogforge_observability import log_context, observe_job_outcome, observe_stage_duration
from blogforge_providers import GenerationGateway
from blogforge_schemas import ContentJob, ContentJobUpdate, ContentOutline, ContentStatus, GenerationStep

from ..exceptions import InsufficientCreditsError, JobCancelledError, JobDeadlineExceeded, LedgerError
from ..ledger import CreditLedger, estimate_credits
from ..settings import ServiceSettings
from ..stages import CONCLUSION_LABEL, first_body_label, label_after_body_section, total_step_count
from ..storage import JobStore
from .budget import CLOSING_TOKEN_PADDING, WordBudget, plan_word_budget, resolve_word_target, token_ceiling
from .cleanup import parse_title_meta, strip_conclusion_heading, strip_leading_title
from .outline import OutlineResolver
from .progress import ProgressProjection
from .prompts import (
    TITLE_META_PROMPT,
    TITLE_META_SYSTEM_PROMPT,
    PromptPolicy,
    closing_prompt,
    introduction_prompt,
    section_prompt,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "orchestrator"
TITLE_MAX_TOKENS = 300


class ContentOrchestrator:
    """Run LOCKING, TITLE_AND_META, INTRODUCTION, BODY_SECTION[i] and CLOSING in order.

    A rejected credit lock fails the job without touching its content. Any
    later error fails the job, appends an error block to the partial
    article and releases the reservation.
    """

    def __init__(
        self,
        gateway: GenerationGateway,
        job_store: JobStore,
        ledger: CreditLedger,
        settings: ServiceSettings | None = None,
        *,
        service_name: str = SERVICE_NAME,
    ) -> None:
        self._gateway = gateway
        self._job_store = job_store
        self._ledger = ledger
        self._settings = settings or ServiceSettings()
        self._service_name = service_name
        self._outline_resolver = OutlineResolver(gateway)

    async def run(self, job_id: UUID) -> ContentStatus:
        job = await self._job_store.read_job(job_id)
        projection = ProgressProjection(self._job_store, job)

        with log_context(job_id=str(job.id), user_id=str(job.owner_id)):
            logger.info("Starting article generation", extra={"target_word_count": job.target_word_count})
            try:
                credits = await self._execute(job, projection)
            except asyncio.CancelledError:
                logger.warning("Article generation cancelled; recording failure")
                await asyncio.shield(self._fail(job, projection, JobCancelledError("Generation was cancelled")))
                raise
            except InsufficientCreditsError as exc:
                logger.warning("Credit lock rejected; job failed before generation")
                await projection.reject(str(exc))
                observe_job_outcome("rejected", service_name=self._service_name)
                return projection.status
            except Exception as exc:
                logger.exception("Article generation failed")
                await self._fail(job, projection, exc)
                return projection.status

            observe_job_outcome(ContentStatus.COMPLETED.value, service_name=self._service_name)
            logger.info("Article generation completed", extra={"credits": credits})
            await self._finalize(job, credits)
            return projection.status

    async def _execute(self, job: ContentJob, projection: ProgressProjection) -> int:
        deadline = self._settings.job_deadline_seconds
        if deadline is None:
            return await self._generate(job, projection)
        try:
            return await asyncio.wait_for(self._generate(job, projection), timeout=deadline)
        except asyncio.TimeoutError as exc:
            raise JobDeadlineExceeded(f"Generation exceeded the {deadline:g} second deadline") from exc

    async def _generate(self, job: ContentJob, projection: ProgressProjection) -> int:
        word_target = resolve_word_target(
            job.target_word_count,
            minimum=self._settings.min_word_count,
            default=self._settings.default_word_count,
        )

        with self._stage(GenerationStep.LOCKING):
            resolution = await self._outline_resolver.resolve(
                job.outline.h2_list, word_target, job.main_keyword
            )
            headings = resolution.headings
            if resolution.regenerated:
                await self._job_store.write_job(
                    job.id,
                    ContentJobUpdate(outline=ContentOutline(h2_list=headings, h3_list=job.outline.h3_list)),
                )
            credits = estimate_credits(word_target, has_subheadings=False, has_faq=True)
            await self._ledger.lock(job.owner_id, job.id, credits)
            await projection.begin(total_step_count(len(headings)))

        policy = PromptPolicy.for_job(job)
        budget = plan_word_budget(word_target, len(headings))
        logger.info(
            "Planned article",
            extra={"heading_count": len(headings), "credits": credits, "word_target": word_target},
        )

        with self._stage(GenerationStep.TITLE_AND_META):
            raw = await self._gateway.complete(
                TITLE_META_SYSTEM_PROMPT,
                TITLE_META_PROMPT.format(keyword=job.main_keyword),
                TITLE_MAX_TOKENS,
                json_mode=True,
                stage="title",
            )
            title_meta = parse_title_meta(raw, job.main_keyword)
            await projection.record_title(title_meta.title, title_meta.meta_description)

        title = title_meta.title
        with self._stage(GenerationStep.INTRODUCTION):
            text = await self._gateway.complete(
                policy.system_prompt,
                introduction_prompt(
                    policy, title=title, keyword=job.main_keyword, tone=job.tone, words=budget.intro_words
                ),
                token_ceiling(budget.intro_words),
                stage="introduction",
            )
            intro = strip_leading_title(text, title)
            await projection.append_section(f"{intro}\n\n", first_body_label(headings))

        for index, heading in enumerate(headings):
            with self._stage(GenerationStep.BODY_SECTION, section_index=index):
                text = await self._gateway.complete(
                    policy.system_prompt,
                    section_prompt(
                        policy,
                        heading=heading,
                        keyword=job.main_keyword,
                        tone=job.tone,
                        words=budget.body_section_words,
                    ),
                    token_ceiling(budget.body_section_words),
                    stage="body_section",
                )
                await projection.append_section(
                    f"## {heading}\n\n{text.strip()}\n\n",
                    label_after_body_section(headings, index),
                )

        await self._close(job, projection, policy, budget, title)
        return credits

    async def _close(
        self,
        job: ContentJob,
        projection: ProgressProjection,
        policy: PromptPolicy,
        budget: WordBudget,
        title: str,
    ) -> None:
        with self._stage(GenerationStep.CLOSING):
            text = await self._gateway.complete(
                policy.system_prompt,
                closing_prompt(title=title, keyword=job.main_keyword, tone=job.tone, words=budget.closing_words),
                token_ceiling(budget.closing_words, padding=CLOSING_TOKEN_PADDING),
                stage="closing",
            )
            await projection.complete(f"## {CONCLUSION_LABEL}\n\n{strip_conclusion_heading(text)}\n\n")

    async def _finalize(self, job: ContentJob, credits: int) -> None:
        try:
            await self._ledger.finalize(job.owner_id, job.id, credits)
        except LedgerError:
            # The article is already delivered; the open reservation is left for reconciliation.
            logger.exception("Credit finalize failed after completion", extra={"credits": credits})
            raise

    async def _fail(self, job: ContentJob, projection: ProgressProjection, exc: Exception) -> None:
        message = str(exc) or exc.__class__.__name__
        observe_job_outcome(ContentStatus.FAILED.value, service_name=self._service_name)
        try:
            await projection.fail(message)
        except Exception:
            logger.exception("Could not record job failure")
        try:
            await self._ledger.refund(job.owner_id, job.id)
        except Exception:
            logger.exception("Credit refund failed after job failure")

    @contextmanager
    def _stage(self, step: GenerationStep, **context) -> Iterator[None]:
        start = perf_counter()
        with log_context(step=step.value, **context):
            try:
                yield
            except BaseException:
                observe_stage_duration(
                    step.value, perf_counter() - start, service_name=self._service_name, status="error"
                )
                raise
            observe_stage_duration(step.value, perf_counter() - start, service_name=self._service_name)
