"""FastAPI entrypoint for the article generation orchestrator."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import List, Optional
from uuid import UUID

from fastapi import Depends, FastAPI, Header, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from psycopg_pool import ConnectionPool

from blogforge_observability import log_context, setup_fastapi_metrics, setup_logging
from blogforge_providers import GenerationGateway, GenerationUnavailable
from blogforge_schemas import ContentJob, ContentStatus, CreditAccount, CreditTransaction

from .article import ContentOrchestrator
from .assist import refine_content, suggest_title
from .exceptions import JobNotFoundError, JobStateConflictError
from .flows import bind_orchestrator, run_content_flow
from .ledger import CreditLedger, InMemoryCreditLedger, PostgresCreditLedger
from .models import (
    CreateContentRequest,
    CreditBalance,
    GenerationAccepted,
    ProgressView,
    RefineRequest,
    TitleSuggestionRequest,
    TitleSuggestionResponse,
)
from .providers import build_gateway
from .runner import JobRunner, Launcher
from .settings import ServiceSettings, load_settings
from .storage import InMemoryJobStore, JobStore, PostgresJobStore, initialise_schema

SERVICE_NAME = "orchestrator"
SHUTDOWN_TIMEOUT_SECONDS = 30.0
logger = logging.getLogger(__name__)


def get_user_id(x_user_id: UUID = Header(..., alias="X-User-Id")) -> UUID:
    return x_user_id


def create_app(
    settings: ServiceSettings | None = None,
    *,
    job_store: JobStore | None = None,
    ledger: CreditLedger | None = None,
    gateway: GenerationGateway | None = None,
    launcher: Launcher | None = None,
) -> FastAPI:
    """Wire stores, gateway, orchestrator and runner into a FastAPI app."""

    settings = settings or load_settings()
    setup_logging(SERVICE_NAME, settings.log_level)
    pool: Optional[ConnectionPool] = None
    if settings.storage_backend == "postgres" and (job_store is None or ledger is None):
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for the postgres storage backend")
        pool = ConnectionPool(settings.database_url, min_size=1, max_size=10, open=False)
        job_store = job_store or PostgresJobStore(pool)
        ledger = ledger or PostgresCreditLedger(pool)
    job_store = job_store or InMemoryJobStore()
    ledger = ledger or InMemoryCreditLedger()
    gateway = gateway or build_gateway(settings, service_name=SERVICE_NAME)

    orchestrator = ContentOrchestrator(gateway, job_store, ledger, settings, service_name=SERVICE_NAME)
    if launcher is None:
        bind_orchestrator(orchestrator)
        launcher = run_content_flow
    runner = JobRunner(launcher, service_name=SERVICE_NAME)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        if pool is not None:
            await run_in_threadpool(pool.open)
            await run_in_threadpool(initialise_schema, pool)
        try:
            yield
        finally:
            await runner.shutdown(timeout=SHUTDOWN_TIMEOUT_SECONDS)
            if pool is not None:
                await run_in_threadpool(pool.close)

    app = FastAPI(title="BlogForge Orchestrator", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.job_store = job_store
    app.state.ledger = ledger
    app.state.gateway = gateway
    app.state.orchestrator = orchestrator
    app.state.runner = runner
    setup_fastapi_metrics(app, service_name=SERVICE_NAME)

    async def owned_job(job_id: UUID, user_id: UUID) -> ContentJob:
        try:
            job = await job_store.read_job(job_id)
        except JobNotFoundError:
            job = None
        # Foreign jobs are reported as missing.
        if job is None or job.owner_id != user_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content job not found")
        return job

    def schedule(job: ContentJob) -> GenerationAccepted:
        try:
            runner.start(job.id)
        except JobStateConflictError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        with log_context(job_id=str(job.id), user_id=str(job.owner_id)):
            logger.info("Scheduled article generation")
        return GenerationAccepted(job_id=job.id)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post(
        "/content",
        response_model=ContentJob,
        status_code=status.HTTP_201_CREATED,
        tags=["content"],
    )
    async def create_content(
        payload: CreateContentRequest, user_id: UUID = Depends(get_user_id)
    ) -> ContentJob:
        return await job_store.create_job(payload.to_job(user_id))

    @app.post(
        "/content/{job_id}/generate",
        response_model=GenerationAccepted,
        status_code=status.HTTP_202_ACCEPTED,
        tags=["content"],
    )
    async def generate(job_id: UUID, user_id: UUID = Depends(get_user_id)) -> GenerationAccepted:
        job = await owned_job(job_id, user_id)
        # Regenerating a completed job is a new run with a new charge.
        if job.status is ContentStatus.PUBLISHED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Published jobs cannot be regenerated",
            )
        return schedule(job)

    @app.post(
        "/content/{job_id}/retry",
        response_model=GenerationAccepted,
        status_code=status.HTTP_202_ACCEPTED,
        tags=["content"],
    )
    async def retry(job_id: UUID, user_id: UUID = Depends(get_user_id)) -> GenerationAccepted:
        job = await owned_job(job_id, user_id)
        if job.status is not ContentStatus.FAILED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Only failed jobs can be retried (status {job.status.value})",
            )
        return schedule(job)

    @app.get("/content/{job_id}", response_model=ContentJob, tags=["content"])
    async def read_content(job_id: UUID, user_id: UUID = Depends(get_user_id)) -> ContentJob:
        return await owned_job(job_id, user_id)

    @app.get("/content/{job_id}/progress", response_model=ProgressView, tags=["content"])
    async def read_progress(job_id: UUID, user_id: UUID = Depends(get_user_id)) -> ProgressView:
        return ProgressView.from_job(await owned_job(job_id, user_id))

    @app.post("/content/{job_id}/refine", response_model=ContentJob, tags=["assist"])
    async def refine(
        job_id: UUID, payload: RefineRequest, user_id: UUID = Depends(get_user_id)
    ) -> ContentJob:
        job = await owned_job(job_id, user_id)
        if runner.is_running(job_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Content job is still generating")
        try:
            return await refine_content(gateway, job_store, job, payload.instruction)
        except JobStateConflictError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        except GenerationUnavailable as exc:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    @app.post("/titles/suggest", response_model=TitleSuggestionResponse, tags=["assist"])
    async def titles_suggest(payload: TitleSuggestionRequest) -> TitleSuggestionResponse:
        try:
            title = await suggest_title(gateway, payload.keyword)
        except GenerationUnavailable as exc:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
        return TitleSuggestionResponse(title=title)

    @app.get("/credits", response_model=CreditBalance, tags=["credits"])
    async def credits(user_id: UUID = Depends(get_user_id)) -> CreditBalance:
        account = await ledger.get_account(user_id) or CreditAccount(user_id=user_id)
        return CreditBalance.from_account(account)

    @app.get("/credits/transactions", response_model=List[CreditTransaction], tags=["credits"])
    async def credit_transactions(
        content_id: Optional[UUID] = None, user_id: UUID = Depends(get_user_id)
    ) -> List[CreditTransaction]:
        return await ledger.list_transactions(user_id, content_id)

    return app


app = create_app()
