"""Tests for the PostgreSQL job store's row mapping and error handling."""

from uuid import uuid4

import psycopg
import pytest
from psycopg import sql

from blogforge_schemas import ContentJob, ContentJobUpdate, ContentOutline, ContentStatus

from services.orchestrator.app.exceptions import JobNotFoundError, StoreWriteError
from services.orchestrator.app.storage import PostgresJobStore
from services.orchestrator.app.storage.postgres import _job_to_row

from tests.utils.postgres import ScriptedPool


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def job():
    return ContentJob(
        owner_id=uuid4(),
        main_keyword="email marketing",
        outline=ContentOutline(h2_list=["Why Lists Matter"], h3_list=["Open Rates"]),
        secondary_keywords=["newsletters"],
    )


async def test_create_flattens_outline_and_status(job) -> None:
    pool = ScriptedPool([[_job_to_row(job)]])
    created = await PostgresJobStore(pool).create_job(job)

    [(query, params)] = pool.statements
    assert isinstance(query, sql.Composed)
    assert ContentStatus.DRAFT.value in params
    assert ["Why Lists Matter"] in params
    assert ["Open Rates"] in params
    assert pool.commits == 1
    assert created.outline.h2_list == ["Why Lists Matter"]
    assert created.status is ContentStatus.DRAFT


async def test_read_maps_row_back_to_job(job) -> None:
    row = {**_job_to_row(job), "status": "failed", "h3_list": None, "error_message": "boom"}
    pool = ScriptedPool([[row]])
    stored = await PostgresJobStore(pool).read_job(job.id)

    assert stored.id == job.id
    assert stored.status is ContentStatus.FAILED
    assert stored.outline.h3_list == []
    assert stored.error_message == "boom"
    assert pool.statements[0][1] == (job.id,)


async def test_read_missing_job_raises_not_found() -> None:
    with pytest.raises(JobNotFoundError):
        await PostgresJobStore(ScriptedPool()).read_job(uuid4())


async def test_write_sends_only_changed_columns(job) -> None:
    updated = job.model_copy(update={"status": ContentStatus.GENERATING, "outline": ContentOutline(h2_list=["New"])})
    pool = ScriptedPool([[_job_to_row(updated)]])
    update = ContentJobUpdate(status=ContentStatus.GENERATING, outline=ContentOutline(h2_list=["New"]))

    stored = await PostgresJobStore(pool).write_job(job.id, update)

    [(_, params)] = pool.statements
    assert len(params) == 4
    assert params[-1] == job.id
    assert sorted(map(repr, params[:-1])) == sorted(map(repr, ["generating", ["New"], []]))
    assert pool.commits == 1
    assert stored.outline.h2_list == ["New"]


async def test_empty_write_reads_without_committing(job) -> None:
    pool = ScriptedPool([[_job_to_row(job)]])
    stored = await PostgresJobStore(pool).write_job(job.id, ContentJobUpdate())

    assert stored.id == job.id
    assert len(pool.statements) == 1
    assert pool.commits == 0


async def test_write_to_missing_job_raises_not_found(job) -> None:
    with pytest.raises(JobNotFoundError):
        await PostgresJobStore(ScriptedPool()).write_job(job.id, ContentJobUpdate(error_message="x"))


async def test_database_errors_become_store_write_errors(job) -> None:
    pool = ScriptedPool()
    pool.error = psycopg.OperationalError("server closed the connection")

    with pytest.raises(StoreWriteError) as excinfo:
        await PostgresJobStore(pool).read_job(job.id)

    assert "server closed the connection" in str(excinfo.value)
