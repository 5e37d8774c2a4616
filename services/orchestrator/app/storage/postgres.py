"""PostgreSQL job store over the ``content_items`` table."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import psycopg
from fastapi.concurrency import run_in_threadpool
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from blogforge_schemas import ContentJob, ContentJobUpdate, ContentOutline

from ..exceptions import JobNotFoundError, StoreWriteError
from .base import JobStore

_COLUMNS = (
    "id",
    "owner_id",
    "main_keyword",
    "secondary_keywords",
    "target_word_count",
    "tone",
    "target_country",
    "h2_list",
    "h3_list",
    "custom_details",
    "internal_links",
    "generated_title",
    "meta_description",
    "generated_content",
    "featured_image_url",
    "status",
    "total_sections",
    "sections_completed",
    "current_section_label",
    "error_message",
    "created_at",
    "updated_at",
)
_SELECT = sql.SQL(", ").join(sql.Identifier(column) for column in _COLUMNS)


class PostgresJobStore(JobStore):
    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    async def create_job(self, job: ContentJob) -> ContentJob:
        return await self._run(self._insert, job)

    async def read_job(self, job_id: UUID) -> ContentJob:
        return await self._run(self._select, job_id)

    async def write_job(self, job_id: UUID, update: ContentJobUpdate) -> ContentJob:
        return await self._run(self._update, job_id, update)

    async def _run(self, func, *args):
        try:
            return await run_in_threadpool(func, *args)
        except psycopg.Error as exc:
            raise StoreWriteError(f"Content store failed: {exc}") from exc

    def _insert(self, job: ContentJob) -> ContentJob:
        values = _job_to_row(job)
        query = sql.SQL("INSERT INTO content_items ({columns}) VALUES ({values}) RETURNING {select}").format(
            columns=sql.SQL(", ").join(sql.Identifier(column) for column in values),
            values=sql.SQL(", ").join(sql.Placeholder() for _ in values),
            select=_SELECT,
        )
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, list(values.values()))
            row = cur.fetchone()
            conn.commit()
        return _row_to_job(row)

    def _select(self, job_id: UUID) -> ContentJob:
        query = sql.SQL("SELECT {select} FROM content_items WHERE id = %s").format(select=_SELECT)
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, (job_id,))
            row = cur.fetchone()
        if not row:
            raise JobNotFoundError(job_id)
        return _row_to_job(row)

    def _update(self, job_id: UUID, update: ContentJobUpdate) -> ContentJob:
        changes = _update_to_columns(update)
        if not changes:
            return self._select(job_id)
        assignments = [
            sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder()) for column in changes
        ]
        assignments.append(sql.SQL("updated_at = NOW()"))
        query = sql.SQL("UPDATE content_items SET {assignments} WHERE id = %s RETURNING {select}").format(
            assignments=sql.SQL(", ").join(assignments),
            select=_SELECT,
        )
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, [*changes.values(), job_id])
            row = cur.fetchone()
            conn.commit()
        if not row:
            raise JobNotFoundError(job_id)
        return _row_to_job(row)


def _job_to_row(job: ContentJob) -> dict[str, Any]:
    row = job.model_dump(exclude={"outline"})
    row["status"] = job.status.value
    row["h2_list"] = list(job.outline.h2_list)
    row["h3_list"] = list(job.outline.h3_list)
    return row


def _update_to_columns(update: ContentJobUpdate) -> dict[str, Any]:
    columns: dict[str, Any] = {}
    for name, value in update.changes().items():
        if name == "outline":
            outline = value or ContentOutline()
            columns["h2_list"] = list(outline.h2_list)
            columns["h3_list"] = list(outline.h3_list)
        elif name == "status" and value is not None:
            columns["status"] = value.value
        else:
            columns[name] = value
    return columns


def _row_to_job(row: dict[str, Any]) -> ContentJob:
    payload = dict(row)
    payload["outline"] = ContentOutline(
        h2_list=payload.pop("h2_list") or [],
        h3_list=payload.pop("h3_list") or [],
    )
    return ContentJob(**payload)
