"""Dictionary-backed job store for tests and local development."""

from __future__ import annotations

from typing import Iterable
from uuid import UUID

from blogforge_schemas import ContentJob, ContentJobUpdate

from ..exceptions import JobNotFoundError
from .base import JobStore


class InMemoryJobStore(JobStore):
    def __init__(self, jobs: Iterable[ContentJob] = ()) -> None:
        self._jobs: dict[UUID, ContentJob] = {job.id: job for job in jobs}
        self.writes: list[tuple[UUID, dict]] = []

    async def create_job(self, job: ContentJob) -> ContentJob:
        self._jobs[job.id] = job
        return job

    async def read_job(self, job_id: UUID) -> ContentJob:
        try:
            return self._jobs[job_id]
        except KeyError:
            raise JobNotFoundError(job_id) from None

    async def write_job(self, job_id: UUID, update: ContentJobUpdate) -> ContentJob:
        job = await self.read_job(job_id)
        # Recorded so callers can assert one write per transition.
        self.writes.append((job_id, update.changes()))
        updated = update.apply_to(job)
        self._jobs[job_id] = updated
        return updated
