"""Job store contract: read the full job, write partial updates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from blogforge_schemas import ContentJob, ContentJobUpdate


class JobStore(ABC):
    @abstractmethod
    async def create_job(self, job: ContentJob) -> ContentJob:
        """Persist a new job and return the stored copy."""

    @abstractmethod
    async def read_job(self, job_id: UUID) -> ContentJob:
        """Return the job or raise :class:`JobNotFoundError`."""

    @abstractmethod
    async def write_job(self, job_id: UUID, update: ContentJobUpdate) -> ContentJob:
        """Apply only the explicitly set fields of ``update`` and return the new state."""
