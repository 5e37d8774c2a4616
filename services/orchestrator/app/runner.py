"""Detached background execution of generation runs."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable
from uuid import UUID

from blogforge_observability import log_context, set_running_jobs

from .exceptions import JobAlreadyRunningError

logger = logging.getLogger(__name__)

Launcher = Callable[[UUID], Awaitable[Any]]


class JobRunner:
    """Start one asyncio task per job and keep it referenced until it finishes."""

    def __init__(self, launcher: Launcher, *, service_name: str = "orchestrator") -> None:
        self._launcher = launcher
        self._service_name = service_name
        self._tasks: dict[UUID, asyncio.Task] = {}

    def is_running(self, job_id: UUID) -> bool:
        task = self._tasks.get(job_id)
        return task is not None and not task.done()

    @property
    def running(self) -> list[UUID]:
        return [job_id for job_id in self._tasks if self.is_running(job_id)]

    def start(self, job_id: UUID) -> asyncio.Task:
        """Schedule a run and return immediately; refuses a job that is still running."""

        if self.is_running(job_id):
            raise JobAlreadyRunningError(job_id)
        task = asyncio.create_task(self._run(job_id), name=f"content-job-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda done: self._forget(job_id, done))
        set_running_jobs(len(self._tasks), service_name=self._service_name)
        return task

    async def shutdown(self, timeout: float | None = None) -> None:
        """Wait for running jobs; anything still pending after ``timeout`` is cancelled."""

        tasks = [task for task in self._tasks.values() if not task.done()]
        if not tasks:
            return
        logger.info("Draining generation tasks", extra={"task_count": len(tasks)})
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning("Cancelled unfinished generation tasks", extra={"task_count": len(pending)})
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run(self, job_id: UUID) -> None:
        with log_context(job_id=str(job_id)):
            try:
                await self._launcher(job_id)
            except Exception:
                logger.exception("Background generation task failed")

    def _forget(self, job_id: UUID, task: asyncio.Task) -> None:
        if self._tasks.get(job_id) is task:
            del self._tasks[job_id]
        set_running_jobs(len(self._tasks), service_name=self._service_name)
