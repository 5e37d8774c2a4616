"""Monotonic progress view of one article run.

Every transition performs exactly one job-store write. While the job is
generating, a write may never lower ``sections_completed`` or change the
content already written; such writes raise ``ProgressRegressionError``.
"""

from __future__ import annotations

from blogforge_schemas import ContentJob, ContentJobUpdate, ContentStatus, GenerationStep

from ..exceptions import ProgressRegressionError
from ..stages import DONE_LABEL, INTRODUCTION_LABEL, STEP_LABELS, TITLE_LABEL
from ..storage import JobStore
from .cleanup import format_failure_block


class ProgressProjection:
    def __init__(self, store: JobStore, job: ContentJob) -> None:
        self._store = store
        self._job = job
        self._started = False

    @property
    def job(self) -> ContentJob:
        return self._job

    @property
    def status(self) -> ContentStatus:
        return self._job.status

    @property
    def content(self) -> str:
        return self._job.generated_content

    @property
    def sections_completed(self) -> int:
        return self._job.sections_completed

    async def begin(self, total_sections: int) -> ContentJob:
        """Start a fresh run: content and counters are reset."""

        self._started = True
        return await self._write(
            ContentJobUpdate(
                status=ContentStatus.GENERATING,
                total_sections=total_sections,
                sections_completed=0,
                current_section_label=TITLE_LABEL,
                generated_content="",
                error_message=None,
            )
        )

    async def record_title(self, title: str, meta_description: str) -> ContentJob:
        content = f"# {title}\n\n"
        self._guard(1, content)
        return await self._write(
            ContentJobUpdate(
                generated_title=title,
                meta_description=meta_description,
                generated_content=content,
                sections_completed=1,
                current_section_label=INTRODUCTION_LABEL,
            )
        )

    async def append_section(self, markdown: str, next_label: str) -> ContentJob:
        content = self.content + markdown
        completed = self.sections_completed + 1
        self._guard(completed, content)
        return await self._write(
            ContentJobUpdate(
                generated_content=content,
                sections_completed=completed,
                current_section_label=next_label,
            )
        )

    async def complete(self, markdown: str) -> ContentJob:
        """Append the closing block; completion is carried by the status, not the counter."""

        content = self.content + markdown
        self._guard(self.sections_completed, content)
        return await self._write(
            ContentJobUpdate(
                generated_content=content,
                current_section_label=DONE_LABEL,
                status=ContentStatus.COMPLETED,
            )
        )

    async def fail(self, message: str) -> ContentJob:
        """Mark the run failed and append the error block.

        Partial content of this run is kept. When the run failed before
        :meth:`begin`, the stored content and counters belong to an earlier
        run and are replaced by the error block alone.
        """

        changes = {
            "status": ContentStatus.FAILED,
            "current_section_label": STEP_LABELS[GenerationStep.FAILED],
            "error_message": message,
        }
        if not self._started:
            changes.update(generated_content=format_failure_block(message), sections_completed=0, total_sections=0)
        else:
            content = self.content
            if content and not content.endswith("\n\n"):
                content += "\n\n"
            changes["generated_content"] = content + format_failure_block(message)
        return await self._write(ContentJobUpdate(**changes))

    async def reject(self, message: str) -> ContentJob:
        """Fail a run that never started: content and counters stay untouched."""

        return await self._write(ContentJobUpdate(status=ContentStatus.FAILED, error_message=message))

    def _guard(self, sections_completed: int, content: str) -> None:
        if self.status is not ContentStatus.GENERATING:
            raise ProgressRegressionError(f"Job {self._job.id} is not generating (status {self.status.value})")
        if sections_completed < self.sections_completed:
            raise ProgressRegressionError(
                f"sections_completed would drop from {self.sections_completed} to {sections_completed}"
            )
        if not content.startswith(self.content):
            raise ProgressRegressionError("Generated content would lose already written text")

    async def _write(self, update: ContentJobUpdate) -> ContentJob:
        self._job = await self._store.write_job(self._job.id, update)
        return self._job
