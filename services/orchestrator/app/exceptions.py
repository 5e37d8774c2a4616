"""Error taxonomy for the orchestrator service."""

from __future__ import annotations

from uuid import UUID


class OrchestratorError(RuntimeError):
    """Base error raised by orchestrator components."""


class JobNotFoundError(OrchestratorError):
    """Raised when a content job does not exist (or is not visible to the caller)."""

    def __init__(self, job_id: UUID) -> None:
        super().__init__(f"Content job {job_id} not found")
        self.job_id = job_id


class StoreWriteError(OrchestratorError):
    """Raised when the job store cannot be read or written."""


class ProgressRegressionError(OrchestratorError):
    """Raised when a progress write would roll back a generating job."""


class JobDeadlineExceeded(OrchestratorError):
    """Raised when a run exceeds the configured wall-clock deadline."""


class JobCancelledError(OrchestratorError):
    """Failure cause recorded when a run is cancelled before it finishes."""


class LedgerError(OrchestratorError):
    """Base error for credit ledger operations."""


class InsufficientCreditsError(LedgerError):
    """Raised when an operation would push used + locked credits above the total."""

    def __init__(self, user_id: UUID, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient credits: requested {requested}, available {available}"
        )
        self.user_id = user_id
        self.requested = requested
        self.available = available


class DuplicateReservationError(LedgerError):
    """Raised when a job already holds an open credit reservation."""


class ReservationNotFoundError(LedgerError):
    """Raised when finalising a job that holds no open reservation."""


class LedgerStoreError(LedgerError):
    """Raised when the ledger's backing store fails."""


class JobStateConflictError(OrchestratorError):
    """Raised when a job's status does not allow the requested action."""


class JobAlreadyRunningError(JobStateConflictError):
    """Raised when a generation run is started for a job that is still running."""

    def __init__(self, job_id: UUID) -> None:
        super().__init__(f"Content job {job_id} is already being generated")
        self.job_id = job_id
