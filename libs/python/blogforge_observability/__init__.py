"""Logging and Prometheus helpers shared by BlogForge services."""

from .logging import log_context, setup_logging
from .metrics import (
    observe_job_outcome,
    observe_ledger_operation,
    observe_provider_attempt,
    observe_provider_response,
    observe_stage_duration,
    set_running_jobs,
    setup_fastapi_metrics,
)

__all__ = [
    "setup_logging",
    "log_context",
    "setup_fastapi_metrics",
    "observe_stage_duration",
    "observe_job_outcome",
    "set_running_jobs",
    "observe_provider_attempt",
    "observe_provider_response",
    "observe_ledger_operation",
]
