"""Environment-driven settings for the orchestrator service."""

from __future__ import annotations

import os
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from blogforge_providers import RetryPolicy


class ServiceSettings(BaseModel):
    """Runtime configuration resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    storage_backend: Literal["memory", "postgres"] = "memory"
    database_url: Optional[str] = None
    llm_candidates: str = Field("mock", description="Comma separated provider[:model] list")
    max_attempts: int = Field(3, ge=1, le=10)
    backoff_seconds: float = Field(5.0, ge=0)
    pacing_seconds: float = Field(3.0, ge=0)
    job_deadline_seconds: Optional[float] = Field(None, gt=0)
    min_word_count: int = Field(500, ge=1)
    default_word_count: int = Field(1000, ge=1)
    log_level: str = "INFO"

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            backoff_seconds=self.backoff_seconds,
            pacing_seconds=self.pacing_seconds,
        )


def load_settings() -> ServiceSettings:
    """Read :class:`ServiceSettings` from the process environment."""

    deadline_raw = os.getenv("JOB_DEADLINE_SECONDS", "").strip()
    database_url = os.getenv("DATABASE_URL")
    return ServiceSettings(
        storage_backend=os.getenv("STORAGE_BACKEND", "postgres" if database_url else "memory"),
        # psycopg connection URLs do not use SQLAlchemy's driver suffix.
        database_url=database_url.replace("+psycopg", "") if database_url else None,
        llm_candidates=os.getenv("LLM_CANDIDATES", os.getenv("LLM_PROVIDER", "mock")),
        max_attempts=int(os.getenv("LLM_MAX_ATTEMPTS", "3")),
        backoff_seconds=float(os.getenv("LLM_BACKOFF_SECONDS", "5")),
        pacing_seconds=float(os.getenv("LLM_PACING_SECONDS", "3")),
        job_deadline_seconds=float(deadline_raw) if deadline_raw else None,
        min_word_count=int(os.getenv("MIN_WORD_COUNT", "500")),
        default_word_count=int(os.getenv("DEFAULT_WORD_COUNT", "1000")),
        log_level=os.getenv("BLOGFORGE_LOG_LEVEL", "INFO").upper(),
    )
