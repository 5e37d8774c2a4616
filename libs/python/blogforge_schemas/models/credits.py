"""Credit account and transaction audit models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator

from ..enums import TransactionStatus, TransactionType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreditAccount(BaseModel):
    """Prepaid credit balance for one user."""

    user_id: UUID
    total_credits: int = Field(0, ge=0)
    used_credits: int = Field(0, ge=0)
    locked_credits: int = Field(0, ge=0)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def check_balance(self) -> "CreditAccount":
        if self.used_credits + self.locked_credits > self.total_credits:
            raise ValueError("used_credits + locked_credits must not exceed total_credits")
        return self

    @property
    def available_credits(self) -> int:
        return self.total_credits - self.used_credits - self.locked_credits


class CreditTransaction(BaseModel):
    """Append-only audit row written by ledger operations."""

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    content_id: Optional[UUID] = None
    type: TransactionType
    amount: int
    status: TransactionStatus
    note: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
