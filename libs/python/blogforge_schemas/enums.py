"""Enum definitions shared across the generation workflow."""

from __future__ import annotations

from enum import Enum


class ContentStatus(str, Enum):
    DRAFT = "draft"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"
    PUBLISHED = "published"

    @property
    def is_terminal(self) -> bool:
        return self in {ContentStatus.COMPLETED, ContentStatus.FAILED, ContentStatus.PUBLISHED}


class GenerationStep(str, Enum):
    LOCKING = "LOCKING"
    TITLE_AND_META = "TITLE_AND_META"
    INTRODUCTION = "INTRODUCTION"
    BODY_SECTION = "BODY_SECTION"
    CLOSING = "CLOSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class TransactionType(str, Enum):
    USAGE = "usage"
    REFUND = "refund"
    MANUAL_ADJUSTMENT = "manual_adjustment"
    RESET = "reset"


class TransactionStatus(str, Enum):
    LOCKED = "locked"
    COMPLETED = "completed"
    REFUNDED = "refunded"
