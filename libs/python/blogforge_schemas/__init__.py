"""Domain schemas for article generation and credit metering."""

from .enums import ContentStatus, GenerationStep, TransactionStatus, TransactionType
from .models import ContentJob, ContentJobUpdate, ContentOutline, CreditAccount, CreditTransaction

__all__ = [
    "ContentStatus",
    "GenerationStep",
    "TransactionStatus",
    "TransactionType",
    "ContentJob",
    "ContentJobUpdate",
    "ContentOutline",
    "CreditAccount",
    "CreditTransaction",
]
