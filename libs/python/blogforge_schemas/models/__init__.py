"""Pydantic models shared by BlogForge services."""

from .content import ContentJob, ContentJobUpdate, ContentOutline
from .credits import CreditAccount, CreditTransaction

__all__ = [
    "ContentJob",
    "ContentJobUpdate",
    "ContentOutline",
    "CreditAccount",
    "CreditTransaction",
]
