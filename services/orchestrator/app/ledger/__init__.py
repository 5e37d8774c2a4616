"""Credit ledger backends and pricing."""

from .base import CreditLedger
from .memory import InMemoryCreditLedger
from .postgres import PostgresCreditLedger
from .pricing import estimate_credits

__all__ = ["CreditLedger", "InMemoryCreditLedger", "PostgresCreditLedger", "estimate_credits"]
