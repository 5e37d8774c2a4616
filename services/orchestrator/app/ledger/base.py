"""Credit ledger contract shared by the storage backends.

Every public operation is atomic per user. Backends implement the
underscore methods; balance arithmetic lives in the module-level helpers
so both backends enforce ``used + locked <= total`` identically.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from blogforge_observability import log_context, observe_ledger_operation
from blogforge_schemas import CreditAccount, CreditTransaction

from ..exceptions import InsufficientCreditsError, LedgerError

logger = logging.getLogger(__name__)


def reserve(account: CreditAccount, amount: int) -> CreditAccount:
    if amount <= 0:
        raise LedgerError("Credit amount must be positive")
    if account.used_credits + account.locked_credits + amount > account.total_credits:
        raise InsufficientCreditsError(account.user_id, amount, account.available_credits)
    return account.model_copy(update={"locked_credits": account.locked_credits + amount})


def settle(account: CreditAccount, locked_amount: int, actual_amount: int) -> CreditAccount:
    if actual_amount < 0:
        raise LedgerError("Charged amount cannot be negative")
    locked = account.locked_credits - locked_amount
    if locked < 0:
        raise LedgerError("Reservation exceeds the account's locked credits")
    used = account.used_credits + actual_amount
    if used + locked > account.total_credits:
        raise InsufficientCreditsError(
            account.user_id, actual_amount, account.total_credits - account.used_credits - locked
        )
    return account.model_copy(update={"locked_credits": locked, "used_credits": used})


def release(account: CreditAccount, locked_amount: int) -> CreditAccount:
    locked = account.locked_credits - locked_amount
    if locked < 0:
        raise LedgerError("Reservation exceeds the account's locked credits")
    return account.model_copy(update={"locked_credits": locked})


def adjust_total(account: CreditAccount, delta: int) -> CreditAccount:
    total = account.total_credits + delta
    if total < 0 or account.used_credits + account.locked_credits > total:
        raise InsufficientCreditsError(account.user_id, -delta, account.available_credits)
    return account.model_copy(update={"total_credits": total})


def reset_usage(account: CreditAccount, total_credits: int) -> CreditAccount:
    if total_credits < 0:
        raise LedgerError("Total credits cannot be negative")
    if account.locked_credits > total_credits:
        raise InsufficientCreditsError(account.user_id, account.locked_credits, total_credits)
    return account.model_copy(update={"total_credits": total_credits, "used_credits": 0})


class CreditLedger(ABC):
    """Lock / finalize / refund reservation pattern over a credit balance."""

    service_name = "orchestrator"

    async def lock(self, user_id: UUID, content_id: UUID, amount: int) -> CreditTransaction:
        """Reserve ``amount`` credits for a job."""

        return await self._observe("lock", user_id, content_id, self._lock(user_id, content_id, amount))

    async def finalize(self, user_id: UUID, content_id: UUID, actual_amount: int) -> CreditTransaction:
        """Convert the job's reservation into a charge of ``actual_amount``."""

        return await self._observe(
            "finalize", user_id, content_id, self._finalize(user_id, content_id, actual_amount)
        )

    async def refund(self, user_id: UUID, content_id: UUID) -> Optional[CreditTransaction]:
        """Release the job's reservation; returns ``None`` when nothing was locked."""

        transaction = await self._observe("refund", user_id, content_id, self._refund(user_id, content_id))
        if transaction is None:
            logger.info("Refund skipped; no open reservation")
        return transaction

    async def adjust(self, user_id: UUID, delta: int, *, note: str | None = None) -> CreditTransaction:
        """Grant (positive) or remove (negative) credits manually."""

        return await self._observe("adjust", user_id, None, self._adjust(user_id, delta, note))

    async def reset(self, user_id: UUID, total_credits: int) -> CreditTransaction:
        """Start a new billing period: usage cleared, total replaced."""

        return await self._observe("reset", user_id, None, self._reset(user_id, total_credits))

    @abstractmethod
    async def get_account(self, user_id: UUID) -> Optional[CreditAccount]:
        """Return the account or ``None``."""

    @abstractmethod
    async def list_transactions(
        self, user_id: UUID, content_id: UUID | None = None
    ) -> list[CreditTransaction]:
        """Return transactions oldest first."""

    @abstractmethod
    async def _lock(self, user_id: UUID, content_id: UUID, amount: int) -> CreditTransaction: ...

    @abstractmethod
    async def _finalize(self, user_id: UUID, content_id: UUID, actual_amount: int) -> CreditTransaction: ...

    @abstractmethod
    async def _refund(self, user_id: UUID, content_id: UUID) -> Optional[CreditTransaction]: ...

    @abstractmethod
    async def _adjust(self, user_id: UUID, delta: int, note: str | None) -> CreditTransaction: ...

    @abstractmethod
    async def _reset(self, user_id: UUID, total_credits: int) -> CreditTransaction: ...

    async def _observe(self, operation, user_id, content_id, pending):
        context = {"user_id": str(user_id)}
        if content_id is not None:
            context["job_id"] = str(content_id)
        with log_context(**context):
            try:
                result = await pending
            except InsufficientCreditsError:
                observe_ledger_operation(operation, outcome="insufficient", service_name=self.service_name)
                logger.warning("Ledger %s rejected: insufficient credits", operation)
                raise
            except LedgerError:
                observe_ledger_operation(operation, outcome="error", service_name=self.service_name)
                logger.exception("Ledger %s failed", operation)
                raise
            observe_ledger_operation(
                operation,
                outcome="success",
                service_name=self.service_name,
                credits=abs(result.amount) if result is not None else 0,
            )
            if result is not None:
                logger.info(
                    "Ledger %s applied",
                    operation,
                    extra={"credits": result.amount, "transaction_status": result.status.value},
                )
            return result
