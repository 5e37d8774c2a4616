"""Process-local credit ledger used by tests and the memory backend."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, Optional
from uuid import UUID

from blogforge_schemas import CreditAccount, CreditTransaction, TransactionStatus, TransactionType

from ..exceptions import DuplicateReservationError, ReservationNotFoundError
from .base import CreditLedger, adjust_total, release, reserve, reset_usage, settle


class InMemoryCreditLedger(CreditLedger):
    """Ledger holding accounts and transactions in dictionaries.

    Operations for the same user are serialised with a per-user lock so the
    read-check-write sequence is atomic inside one event loop.
    """

    def __init__(self, accounts: Iterable[CreditAccount] = ()) -> None:
        self._accounts: dict[UUID, CreditAccount] = {account.user_id: account for account in accounts}
        self._transactions: list[CreditTransaction] = []
        self._locks: defaultdict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def get_account(self, user_id: UUID) -> Optional[CreditAccount]:
        return self._accounts.get(user_id)

    async def list_transactions(
        self, user_id: UUID, content_id: UUID | None = None
    ) -> list[CreditTransaction]:
        return [
            transaction
            for transaction in self._transactions
            if transaction.user_id == user_id
            and (content_id is None or transaction.content_id == content_id)
        ]

    async def _lock(self, user_id: UUID, content_id: UUID, amount: int) -> CreditTransaction:
        async with self._locks[user_id]:
            if self._open_reservation(user_id, content_id) is not None:
                raise DuplicateReservationError(f"Content job {content_id} already holds a reservation")
            self._accounts[user_id] = reserve(self._account(user_id), amount)
            return self._record(user_id, content_id, TransactionType.USAGE, amount, TransactionStatus.LOCKED)

    async def _finalize(self, user_id: UUID, content_id: UUID, actual_amount: int) -> CreditTransaction:
        async with self._locks[user_id]:
            index = self._open_reservation(user_id, content_id)
            if index is None:
                raise ReservationNotFoundError(f"Content job {content_id} holds no open reservation")
            reservation = self._transactions[index]
            self._accounts[user_id] = settle(self._account(user_id), reservation.amount, actual_amount)
            settled = reservation.model_copy(
                update={"amount": actual_amount, "status": TransactionStatus.COMPLETED, "updated_at": _utcnow()}
            )
            self._transactions[index] = settled
            return settled

    async def _refund(self, user_id: UUID, content_id: UUID) -> Optional[CreditTransaction]:
        async with self._locks[user_id]:
            index = self._open_reservation(user_id, content_id)
            if index is None:
                return None
            reservation = self._transactions[index]
            self._accounts[user_id] = release(self._account(user_id), reservation.amount)
            self._transactions[index] = reservation.model_copy(
                update={"status": TransactionStatus.REFUNDED, "updated_at": _utcnow()}
            )
            return self._record(
                user_id, content_id, TransactionType.REFUND, reservation.amount, TransactionStatus.COMPLETED
            )

    async def _adjust(self, user_id: UUID, delta: int, note: str | None) -> CreditTransaction:
        async with self._locks[user_id]:
            account = self._accounts.get(user_id) or CreditAccount(user_id=user_id)
            self._accounts[user_id] = adjust_total(account, delta)
            return self._record(
                user_id, None, TransactionType.MANUAL_ADJUSTMENT, delta, TransactionStatus.COMPLETED, note
            )

    async def _reset(self, user_id: UUID, total_credits: int) -> CreditTransaction:
        async with self._locks[user_id]:
            account = self._accounts.get(user_id) or CreditAccount(user_id=user_id)
            self._accounts[user_id] = reset_usage(account, total_credits)
            return self._record(user_id, None, TransactionType.RESET, total_credits, TransactionStatus.COMPLETED)

    def _account(self, user_id: UUID) -> CreditAccount:
        # Unknown users behave like an empty account, so any lock is rejected.
        return self._accounts.get(user_id) or CreditAccount(user_id=user_id)

    def _open_reservation(self, user_id: UUID, content_id: UUID) -> Optional[int]:
        for index, transaction in enumerate(self._transactions):
            if (
                transaction.user_id == user_id
                and transaction.content_id == content_id
                and transaction.type is TransactionType.USAGE
                and transaction.status is TransactionStatus.LOCKED
            ):
                return index
        return None

    def _record(
        self,
        user_id: UUID,
        content_id: UUID | None,
        type_: TransactionType,
        amount: int,
        status: TransactionStatus,
        note: str | None = None,
    ) -> CreditTransaction:
        transaction = CreditTransaction(
            user_id=user_id, content_id=content_id, type=type_, amount=amount, status=status, note=note
        )
        self._transactions.append(transaction)
        return transaction


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
