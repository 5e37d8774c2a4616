"""PostgreSQL-backed credit ledger.

Each operation runs in one transaction that locks the account row with
``SELECT ... FOR UPDATE`` before any balance check, so concurrent locks for
the same user cannot both pass against a stale balance.
"""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID, uuid4

import psycopg
from fastapi.concurrency import run_in_threadpool
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from blogforge_schemas import CreditAccount, CreditTransaction, TransactionStatus, TransactionType

from ..exceptions import DuplicateReservationError, LedgerStoreError, ReservationNotFoundError
from .base import CreditLedger, adjust_total, release, reserve, reset_usage, settle

_ACCOUNT_COLUMNS = "user_id, total_credits, used_credits, locked_credits, updated_at"
_TRANSACTION_COLUMNS = "id, user_id, content_id, type, amount, status, note, created_at, updated_at"


class PostgresCreditLedger(CreditLedger):
    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    async def get_account(self, user_id: UUID) -> Optional[CreditAccount]:
        return await self._run(self._fetch_account, user_id)

    async def list_transactions(
        self, user_id: UUID, content_id: UUID | None = None
    ) -> list[CreditTransaction]:
        return await self._run(self._fetch_transactions, user_id, content_id)

    async def _lock(self, user_id: UUID, content_id: UUID, amount: int) -> CreditTransaction:
        return await self._run(self._lock_sync, user_id, content_id, amount)

    async def _finalize(self, user_id: UUID, content_id: UUID, actual_amount: int) -> CreditTransaction:
        return await self._run(self._finalize_sync, user_id, content_id, actual_amount)

    async def _refund(self, user_id: UUID, content_id: UUID) -> Optional[CreditTransaction]:
        return await self._run(self._refund_sync, user_id, content_id)

    async def _adjust(self, user_id: UUID, delta: int, note: str | None) -> CreditTransaction:
        return await self._run(self._adjust_sync, user_id, delta, note)

    async def _reset(self, user_id: UUID, total_credits: int) -> CreditTransaction:
        return await self._run(self._reset_sync, user_id, total_credits)

    async def _run(self, func, *args):
        try:
            return await run_in_threadpool(func, *args)
        except psycopg.Error as exc:
            raise LedgerStoreError(f"Credit ledger storage failed: {exc}") from exc

    # Synchronous bodies executed on the threadpool.

    def _fetch_account(self, user_id: UUID) -> Optional[CreditAccount]:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            cur.execute(f"SELECT {_ACCOUNT_COLUMNS} FROM credit_accounts WHERE user_id = %s", (user_id,))
            row = cur.fetchone()
        return CreditAccount(**row) if row else None

    def _fetch_transactions(self, user_id: UUID, content_id: UUID | None) -> list[CreditTransaction]:
        query = f"SELECT {_TRANSACTION_COLUMNS} FROM credit_transactions WHERE user_id = %s"
        params: list[Any] = [user_id]
        if content_id is not None:
            query += " AND content_id = %s"
            params.append(content_id)
        query += " ORDER BY created_at ASC"
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            cur.execute(query, params)
            rows = cur.fetchall()
        return [CreditTransaction(**row) for row in rows]

    def _lock_sync(self, user_id: UUID, content_id: UUID, amount: int) -> CreditTransaction:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            account = self._select_for_update(cur, user_id, create=False)
            if self._select_reservation(cur, user_id, content_id) is not None:
                raise DuplicateReservationError(f"Content job {content_id} already holds a reservation")
            updated = reserve(account, amount)
            self._store_account(cur, updated)
            transaction = self._insert_transaction(
                cur, user_id, content_id, TransactionType.USAGE, amount, TransactionStatus.LOCKED
            )
            conn.commit()
        return transaction

    def _finalize_sync(self, user_id: UUID, content_id: UUID, actual_amount: int) -> CreditTransaction:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            account = self._select_for_update(cur, user_id, create=False)
            reservation = self._select_reservation(cur, user_id, content_id)
            if reservation is None:
                raise ReservationNotFoundError(f"Content job {content_id} holds no open reservation")
            self._store_account(cur, settle(account, reservation.amount, actual_amount))
            cur.execute(
                f"""
                UPDATE credit_transactions
                SET amount = %s, status = %s, updated_at = NOW()
                WHERE id = %s
                RETURNING {_TRANSACTION_COLUMNS}
                """,
                (actual_amount, TransactionStatus.COMPLETED.value, reservation.id),
            )
            settled = CreditTransaction(**cur.fetchone())
            conn.commit()
        return settled

    def _refund_sync(self, user_id: UUID, content_id: UUID) -> Optional[CreditTransaction]:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            account = self._select_for_update(cur, user_id, create=False)
            reservation = self._select_reservation(cur, user_id, content_id)
            if reservation is None:
                conn.rollback()
                return None
            self._store_account(cur, release(account, reservation.amount))
            cur.execute(
                "UPDATE credit_transactions SET status = %s, updated_at = NOW() WHERE id = %s",
                (TransactionStatus.REFUNDED.value, reservation.id),
            )
            transaction = self._insert_transaction(
                cur, user_id, content_id, TransactionType.REFUND, reservation.amount, TransactionStatus.COMPLETED
            )
            conn.commit()
        return transaction

    def _adjust_sync(self, user_id: UUID, delta: int, note: str | None) -> CreditTransaction:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            account = self._select_for_update(cur, user_id, create=True)
            self._store_account(cur, adjust_total(account, delta))
            transaction = self._insert_transaction(
                cur, user_id, None, TransactionType.MANUAL_ADJUSTMENT, delta, TransactionStatus.COMPLETED, note
            )
            conn.commit()
        return transaction

    def _reset_sync(self, user_id: UUID, total_credits: int) -> CreditTransaction:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cur:
            account = self._select_for_update(cur, user_id, create=True)
            self._store_account(cur, reset_usage(account, total_credits))
            transaction = self._insert_transaction(
                cur, user_id, None, TransactionType.RESET, total_credits, TransactionStatus.COMPLETED
            )
            conn.commit()
        return transaction

    @staticmethod
    def _select_for_update(cur, user_id: UUID, *, create: bool) -> CreditAccount:
        if create:
            cur.execute(
                "INSERT INTO credit_accounts (user_id) VALUES (%s) ON CONFLICT (user_id) DO NOTHING",
                (user_id,),
            )
        cur.execute(
            f"SELECT {_ACCOUNT_COLUMNS} FROM credit_accounts WHERE user_id = %s FOR UPDATE",
            (user_id,),
        )
        row = cur.fetchone()
        return CreditAccount(**row) if row else CreditAccount(user_id=user_id)

    @staticmethod
    def _select_reservation(cur, user_id: UUID, content_id: UUID) -> Optional[CreditTransaction]:
        cur.execute(
            f"""
            SELECT {_TRANSACTION_COLUMNS} FROM credit_transactions
            WHERE user_id = %s AND content_id = %s AND type = %s AND status = %s
            FOR UPDATE
            """,
            (user_id, content_id, TransactionType.USAGE.value, TransactionStatus.LOCKED.value),
        )
        row = cur.fetchone()
        return CreditTransaction(**row) if row else None

    @staticmethod
    def _store_account(cur, account: CreditAccount) -> None:
        cur.execute(
            """
            UPDATE credit_accounts
            SET total_credits = %s, used_credits = %s, locked_credits = %s, updated_at = NOW()
            WHERE user_id = %s
            """,
            (account.total_credits, account.used_credits, account.locked_credits, account.user_id),
        )

    @staticmethod
    def _insert_transaction(
        cur,
        user_id: UUID,
        content_id: UUID | None,
        type_: TransactionType,
        amount: int,
        status: TransactionStatus,
        note: str | None = None,
    ) -> CreditTransaction:
        cur.execute(
            f"""
            INSERT INTO credit_transactions (id, user_id, content_id, type, amount, status, note)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING {_TRANSACTION_COLUMNS}
            """,
            (uuid4(), user_id, content_id, type_.value, amount, status.value, note),
        )
        return CreditTransaction(**cur.fetchone())
