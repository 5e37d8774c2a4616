"""Tests for the credit ledger's reservation semantics."""

import asyncio
from uuid import uuid4

import pytest

from blogforge_schemas import CreditAccount, TransactionStatus, TransactionType

from services.orchestrator.app.exceptions import (
    DuplicateReservationError,
    InsufficientCreditsError,
    ReservationNotFoundError,
)
from services.orchestrator.app.ledger import InMemoryCreditLedger, estimate_credits


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def ledger(user_id):
    return InMemoryCreditLedger([CreditAccount(user_id=user_id, total_credits=10)])


def _assert_invariant(account: CreditAccount) -> None:
    assert account.used_credits + account.locked_credits <= account.total_credits


async def test_lock_reserves_and_records_transaction(ledger, user_id) -> None:
    job_id = uuid4()
    transaction = await ledger.lock(user_id, job_id, 3)
    account = await ledger.get_account(user_id)
    assert account.locked_credits == 3
    assert account.available_credits == 7
    assert transaction.type is TransactionType.USAGE
    assert transaction.status is TransactionStatus.LOCKED
    assert transaction.content_id == job_id


async def test_lock_beyond_balance_is_rejected_without_mutation(ledger, user_id) -> None:
    await ledger.lock(user_id, uuid4(), 8)
    before = await ledger.get_account(user_id)
    with pytest.raises(InsufficientCreditsError) as excinfo:
        await ledger.lock(user_id, uuid4(), 3)
    assert excinfo.value.available == 2
    assert await ledger.get_account(user_id) == before
    assert len(await ledger.list_transactions(user_id)) == 1


async def test_lock_for_unknown_account_is_rejected() -> None:
    ledger = InMemoryCreditLedger()
    with pytest.raises(InsufficientCreditsError):
        await ledger.lock(uuid4(), uuid4(), 1)


async def test_second_lock_for_same_job_is_rejected(ledger, user_id) -> None:
    job_id = uuid4()
    await ledger.lock(user_id, job_id, 2)
    with pytest.raises(DuplicateReservationError):
        await ledger.lock(user_id, job_id, 2)
    assert (await ledger.get_account(user_id)).locked_credits == 2


async def test_finalize_charges_and_completes(ledger, user_id) -> None:
    job_id = uuid4()
    await ledger.lock(user_id, job_id, 3)
    transaction = await ledger.finalize(user_id, job_id, 3)
    account = await ledger.get_account(user_id)
    assert account.locked_credits == 0
    assert account.used_credits == 3
    assert transaction.status is TransactionStatus.COMPLETED
    assert transaction.amount == 3
    [stored] = await ledger.list_transactions(user_id, job_id)
    assert stored.status is TransactionStatus.COMPLETED


async def test_finalize_lower_actual_releases_difference(ledger, user_id) -> None:
    job_id = uuid4()
    await ledger.lock(user_id, job_id, 4)
    await ledger.finalize(user_id, job_id, 1)
    account = await ledger.get_account(user_id)
    assert (account.used_credits, account.locked_credits, account.available_credits) == (1, 0, 9)


async def test_finalize_above_balance_mutates_nothing(ledger, user_id) -> None:
    job_id = uuid4()
    await ledger.lock(user_id, job_id, 2)
    before = await ledger.get_account(user_id)
    with pytest.raises(InsufficientCreditsError):
        await ledger.finalize(user_id, job_id, 11)
    assert await ledger.get_account(user_id) == before
    [open_lock] = await ledger.list_transactions(user_id, job_id)
    assert open_lock.status is TransactionStatus.LOCKED


async def test_finalize_without_reservation(ledger, user_id) -> None:
    with pytest.raises(ReservationNotFoundError):
        await ledger.finalize(user_id, uuid4(), 1)


async def test_lock_then_refund_round_trip(ledger, user_id) -> None:
    job_id = uuid4()
    before = await ledger.get_account(user_id)
    await ledger.lock(user_id, job_id, 3)
    refund = await ledger.refund(user_id, job_id)
    after = await ledger.get_account(user_id)
    assert after.locked_credits == before.locked_credits
    assert after.used_credits == before.used_credits
    assert refund.type is TransactionType.REFUND
    [usage] = [t for t in await ledger.list_transactions(user_id, job_id) if t.type is TransactionType.USAGE]
    assert usage.status is TransactionStatus.REFUNDED


async def test_refund_is_idempotent(ledger, user_id) -> None:
    job_id = uuid4()
    await ledger.lock(user_id, job_id, 3)
    await ledger.refund(user_id, job_id)
    once = await ledger.get_account(user_id)
    assert await ledger.refund(user_id, job_id) is None
    assert await ledger.get_account(user_id) == once


async def test_refund_without_lock_is_soft_noop(ledger, user_id) -> None:
    assert await ledger.refund(user_id, uuid4()) is None
    assert await ledger.list_transactions(user_id) == []


async def test_invariant_holds_over_mixed_sequence(ledger, user_id) -> None:
    jobs = [uuid4() for _ in range(4)]
    for job_id in jobs:
        try:
            await ledger.lock(user_id, job_id, 3)
        except InsufficientCreditsError:
            pass
        _assert_invariant(await ledger.get_account(user_id))
    await ledger.finalize(user_id, jobs[0], 3)
    _assert_invariant(await ledger.get_account(user_id))
    await ledger.refund(user_id, jobs[1])
    _assert_invariant(await ledger.get_account(user_id))
    await ledger.lock(user_id, jobs[3], 3)
    account = await ledger.get_account(user_id)
    _assert_invariant(account)
    assert (account.used_credits, account.locked_credits) == (3, 6)


async def test_concurrent_locks_never_overdraw(ledger, user_id) -> None:
    job_ids = [uuid4() for _ in range(6)]

    results = await asyncio.gather(
        *(ledger.lock(user_id, job_id, 3) for job_id in job_ids), return_exceptions=True
    )

    locked = [result for result in results if not isinstance(result, BaseException)]
    rejected = [result for result in results if isinstance(result, BaseException)]
    assert len(locked) == 3
    assert len(rejected) == 3
    assert all(isinstance(error, InsufficientCreditsError) for error in rejected)
    account = await ledger.get_account(user_id)
    _assert_invariant(account)
    assert account.locked_credits == 9
    assert len(await ledger.list_transactions(user_id)) == 3


async def test_adjust_grants_and_removes(user_id) -> None:
    ledger = InMemoryCreditLedger()
    grant = await ledger.adjust(user_id, 5, note="welcome bonus")
    assert grant.type is TransactionType.MANUAL_ADJUSTMENT
    assert grant.note == "welcome bonus"
    await ledger.lock(user_id, uuid4(), 4)
    with pytest.raises(InsufficientCreditsError):
        await ledger.adjust(user_id, -2)
    await ledger.adjust(user_id, -1)
    assert (await ledger.get_account(user_id)).total_credits == 4


async def test_reset_clears_usage_and_respects_open_locks(ledger, user_id) -> None:
    first, second = uuid4(), uuid4()
    await ledger.lock(user_id, first, 3)
    await ledger.finalize(user_id, first, 3)
    await ledger.lock(user_id, second, 4)
    with pytest.raises(InsufficientCreditsError):
        await ledger.reset(user_id, 3)
    transaction = await ledger.reset(user_id, 20)
    account = await ledger.get_account(user_id)
    assert (account.total_credits, account.used_credits, account.locked_credits) == (20, 0, 4)
    assert transaction.type is TransactionType.RESET


@pytest.mark.parametrize(
    "words, has_subheadings, has_faq, expected",
    [
        (500, False, False, 1),
        (799, False, True, 2),
        (800, False, True, 3),
        (1500, False, True, 4),
        (2500, False, True, 5),
        (2500, True, True, 6),
    ],
)
def test_estimate_credits(words, has_subheadings, has_faq, expected) -> None:
    assert estimate_credits(words, has_subheadings=has_subheadings, has_faq=has_faq) == expected
