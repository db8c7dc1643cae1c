import asyncio

import pytest
from sqlalchemy import func, select

from app.core.database import AsyncSessionLocal
from app.models.transaction import Transaction, TransactionType
from app.utils.idempotency import AlreadyExisted, Created, ensure_idempotency, generate_batch_id


async def count_rows(batch_id: str) -> int:
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(func.count()).select_from(Transaction).where(Transaction.batch_id == batch_id)
        )
        return result.scalar_one()


class TestEnsureIdempotency:
    async def test_second_call_returns_existing(self, goal_factory):
        goal = await goal_factory()
        batch_id = generate_batch_id()
        calls = []

        async def producer(txn):
            calls.append(txn.batch_id)
            txn.txn_hash = "abc123"
            txn.amount_reference = 500.0

        async with AsyncSessionLocal() as session:
            first = await ensure_idempotency(session, batch_id, TransactionType.ONRAMP, producer, goal_id=goal.id)
        async with AsyncSessionLocal() as session:
            second = await ensure_idempotency(session, batch_id, TransactionType.ONRAMP, producer, goal_id=goal.id)

        assert isinstance(first, Created) and first.created
        assert isinstance(second, AlreadyExisted) and not second.created
        assert second.transaction.id == first.transaction.id
        assert second.transaction.txn_hash == "abc123"
        assert calls == [batch_id]

    async def test_same_batch_different_type_is_separate(self, goal_factory):
        goal = await goal_factory()
        batch_id = generate_batch_id()

        async def producer(txn):
            txn.amount_reference = 100.0

        async with AsyncSessionLocal() as session:
            onramp = await ensure_idempotency(session, batch_id, TransactionType.ONRAMP, producer, goal_id=goal.id)
        async with AsyncSessionLocal() as session:
            swap = await ensure_idempotency(session, batch_id, TransactionType.SWAP, producer, goal_id=goal.id)

        assert onramp.created and swap.created
        assert await count_rows(batch_id) == 2

    async def test_concurrent_calls_run_producer_once(self, goal_factory):
        goal = await goal_factory()
        batch_id = generate_batch_id()
        calls = 0

        async def producer(txn):
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.05)
            txn.amount_reference = 250.0

        async def attempt():
            async with AsyncSessionLocal() as session:
                return await ensure_idempotency(session, batch_id, TransactionType.SWAP, producer, goal_id=goal.id)

        results = await asyncio.gather(*(attempt() for _ in range(4)))

        assert calls == 1
        assert sum(r.created for r in results) == 1
        assert len({r.transaction.id for r in results}) == 1
        assert await count_rows(batch_id) == 1

    async def test_failed_producer_leaves_nothing_and_retry_succeeds(self, goal_factory):
        goal = await goal_factory()
        batch_id = generate_batch_id()

        async def failing(txn):
            raise RuntimeError("transfer rejected")

        async with AsyncSessionLocal() as session:
            with pytest.raises(RuntimeError, match="transfer rejected"):
                await ensure_idempotency(session, batch_id, TransactionType.ONRAMP, failing, goal_id=goal.id)

        assert await count_rows(batch_id) == 0

        async def working(txn):
            txn.amount_reference = 100.0

        async with AsyncSessionLocal() as session:
            retried = await ensure_idempotency(session, batch_id, TransactionType.ONRAMP, working, goal_id=goal.id)
        assert retried.created
        assert await count_rows(batch_id) == 1

    async def test_session_left_without_open_transaction(self, goal_factory):
        goal = await goal_factory()
        batch_id = generate_batch_id()

        async def producer(txn):
            txn.amount_reference = 100.0

        async with AsyncSessionLocal() as session:
            await ensure_idempotency(session, batch_id, TransactionType.ONRAMP, producer, goal_id=goal.id)
            assert not session.in_transaction()

            replay = await ensure_idempotency(session, batch_id, TransactionType.ONRAMP, producer, goal_id=goal.id)
            assert not replay.created
            assert not session.in_transaction()
