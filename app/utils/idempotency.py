# app/utils/idempotency.py
"""
At-most-once recording of financial operations keyed by (batch_id, type).

The guard claims the key by inserting the Transaction row first and
flushing it, so the ``uq_transactions_batch_id_type`` constraint decides
the winner before any side effect runs. The winner's producer then fills
in the row inside the same database transaction; the loser sees either
the committed row or a unique-constraint conflict, re-reads, and never
runs its producer.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.transaction import get_transaction_by_batch
from app.models.transaction import Transaction, TransactionState, TransactionType

logger = logging.getLogger(__name__)

Producer = Callable[[Transaction], Awaitable[None]]


@dataclass(frozen=True)
class Created:
    transaction: Transaction
    created: bool = True


@dataclass(frozen=True)
class AlreadyExisted:
    transaction: Transaction
    created: bool = False


IdempotencyResult = Union[Created, AlreadyExisted]


def generate_batch_id() -> str:
    return uuid.uuid4().hex


async def ensure_idempotency(
    db: AsyncSession,
    batch_id: str,
    txn_type: TransactionType,
    producer: Producer,
    *,
    goal_id: uuid.UUID,
) -> IdempotencyResult:
    """
    Return the transaction recorded for ``(batch_id, txn_type)``, running
    ``producer`` only if none exists yet.

    ``producer`` receives the claimed row and must populate it; it may also
    stage other changes on ``db``. Everything commits together. If the
    producer raises, the claim is rolled back and the error propagates.
    Every outcome returns with no transaction left open on ``db``.
    """
    existing = await get_transaction_by_batch(db, batch_id, txn_type)
    if existing is not None:
        await db.commit()
        logger.info(f"{txn_type.value} batch {batch_id} already recorded as {existing.id}")
        return AlreadyExisted(existing)

    claim = Transaction(
        goal_id=goal_id,
        batch_id=batch_id,
        type=txn_type,
        meta={"state": TransactionState.PENDING.value},
    )
    db.add(claim)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        existing = await get_transaction_by_batch(db, batch_id, txn_type)
        await db.commit()
        if existing is None:
            raise
        logger.info(f"{txn_type.value} batch {batch_id} recorded concurrently as {existing.id}")
        return AlreadyExisted(existing)

    try:
        await producer(claim)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.warning(f"{txn_type.value} batch {batch_id} failed; claim released")
        raise

    # Reload as stored so the body matches what a replay reads back, then end
    # the read: on SQLite an open transaction keeps the write lock.
    await db.refresh(claim)
    await db.commit()
    logger.info(f"{txn_type.value} batch {batch_id} recorded as {claim.id}")
    return Created(claim)
