# app/crud/transaction.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, func
from app.core.db_utils import with_db_retry
from app.models.goal import Goal
from app.models.transaction import Transaction, TransactionType
from datetime import datetime
from typing import List, Optional, Tuple
import uuid

async def get_transaction_by_batch(db: AsyncSession, batch_id: str, txn_type: TransactionType) -> Optional[Transaction]:
    result = await db.execute(
        select(Transaction).where(Transaction.batch_id == batch_id, Transaction.type == txn_type)
    )
    return result.scalar_one_or_none()

@with_db_retry()
async def get_transactions_for_goal(
    goal_id: uuid.UUID,
    db: AsyncSession,
    limit: int = 10,
    offset: int = 0,
) -> Tuple[List[Transaction], int]:
    """Newest first, with the total count for pagination"""
    result = await db.execute(
        select(Transaction)
        .where(Transaction.goal_id == goal_id)
        .order_by(desc(Transaction.timestamp))
        .limit(limit)
        .offset(offset)
    )
    total = await db.execute(
        select(func.count()).select_from(Transaction).where(Transaction.goal_id == goal_id)
    )
    return list(result.scalars().all()), total.scalar_one()

async def count_transactions_for_goal(goal_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count()).select_from(Transaction).where(Transaction.goal_id == goal_id)
    )
    return result.scalar_one()

@with_db_retry()
async def get_batch_transactions_for_user(batch_id: str, user_id: uuid.UUID, db: AsyncSession) -> List[Transaction]:
    """All transactions of a batch, restricted to goals the user owns"""
    result = await db.execute(
        select(Transaction)
        .join(Goal, Goal.id == Transaction.goal_id)
        .where(Transaction.batch_id == batch_id, Goal.user_id == user_id)
        .order_by(Transaction.timestamp)
    )
    return list(result.scalars().all())

@with_db_retry()
async def get_history_for_user(
    user_id: uuid.UUID,
    db: AsyncSession,
    goal_id: Optional[uuid.UUID] = None,
    txn_type: Optional[TransactionType] = None,
    coin: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    before: Optional[datetime] = None,
    limit: int = 20,
) -> List[Tuple[Transaction, str]]:
    """
    Newest-first ``(transaction, goal coin)`` rows across the user's goals.
    ``before`` is the exclusive timestamp cursor of the previous page.
    """
    query = (
        select(Transaction, Goal.coin)
        .join(Goal, Goal.id == Transaction.goal_id)
        .where(Goal.user_id == user_id)
    )
    if goal_id is not None:
        query = query.where(Transaction.goal_id == goal_id)
    if txn_type is not None:
        query = query.where(Transaction.type == txn_type)
    if coin is not None:
        query = query.where(Goal.coin == coin)
    if start is not None:
        query = query.where(Transaction.timestamp >= start)
    if end is not None:
        query = query.where(Transaction.timestamp <= end)
    if before is not None:
        query = query.where(Transaction.timestamp < before)

    result = await db.execute(query.order_by(desc(Transaction.timestamp), Transaction.id).limit(limit))
    return [(txn, txn_coin) for txn, txn_coin in result.all()]
