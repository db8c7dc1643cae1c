# app/api/v1/routes/history.py
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.auth import User
from app.core.database import get_async_session
from app.core.errors import GoalNotFoundError, UnknownCoinError, ValidationError
from app.crud.goal import get_goal_by_id
from app.crud.transaction import get_history_for_user
from app.models.transaction import TransactionType
from app.schemas.transaction import CursorPagination, HistoryBatch, HistoryResponse, TransactionRead
from app.utils.history import group_by_batch
from app.utils.tokens import get_supported_symbols, is_valid_coin, normalize_symbol

router = APIRouter(prefix="/history", tags=["history"])
logger = logging.getLogger(__name__)


@router.get("", response_model=HistoryResponse)
async def read_history(
    goal_id: Optional[UUID] = Query(None, description="Only this goal"),
    txn_type: Optional[TransactionType] = Query(None, alias="type", description="ONRAMP or SWAP"),
    coin: Optional[str] = Query(None, description="Only goals for this coin"),
    start_date: Optional[datetime] = Query(None, description="Earliest transaction time, inclusive"),
    end_date: Optional[datetime] = Query(None, description="Latest transaction time, inclusive"),
    after: Optional[datetime] = Query(None, description="next_cursor of the previous page"),
    limit: int = Query(20, ge=1, le=100, description="Transactions per page"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """
    Deposit history across the user's goals, grouped by batch, newest first.

    Pages hold up to ``limit`` transactions, so a batch whose legs straddle a
    page boundary appears on both pages.
    """
    if goal_id is not None and await get_goal_by_id(goal_id, user.id, db) is None:
        raise GoalNotFoundError()
    if coin is not None:
        if not is_valid_coin(coin):
            raise UnknownCoinError(coin, get_supported_symbols())
        coin = normalize_symbol(coin)
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date")

    rows = await get_history_for_user(
        user.id,
        db,
        goal_id=goal_id,
        txn_type=txn_type,
        coin=coin,
        start=start_date,
        end=end_date,
        before=after,
        limit=limit + 1,
    )
    has_more = len(rows) > limit
    rows = rows[:limit]
    batches = group_by_batch(rows)
    logger.info(f"History for user {user.id}: {len(rows)} transactions in {len(batches)} batches")

    return HistoryResponse(
        history=[
            HistoryBatch(
                batch_id=b.batch_id,
                goal_id=b.goal_id,
                coin=b.coin,
                state=b.state,
                timestamp=b.timestamp,
                onramp=TransactionRead.model_validate(b.onramp) if b.onramp else None,
                swap=TransactionRead.model_validate(b.swap) if b.swap else None,
            )
            for b in batches
        ],
        pagination=CursorPagination(
            limit=limit,
            has_more=has_more,
            next_cursor=rows[-1][0].timestamp if has_more and rows else None,
        ),
    )
