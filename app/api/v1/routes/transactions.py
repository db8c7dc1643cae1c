# app/api/v1/routes/transactions.py
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.transaction import Pagination, TransactionListResponse, TransactionRead
from app.crud.goal import get_goal_by_id
from app.crud.transaction import get_transactions_for_goal
from app.core.database import get_async_session
from app.core.auth import User
from app.core.errors import GoalNotFoundError
from app.api.deps import get_current_user

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=TransactionListResponse)
async def read_transactions(
    goal_id: uuid.UUID = Query(..., description="Goal whose history to list"),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Transaction history of one of the user's goals, newest first"""
    goal = await get_goal_by_id(goal_id, user.id, db)
    if goal is None:
        raise GoalNotFoundError()

    transactions, total = await get_transactions_for_goal(goal.id, db, limit=limit, offset=offset)
    return TransactionListResponse(
        transactions=[TransactionRead.model_validate(t) for t in transactions],
        pagination=Pagination(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + len(transactions) < total,
        ),
    )
