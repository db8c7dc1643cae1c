# app/api/v1/routes/goals.py
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_price_oracle
from app.core.auth import User
from app.core.database import get_async_session
from app.core.errors import AppError, GoalNotFoundError
from app.crud import goal as crud_goal
from app.crud.transaction import count_transactions_for_goal
from app.models.goal import Goal, GoalStatus
from app.schemas.goal import (
    EstimatedCompletionRead,
    GoalCreate,
    GoalCreateResponse,
    GoalDetail,
    GoalListResponse,
    GoalRead,
    GoalUpdate,
    GoalWithProgress,
)
from app.utils.goals import (
    apply_goal_update,
    calculate_estimated_completion,
    calculate_progress,
    calculate_remaining,
    validate_goal_input,
)
from app.utils.prices import PriceOracle
from app.utils.tokens import get_token_info

router = APIRouter(prefix="/goals", tags=["goals"])
logger = logging.getLogger(__name__)


def goal_with_progress(goal: Goal) -> GoalWithProgress:
    token = get_token_info(goal.coin)
    return GoalWithProgress(
        **GoalRead.model_validate(goal).model_dump(),
        progress_percentage=calculate_progress(goal.invested_amount, goal.target_amount),
        token_mint=token.mint,
        decimals=token.decimals,
    )


@router.post("", response_model=GoalCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    payload: GoalCreate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    oracle: PriceOracle = Depends(get_price_oracle),
):
    """
    Create an ACTIVE goal.

    The completion estimate is computed first; a goal that would take longer
    than the allowed horizon is rejected with GOAL_DURATION_TOO_LONG.
    """
    coin, frequency = validate_goal_input(
        payload.coin, payload.target_amount, payload.contribution_amount, payload.frequency
    )
    eta = await calculate_estimated_completion(
        coin, payload.target_amount, payload.contribution_amount, frequency, oracle=oracle
    )

    goal = await crud_goal.create_goal_for_user(
        user.id, coin, payload.target_amount, payload.contribution_amount, frequency, db
    )
    logger.info(f"Goal {goal.id} created for user {user.id}: {payload.target_amount} {coin} {frequency.value}")
    return GoalCreateResponse(
        goal_id=goal.id,
        goal=goal_with_progress(goal),
        estimated_completion=EstimatedCompletionRead(**eta.to_dict()),
    )


@router.get("", response_model=GoalListResponse)
async def list_goals(
    goal_status: Optional[GoalStatus] = Query(None, alias="status", description="Filter by goal status"),
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    goals = await crud_goal.get_goals_for_user(user.id, db, status=goal_status)
    return GoalListResponse(goals=[goal_with_progress(g) for g in goals], count=len(goals))


@router.get("/{goal_id}", response_model=GoalDetail)
async def get_goal(
    goal_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    oracle: PriceOracle = Depends(get_price_oracle),
):
    """Goal with progress, remaining amount, transaction count and (when available) the ETA."""
    goal = await crud_goal.get_goal_by_id(goal_id, user.id, db)
    if goal is None:
        raise GoalNotFoundError()

    remaining = calculate_remaining(goal.invested_amount, goal.target_amount)
    estimated_completion = None
    if GoalStatus(goal.status) != GoalStatus.COMPLETED and remaining > 0:
        try:
            eta = await calculate_estimated_completion(
                goal.coin, remaining, goal.contribution_amount, goal.frequency, oracle=oracle
            )
            estimated_completion = EstimatedCompletionRead(**eta.to_dict())
        except AppError as e:
            logger.warning(f"ETA omitted for goal {goal.id} ({e.code}): {e}")

    return GoalDetail(
        **goal_with_progress(goal).model_dump(),
        transaction_count=await count_transactions_for_goal(goal.id, db),
        remaining_amount=remaining,
        estimated_completion=estimated_completion,
    )


@router.patch("/{goal_id}", response_model=GoalWithProgress)
async def update_goal(
    goal_id: UUID,
    payload: GoalUpdate,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    """Update contribution, frequency or status; COMPLETED goals are read-only."""
    goal = await crud_goal.get_goal_by_id(goal_id, user.id, db, for_update=True)
    if goal is None:
        raise GoalNotFoundError()

    changes = apply_goal_update(goal, payload.model_dump(exclude_unset=True))
    if changes:
        goal = await crud_goal.save_goal(goal, db)
        logger.info(f"Goal {goal.id} updated: {', '.join(changes)}")
    return goal_with_progress(goal)
