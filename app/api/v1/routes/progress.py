# app/api/v1/routes/progress.py
import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_price_oracle
from app.core.auth import User
from app.core.config import settings
from app.core.database import get_async_session
from app.core.errors import AppError, GoalDurationTooLongError, GoalNotFoundError, PriceUnavailableError
from app.crud.goal import get_goal_by_id
from app.models.goal import GoalStatus
from app.schemas.goal import EstimatedCompletionRead, EtaUnavailable, GoalProgressResponse
from app.utils.goals import (
    calculate_estimated_completion,
    calculate_progress,
    calculate_remaining,
    next_investment_date,
)
from app.utils.prices import PriceOracle

router = APIRouter(prefix="/progress", tags=["progress"])
logger = logging.getLogger(__name__)


@router.get("/{goal_id}", response_model=GoalProgressResponse)
async def get_goal_progress(
    goal_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    oracle: PriceOracle = Depends(get_price_oracle),
):
    """
    Progress metrics for a goal valued at the current price.

    - **progress_percentage**: 0-100, exactly 100 only once the target is reached
    - **current_value** / **target_value**: invested and target amounts in the reference currency,
      null when no price is available
    - **estimated_completion**: the ETA, or an ``error`` marker when it cannot be computed
    - **next_investment_date**: only for ACTIVE goals
    """
    goal = await get_goal_by_id(goal_id, user.id, db)
    if goal is None:
        raise GoalNotFoundError()

    remaining = calculate_remaining(goal.invested_amount, goal.target_amount)
    goal_status = GoalStatus(goal.status)

    quote = None
    price_error = None
    try:
        quote = await oracle.get_price(goal.coin)
    except PriceUnavailableError as e:
        logger.warning(f"Serving progress for goal {goal.id} without a price: {e}")
        price_error = e

    estimated_completion = None
    needs_eta = goal_status != GoalStatus.COMPLETED and remaining > 0
    if needs_eta and price_error is not None:
        estimated_completion = EtaUnavailable(error=price_error.message)
    elif needs_eta:
        try:
            eta = await calculate_estimated_completion(
                goal.coin, remaining, goal.contribution_amount, goal.frequency, oracle=oracle
            )
            estimated_completion = EstimatedCompletionRead(**eta.to_dict())
        except GoalDurationTooLongError as e:
            logger.warning(f"ETA past horizon for goal {goal.id}: {e}")
            estimated_completion = EtaUnavailable(error=e.message, months_to_complete=e.months)
        except AppError as e:
            logger.warning(f"ETA unavailable for goal {goal.id} ({e.code}): {e}")
            estimated_completion = EtaUnavailable(error=e.message)

    return GoalProgressResponse(
        goal_id=goal.id,
        coin=goal.coin,
        status=goal_status,
        target_amount=goal.target_amount,
        invested_amount=goal.invested_amount,
        remaining_amount=remaining,
        progress_percentage=calculate_progress(goal.invested_amount, goal.target_amount),
        reference_currency=settings.REFERENCE_CURRENCY,
        current_price=quote.price if quote else None,
        price_fetched_at=quote.fetched_at if quote else None,
        price_stale=quote.stale if quote else None,
        current_value=round(goal.invested_amount * quote.price, 2) if quote else None,
        target_value=round(goal.target_amount * quote.price, 2) if quote else None,
        estimated_completion=estimated_completion,
        next_investment_date=next_investment_date(goal.frequency) if goal_status == GoalStatus.ACTIVE else None,
    )
