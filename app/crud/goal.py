# app/crud/goal.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from app.core.db_utils import with_db_retry
from app.models.goal import Goal, Frequency, GoalStatus
from typing import List, Optional
import uuid

@with_db_retry()
async def get_goals_for_user(user_id: uuid.UUID, db: AsyncSession, status: Optional[GoalStatus] = None) -> List[Goal]:
    query = select(Goal).where(Goal.user_id == user_id)
    if status is not None:
        query = query.where(Goal.status == status)
    result = await db.execute(query.order_by(desc(Goal.created_at)))
    return list(result.scalars().all())

async def get_goal_by_id(goal_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession, for_update: bool = False) -> Optional[Goal]:
    query = select(Goal).where(Goal.id == goal_id, Goal.user_id == user_id)
    if for_update:
        # Row lock held until commit; concurrent deposits on the goal queue here
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()

async def create_goal_for_user(
    user_id: uuid.UUID,
    coin: str,
    target_amount: float,
    contribution_amount: float,
    frequency: Frequency,
    db: AsyncSession,
) -> Goal:
    new_goal = Goal(
        user_id=user_id,
        coin=coin,
        target_amount=target_amount,
        invested_amount=0.0,
        contribution_amount=contribution_amount,
        frequency=frequency,
        status=GoalStatus.ACTIVE,
    )
    db.add(new_goal)
    await db.commit()
    await db.refresh(new_goal)
    return new_goal

async def save_goal(goal: Goal, db: AsyncSession) -> Goal:
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return goal
