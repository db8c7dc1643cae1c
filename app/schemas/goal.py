# app/schemas/goal.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
import uuid

from app.models.goal import Frequency, GoalStatus


class GoalCreate(BaseModel):
    coin: str = Field(..., description="Coin symbol, e.g. BTC")
    target_amount: float = Field(..., description="Target in coin units, e.g. 1.0")
    contribution_amount: float = Field(..., description="Reference-currency amount per interval")
    # Plain string so unknown values surface as INVALID_FREQUENCY rather than a 422 schema error
    frequency: str


class GoalUpdate(BaseModel):
    contribution_amount: Optional[float] = None
    frequency: Optional[str] = None
    status: Optional[str] = None


class GoalRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    coin: str
    target_amount: float
    invested_amount: float
    contribution_amount: float
    frequency: Frequency
    status: GoalStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EstimatedCompletionRead(BaseModel):
    intervals_needed: int
    months_to_complete: int
    estimated_completion_date: datetime
    total_cost_reference: float


class GoalWithProgress(GoalRead):
    progress_percentage: float
    token_mint: str
    decimals: int


class GoalDetail(GoalWithProgress):
    transaction_count: int
    remaining_amount: float
    estimated_completion: Optional[EstimatedCompletionRead] = None


class GoalCreateResponse(BaseModel):
    success: bool = True
    goal_id: uuid.UUID
    goal: GoalWithProgress
    estimated_completion: EstimatedCompletionRead


class GoalListResponse(BaseModel):
    success: bool = True
    goals: List[GoalWithProgress]
    count: int


class EtaUnavailable(BaseModel):
    error: str
    months_to_complete: Optional[int] = None
    estimated_completion_date: Optional[datetime] = None


class GoalProgressResponse(BaseModel):
    success: bool = True
    goal_id: uuid.UUID
    coin: str
    status: GoalStatus
    target_amount: float
    invested_amount: float
    remaining_amount: float
    progress_percentage: float
    reference_currency: str
    # Null when the price service is down and nothing is cached
    current_price: Optional[float] = None
    price_fetched_at: Optional[datetime] = None
    price_stale: Optional[bool] = None
    current_value: Optional[float] = None
    target_value: Optional[float] = None
    estimated_completion: Optional[EstimatedCompletionRead | EtaUnavailable] = None
    next_investment_date: Optional[datetime] = None
