# app/utils/goals.py
import math
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from decimal import Decimal, ROUND_CEILING
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from dateutil.relativedelta import relativedelta

from app.core.config import settings
from app.core.errors import (
    GoalAlreadyCompletedError,
    GoalDurationTooLongError,
    InvalidAmountError,
    InvalidFrequencyError,
    InvalidInputError,
    InvalidStatusTransitionError,
    UnknownCoinError,
)
from app.models.goal import Frequency, GoalStatus
from app.utils.tokens import get_supported_symbols, get_token_info, normalize_symbol

# Average Gregorian month, used only for display month counts
DAYS_PER_MONTH = 365.25 / 12
_JUST_UNDER_100 = math.nextafter(100.0, 0.0)


# ────────────────────────────────────────────────────────────────────────────────
# PROGRESS
# ────────────────────────────────────────────────────────────────────────────────
def calculate_progress(invested_amount: float, target_amount: float) -> float:
    """
    Percent of the target reached, clamped to [0, 100].

    Reports exactly 100 only once invested >= target, so a goal that is a
    hair short never shows as done. A non-positive target returns 0.
    """
    if target_amount is None or target_amount <= 0:
        return 0.0
    if invested_amount is None or invested_amount <= 0:
        return 0.0
    if invested_amount >= target_amount:
        return 100.0
    return min(invested_amount / target_amount * 100, _JUST_UNDER_100)


def calculate_remaining(invested_amount: float, target_amount: float) -> float:
    return max(0.0, (target_amount or 0.0) - (invested_amount or 0.0))


# ────────────────────────────────────────────────────────────────────────────────
# CALENDAR HELPERS
# ────────────────────────────────────────────────────────────────────────────────
def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    return moment + relativedelta(months=months)


def advance(moment: datetime, frequency: Frequency, intervals: int) -> datetime:
    if frequency == Frequency.DAILY:
        return moment + relativedelta(days=intervals)
    if frequency == Frequency.WEEKLY:
        return moment + relativedelta(weeks=intervals)
    return add_months(moment, intervals)


def next_investment_date(frequency: Any, now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return advance(now, parse_frequency(frequency), 1)


# ────────────────────────────────────────────────────────────────────────────────
# ETA
# ────────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class EstimatedCompletion:
    intervals_needed: int
    months_to_complete: int
    estimated_completion_date: datetime
    total_cost_reference: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _to_decimal(value: float) -> Decimal:
    # via str so 0.1 stays 0.1 instead of its binary expansion
    return Decimal(str(value))


async def calculate_estimated_completion(
    coin: str,
    remaining_amount: float,
    contribution_amount: float,
    frequency: Any,
    *,
    oracle,
    now: Optional[datetime] = None,
    max_years: Optional[int] = None,
) -> EstimatedCompletion:
    """
    Estimate when a goal completes at the current price.

    Raises GoalDurationTooLongError past the policy horizon; callers that only
    display the ETA may catch it and omit the field.
    """
    if contribution_amount is None or not math.isfinite(contribution_amount) or contribution_amount <= 0:
        raise InvalidInputError("contribution_amount must be greater than 0")
    if remaining_amount is None or not math.isfinite(remaining_amount) or remaining_amount < 0:
        raise InvalidInputError("remaining_amount must not be negative")
    freq = parse_frequency(frequency)

    quote = await oracle.get_price(coin)
    total_cost = _to_decimal(remaining_amount) * _to_decimal(quote.price)
    intervals = int((total_cost / _to_decimal(contribution_amount)).to_integral_value(rounding=ROUND_CEILING))

    now = now or datetime.now(timezone.utc)
    max_months = (max_years if max_years is not None else settings.MAX_GOAL_YEARS) * 12
    horizon = add_months(now, max_months)

    if freq == Frequency.MONTHLY:
        months = intervals
        if intervals > max_months:
            raise GoalDurationTooLongError(months, max_months)
    else:
        days = intervals * (7 if freq == Frequency.WEEKLY else 1)
        months = round(days / DAYS_PER_MONTH)
        if days > (horizon - now).days:
            raise GoalDurationTooLongError(months, max_months)

    return EstimatedCompletion(
        intervals_needed=intervals,
        months_to_complete=months,
        estimated_completion_date=advance(now, freq, intervals),
        total_cost_reference=float(round(total_cost, 2)),
    )


# ────────────────────────────────────────────────────────────────────────────────
# VALIDATION
# ────────────────────────────────────────────────────────────────────────────────
def _enum_value(value: Any) -> str:
    if isinstance(value, Enum):
        return value.value
    return str(value).upper()


def parse_frequency(value: Any) -> Frequency:
    if value is None:
        raise InvalidFrequencyError(value)
    try:
        return Frequency(_enum_value(value))
    except ValueError:
        raise InvalidFrequencyError(value)


def validate_contribution_amount(amount: Any, minimum: Optional[float] = None) -> float:
    minimum = settings.MIN_CONTRIBUTION_AMOUNT if minimum is None else minimum
    if not isinstance(amount, (int, float)) or not math.isfinite(amount) or amount < minimum:
        raise InvalidAmountError("contribution_amount", minimum)
    return float(amount)


def validate_goal_input(coin: Any, target_amount: Any, contribution_amount: Any, frequency: Any) -> Tuple[str, Frequency]:
    """Validate goal creation input; returns the normalized coin and frequency."""
    symbol = normalize_symbol(coin)
    token = get_token_info(symbol)
    if token is None:
        raise UnknownCoinError(coin, get_supported_symbols())

    if (
        not isinstance(target_amount, (int, float))
        or not math.isfinite(target_amount)
        or target_amount <= 0
        or target_amount > token.max_target
    ):
        raise InvalidAmountError("target_amount", 0, token.max_target)

    validate_contribution_amount(contribution_amount)
    return symbol, parse_frequency(frequency)


# ────────────────────────────────────────────────────────────────────────────────
# STATE MACHINE
# ────────────────────────────────────────────────────────────────────────────────
ALLOWED_TRANSITIONS = {
    GoalStatus.ACTIVE: {GoalStatus.PAUSED, GoalStatus.COMPLETED},
    GoalStatus.PAUSED: {GoalStatus.ACTIVE, GoalStatus.COMPLETED},
    GoalStatus.COMPLETED: set(),  # terminal
}


def should_auto_complete(invested_amount: float, target_amount: float) -> bool:
    return target_amount is not None and target_amount > 0 and (invested_amount or 0) >= target_amount


def validate_status_transition(
    current: Any,
    requested: Any,
    invested_amount: float,
    target_amount: float,
) -> GoalStatus:
    current_status = GoalStatus(current)
    if current_status == GoalStatus.COMPLETED:
        raise GoalAlreadyCompletedError()

    try:
        requested_status = GoalStatus(_enum_value(requested))
    except ValueError:
        raise InvalidStatusTransitionError(current_status.value, requested, "unknown status")

    if requested_status == current_status:
        return requested_status
    if requested_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidStatusTransitionError(current_status.value, requested_status.value)
    if requested_status == GoalStatus.COMPLETED and not should_auto_complete(invested_amount, target_amount):
        raise InvalidStatusTransitionError(
            current_status.value, requested_status.value, "invested amount is below target"
        )
    return requested_status


def apply_goal_update(goal, updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate every requested change, then apply them to ``goal`` together.

    Returns the changes that were applied. Nothing is touched if any field
    fails validation.
    """
    if GoalStatus(goal.status) == GoalStatus.COMPLETED:
        raise GoalAlreadyCompletedError()

    changes: Dict[str, Any] = {}
    if updates.get("contribution_amount") is not None:
        changes["contribution_amount"] = validate_contribution_amount(updates["contribution_amount"])
    if updates.get("frequency") is not None:
        changes["frequency"] = parse_frequency(updates["frequency"])
    if updates.get("status") is not None:
        changes["status"] = validate_status_transition(
            goal.status, updates["status"], goal.invested_amount, goal.target_amount
        )

    for field, value in changes.items():
        setattr(goal, field, value)
    return changes


def apply_auto_completion(goal) -> bool:
    """Flip an ACTIVE goal to COMPLETED once the target is reached."""
    if GoalStatus(goal.status) == GoalStatus.ACTIVE and should_auto_complete(goal.invested_amount, goal.target_amount):
        goal.status = GoalStatus.COMPLETED
        return True
    return False
