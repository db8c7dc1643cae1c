# app/core/errors.py
"""
Application error taxonomy.

Every error raised on purpose by the goal/transaction logic derives from
``AppError`` and carries an HTTP status code plus a stable machine-readable
code. The global handler in ``app.main`` renders them; anything else is
reduced to a generic internal error.
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    retryable: Optional[bool] = None

    def __init__(self, message: str = "An unexpected error occurred", status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.retryable is not None:
            payload["retryable"] = self.retryable
        return payload


class InternalError(AppError):
    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, 500, "INTERNAL_ERROR")


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class InvalidInputError(ValidationError):
    code = "INVALID_INPUT"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


class GoalNotFoundError(NotFoundError):
    code = "GOAL_NOT_FOUND"

    def __init__(self, message: str = "Goal not found"):
        super().__init__(message)


class RateLimitedError(AppError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"
    retryable = True

    def __init__(self, message: str = "Too many requests"):
        super().__init__(message)


# ────────────────────────────────────────────────────────────────────────────────
# GOAL RULES (422)
# ────────────────────────────────────────────────────────────────────────────────
class GoalValidationError(AppError):
    status_code = 422


class UnknownCoinError(GoalValidationError):
    code = "INVALID_COIN"

    def __init__(self, coin: Any, supported: Optional[list] = None):
        supported_text = ", ".join(supported) if supported else "BTC, ETH, SOL"
        super().__init__(f"Invalid coin: {coin}. Supported: {supported_text}")
        self.coin = coin


class InvalidAmountError(GoalValidationError):
    code = "INVALID_AMOUNT"

    def __init__(self, field: str, minimum: float, maximum: Optional[float] = None):
        upper = "infinity" if maximum is None else f"{maximum:g}"
        super().__init__(f"{field} must be between {minimum:g} and {upper}")
        self.field = field


class InvalidFrequencyError(GoalValidationError):
    code = "INVALID_FREQUENCY"

    def __init__(self, frequency: Any):
        super().__init__(f"Invalid frequency: {frequency}. Must be DAILY, WEEKLY, or MONTHLY")


class GoalDurationTooLongError(GoalValidationError):
    code = "GOAL_DURATION_TOO_LONG"

    def __init__(self, months: int, max_months: int = 120):
        super().__init__(f"Goal would take {months} months (max {max_months} months / {max_months // 12} years)")
        self.months = months
        self.max_months = max_months


class InvalidStatusTransitionError(GoalValidationError):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: Any, requested: Any, reason: Optional[str] = None):
        message = f"Cannot transition from {current} to {requested}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


InvalidTransitionError = InvalidStatusTransitionError


class GoalAlreadyCompletedError(GoalValidationError):
    code = "GOAL_ALREADY_COMPLETED"

    def __init__(self, message: str = "Cannot modify completed goal"):
        super().__init__(message)


class GoalNotActiveError(GoalValidationError):
    code = "GOAL_NOT_ACTIVE"

    def __init__(self, status: Any):
        super().__init__(f"Goal must be ACTIVE to record a deposit (current status: {status})")


# ────────────────────────────────────────────────────────────────────────────────
# DEPOSIT PRECONDITIONS
# ────────────────────────────────────────────────────────────────────────────────
class BatchConflictError(AppError):
    status_code = 409
    code = "BATCH_ID_CONFLICT"

    def __init__(self, batch_id: str):
        super().__init__(f"batchId {batch_id} is already used by another goal")


class InsufficientBalanceError(AppError):
    status_code = 400
    code = "INSUFFICIENT_BALANCE"

    def __init__(self, message: str = "Insufficient balance to complete the transfer"):
        super().__init__(message)


class WalletInvalidError(AppError):
    status_code = 400
    code = "INVALID_WALLET"

    def __init__(self, message: str = "A valid wallet address is required"):
        super().__init__(message)


class OnrampMissingError(AppError):
    status_code = 400
    code = "ONRAMP_NOT_FOUND"

    def __init__(self, batch_id: str):
        super().__init__(f"No onramp recorded for batchId {batch_id}")


# ────────────────────────────────────────────────────────────────────────────────
# UPSTREAM (retryable)
# ────────────────────────────────────────────────────────────────────────────────
class PriceUnavailableError(AppError):
    status_code = 503
    code = "PRICE_UNAVAILABLE"
    retryable = True

    def __init__(self, message: str = "Price service unavailable"):
        super().__init__(message)


class TransferTimeoutError(AppError):
    status_code = 503
    code = "TRANSFER_TIMEOUT"
    retryable = True

    def __init__(self, message: str = "Transfer confirmation timed out"):
        super().__init__(message)
