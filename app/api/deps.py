# app/api/deps.py
from fastapi import Depends, Request

from app.core.auth import User, current_active_user
from app.core.rate_limit import RateLimiter
from app.utils.notifications import NotificationSender
from app.utils.prices import PriceOracle
from app.utils.transfers import SimulatedTransferClient


async def get_current_user(user: User = Depends(current_active_user)) -> User:
    """
    The authenticated, active user.

    fastapi-users resolves the bearer token through ``get_async_session``,
    which FastAPI caches per request, so the user is attached to the same
    session the route works with.
    """
    return user


# Process-wide services are created at startup and stored on app.state
def get_price_oracle(request: Request) -> PriceOracle:
    return request.app.state.price_oracle


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_transfer_client(request: Request) -> SimulatedTransferClient:
    return request.app.state.transfer_client


def get_notifier(request: Request) -> NotificationSender:
    return request.app.state.notifier
