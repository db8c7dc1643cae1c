import os
import tempfile

# Settings are read at import time, so the environment is prepared first
_DB_DIR = tempfile.mkdtemp(prefix="wholecoin-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PRICE_SOURCE"] = "mock"

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.main import app
from app.api import deps
from app.core.auth import User
from app.core.cache import TTLStore
from app.core.database import AsyncSessionLocal, Base, engine, get_async_session
from app.core.rate_limit import RateLimiter
from app.crud.goal import create_goal_for_user
from app.models.goal import Frequency
from app.models.transaction import Network
from app.utils.notifications import NotificationSender
from app.utils.prices import MockPriceSource, PriceOracle
from app.utils.transfers import SimulatedTransferClient

WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"

# Prices in the reference currency: the FX rate is 1 so quotes equal these
TEST_PRICES = {"BTC": 60000.0, "ETH": 3000.0, "SOL": 150.0}


@pytest.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session():
    async with AsyncSessionLocal() as session:
        yield session


async def make_user(email: str = "saver@example.com", wallet_address=WALLET) -> User:
    async with AsyncSessionLocal() as session:
        user = User(email=email, hashed_password="not-a-real-hash", wallet_address=wallet_address)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


async def make_goal(user: User, coin="BTC", target=1.0, contribution=500.0, frequency=Frequency.MONTHLY):
    async with AsyncSessionLocal() as session:
        return await create_goal_for_user(user.id, coin, target, contribution, frequency, session)


@pytest.fixture
async def user() -> User:
    return await make_user()


@pytest.fixture
async def other_user() -> User:
    return await make_user("other@example.com")


@pytest.fixture
def oracle() -> PriceOracle:
    return PriceOracle(MockPriceSource(TEST_PRICES), TTLStore(300), usd_to_reference_rate=1.0)


@pytest.fixture
def transfer_client() -> SimulatedTransferClient:
    return SimulatedTransferClient(balance=1_000_000.0, network=Network.DEVNET, timeout_seconds=5)


@pytest.fixture
def notifier() -> NotificationSender:
    return NotificationSender()


@pytest.fixture
def rate_limiter() -> RateLimiter:
    return RateLimiter(max_requests=5, window_seconds=60)


@pytest.fixture
def services(oracle, transfer_client, notifier, rate_limiter):
    saved = dict(app.state._state)
    app.state.price_oracle = oracle
    app.state.transfer_client = transfer_client
    app.state.notifier = notifier
    app.state.rate_limiter = rate_limiter
    yield app.state
    app.state._state.clear()
    app.state._state.update(saved)


@pytest.fixture
async def anon_client(services):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def client(services, user):
    """Client authenticated as ``user``; the user is loaded in the request's own session."""
    user_id = user.id

    async def current_user(db: AsyncSession = Depends(get_async_session)) -> User:
        return await db.get(User, user_id)

    app.dependency_overrides[deps.get_current_user] = current_user
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(deps.get_current_user, None)


@pytest.fixture
def goal_factory(user):
    async def factory(owner: User = None, **kwargs):
        return await make_goal(owner or user, **kwargs)
    return factory


@pytest.fixture
def user_factory():
    return make_user
