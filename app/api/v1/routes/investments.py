# app/api/v1/routes/investments.py
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_notifier, get_price_oracle, get_rate_limiter, get_transfer_client
from app.core.auth import User
from app.core.config import settings
from app.core.database import get_async_session
from app.core.errors import NotFoundError
from app.core.rate_limit import RateLimiter
from app.crud.transaction import get_batch_transactions_for_user
from app.schemas.transaction import (
    DepositResponse,
    InvestmentStatusResponse,
    OnrampRequest,
    SwapRequest,
    TransactionRead,
)
from app.utils.idempotency import IdempotencyResult
from app.utils.investments import derive_batch_state, record_onramp, record_swap
from app.utils.notifications import NotificationSender
from app.utils.prices import PriceOracle
from app.utils.tokens import explorer_url
from app.utils.transfers import SimulatedTransferClient

router = APIRouter(tags=["investments"])
logger = logging.getLogger(__name__)

REPLAY_HEADER = "Idempotent-Replayed"


def deposit_response(result: IdempotencyResult) -> JSONResponse:
    """
    Created -> 201; replay -> 200 with the replay header. The body is built
    from the stored row only, so a replay returns exactly the original body.
    """
    txn = result.transaction
    network = txn.network.value if txn.network else settings.SOLANA_NETWORK
    body = DepositResponse(
        batch_id=txn.batch_id,
        transaction=TransactionRead.model_validate(txn),
        explorer_url=explorer_url(txn.txn_hash, network),
    )
    if result.created:
        return JSONResponse(status_code=status.HTTP_201_CREATED, content=body.model_dump(mode="json"))
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=body.model_dump(mode="json"),
        headers={REPLAY_HEADER: "true"},
    )


@router.post(
    "/onramp/simulate",
    response_model=DepositResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": DepositResponse, "description": "Replay of an already recorded batch"}},
)
async def simulate_onramp(
    payload: OnrampRequest,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
    transfer_client: SimulatedTransferClient = Depends(get_transfer_client),
    notifier: NotificationSender = Depends(get_notifier),
):
    """
    Simulate fiat arriving in the user's wallet as USDC.

    - **batch_id**: idempotency key; send the same value when retrying. One is
      generated when omitted.
    """
    limiter.check(user.id)
    result = await record_onramp(
        db,
        user,
        payload.goal_id,
        payload.amount,
        transfer_client=transfer_client,
        notifier=notifier,
        batch_id=payload.batch_id,
    )
    return deposit_response(result)


@router.post(
    "/swap/execute",
    response_model=DepositResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": DepositResponse, "description": "Replay of an already recorded batch"}},
)
async def execute_swap(
    payload: SwapRequest,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
    oracle: PriceOracle = Depends(get_price_oracle),
    notifier: NotificationSender = Depends(get_notifier),
):
    """Swap an onramped batch into the goal's coin and add it to the goal's invested amount."""
    limiter.check(user.id)
    result = await record_swap(db, user, payload.goal_id, payload.batch_id, oracle=oracle, notifier=notifier)
    return deposit_response(result)


@router.get("/investments/{batch_id}/status", response_model=InvestmentStatusResponse)
async def get_investment_status(
    batch_id: str,
    db: AsyncSession = Depends(get_async_session),
    user: User = Depends(get_current_user),
):
    transactions = await get_batch_transactions_for_user(batch_id, user.id, db)
    if not transactions:
        raise NotFoundError("Investment batch not found")
    return InvestmentStatusResponse(
        batch_id=batch_id,
        goal_id=transactions[0].goal_id,
        state=derive_batch_state(transactions),
        transactions=[TransactionRead.model_validate(t) for t in transactions],
    )
