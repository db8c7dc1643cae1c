# app/utils/investments.py
"""
Deposit recording.

A deposit is an ONRAMP (reference currency arrives as USDC in the user's
wallet) followed by a SWAP of that USDC into the goal's coin, both sharing
one batch_id. Each step goes through ``ensure_idempotency`` so a retried
request returns the original transaction instead of moving money twice.
Only the SWAP changes the goal's invested amount.
"""
import logging
import math
import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import (
    BatchConflictError,
    GoalNotActiveError,
    GoalNotFoundError,
    InvalidAmountError,
    NotFoundError,
    OnrampMissingError,
    WalletInvalidError,
)
from app.core.auth import User, is_valid_wallet_address
from app.crud.goal import get_goal_by_id
from app.crud.transaction import get_transaction_by_batch
from app.models.goal import GoalStatus
from app.models.transaction import Provider, Transaction, TransactionState, TransactionType
from app.utils.goals import apply_auto_completion, calculate_progress
from app.utils.idempotency import AlreadyExisted, IdempotencyResult, ensure_idempotency, generate_batch_id
from app.utils.notifications import (
    NotificationSender,
    notify_goal_completed,
    notify_onramp_confirmed,
    notify_swap_confirmed,
)
from app.utils.prices import PriceOracle
from app.utils.tokens import USDC_MINT, get_token_info
from app.utils.transfers import SimulatedTransferClient, generate_signature

logger = logging.getLogger(__name__)


def _check_batch_goal(result: IdempotencyResult, goal_id: uuid.UUID, batch_id: str) -> None:
    # A replayed batch must belong to the goal it is replayed against
    if isinstance(result, AlreadyExisted) and result.transaction.goal_id != goal_id:
        logger.warning(f"batch {batch_id} replayed against goal {goal_id}, recorded on {result.transaction.goal_id}")
        raise BatchConflictError(batch_id)


def _validate_deposit_amount(amount: float) -> float:
    if amount is None or not math.isfinite(amount) or amount < settings.MIN_DEPOSIT_AMOUNT:
        raise InvalidAmountError("amount", settings.MIN_DEPOSIT_AMOUNT)
    return float(amount)


async def record_onramp(
    db: AsyncSession,
    user: User,
    goal_id: uuid.UUID,
    amount: float,
    *,
    transfer_client: SimulatedTransferClient,
    notifier: Optional[NotificationSender] = None,
    batch_id: Optional[str] = None,
) -> IdempotencyResult:
    amount = _validate_deposit_amount(amount)
    batch_id = batch_id or generate_batch_id()
    # Captured up front: a lost insert race rolls the session back and expires loaded objects
    user_id = user.id
    wallet_address = user.wallet_address

    goal = await get_goal_by_id(goal_id, user_id, db)
    if goal is None:
        raise GoalNotFoundError()
    coin = goal.coin

    async def produce(txn: Transaction) -> None:
        if GoalStatus(goal.status) != GoalStatus.ACTIVE:
            raise GoalNotActiveError(GoalStatus(goal.status).value)
        if not is_valid_wallet_address(wallet_address):
            raise WalletInvalidError()

        usdc_amount = amount / settings.USD_TO_REFERENCE_RATE
        receipt = await transfer_client.transfer(wallet_address, usdc_amount)

        txn.provider = Provider.ONMETA
        txn.network = receipt.network
        txn.txn_hash = receipt.signature
        txn.amount_reference = amount
        txn.amount_crypto = usdc_amount
        txn.token_mint = USDC_MINT
        txn.meta = {
            "state": TransactionState.ONRAMP_CONFIRMED.value,
            "simulation": True,
            "currency": settings.REFERENCE_CURRENCY,
            "from_address": receipt.from_address,
            "to_address": receipt.to_address,
        }

    result = await ensure_idempotency(db, batch_id, TransactionType.ONRAMP, produce, goal_id=goal_id)
    _check_batch_goal(result, goal_id, batch_id)

    if result.created and notifier is not None:
        await notify_onramp_confirmed(notifier, user_id, coin, batch_id, amount, settings.REFERENCE_CURRENCY)
    return result


async def record_swap(
    db: AsyncSession,
    user: User,
    goal_id: uuid.UUID,
    batch_id: str,
    *,
    oracle: PriceOracle,
    notifier: Optional[NotificationSender] = None,
) -> IdempotencyResult:
    """
    Swap the onramped funds of ``batch_id`` into the goal's coin and add them
    to the goal. The goal row is locked for the increment and auto-completes
    once the target is reached.
    """
    user_id = user.id
    goal = await get_goal_by_id(goal_id, user_id, db)
    if goal is None:
        raise GoalNotFoundError()
    coin = goal.coin

    async def produce(txn: Transaction) -> None:
        locked = await get_goal_by_id(goal_id, user_id, db, for_update=True)
        if GoalStatus(locked.status) != GoalStatus.ACTIVE:
            raise GoalNotActiveError(GoalStatus(locked.status).value)

        onramp = await get_transaction_by_batch(db, batch_id, TransactionType.ONRAMP)
        if onramp is None or onramp.goal_id != goal_id:
            raise OnrampMissingError(batch_id)

        quote = await oracle.get_price(locked.coin)
        amount_crypto = onramp.amount_reference / quote.price

        locked.invested_amount = (locked.invested_amount or 0.0) + amount_crypto
        completed = apply_auto_completion(locked)
        progress = calculate_progress(locked.invested_amount, locked.target_amount)

        txn.provider = Provider.JUPITER
        txn.network = onramp.network
        txn.txn_hash = generate_signature()
        txn.amount_reference = onramp.amount_reference
        txn.amount_crypto = amount_crypto
        txn.token_mint = get_token_info(locked.coin).mint
        txn.meta = {
            "state": TransactionState.SWAP_CONFIRMED.value,
            "onramp_transaction_id": str(onramp.id),
            "input_mint": USDC_MINT,
            "price": quote.price,
            "price_stale": quote.stale,
            "invested_after": locked.invested_amount,
            "progress_percentage": progress,
            "goal_completed": completed,
        }
        if completed:
            logger.info(f"Goal {goal_id} completed at {locked.invested_amount} {locked.coin}")

    result = await ensure_idempotency(db, batch_id, TransactionType.SWAP, produce, goal_id=goal_id)
    _check_batch_goal(result, goal_id, batch_id)

    if result.created and notifier is not None:
        txn = result.transaction
        meta = txn.meta or {}
        await notify_swap_confirmed(notifier, user_id, coin, batch_id, txn.amount_crypto, meta.get("progress_percentage", 0.0))
        if meta.get("goal_completed"):
            await notify_goal_completed(notifier, user_id, goal_id, coin, meta.get("invested_after", 0.0))
    return result


def derive_batch_state(transactions: List[Transaction]) -> str:
    """Furthest state a batch has reached, from its recorded transactions."""
    types = {TransactionType(t.type) for t in transactions}
    if TransactionType.SWAP in types:
        return TransactionState.SWAP_CONFIRMED.value
    if TransactionType.ONRAMP in types:
        return TransactionState.ONRAMP_CONFIRMED.value
    raise NotFoundError("Investment batch not found")
