# app/utils/notifications.py
from typing import Any, Dict, Optional
import uuid
import logging

from app.core.database import AsyncSessionLocal
from app.crud.notification import create_notification
from app.models.notification import Notification
from app.schemas.notification import NotificationCreate

logger = logging.getLogger(__name__)


class NotificationSender:
    """
    Persists notifications in their own session.

    Sending is best effort: failures are logged and ``None`` is returned, so
    a broken notification never undoes a recorded deposit.
    """

    def __init__(self, session_factory=AsyncSessionLocal):
        self.session_factory = session_factory

    async def send(
        self,
        user_id: uuid.UUID,
        event_type: str,
        title: str,
        message: str,
        meta: Optional[Dict[str, Any]] = None,
    ) -> Optional[Notification]:
        try:
            async with self.session_factory() as db:
                notification = await create_notification(db, NotificationCreate(
                    user_id=user_id,
                    title=title,
                    message=message,
                    type=event_type,
                    meta=meta,
                ))
            logger.info(f"Notification {event_type} created for user {user_id}")
            return notification
        except Exception as e:
            logger.error(f"Failed to send {event_type} notification to user {user_id}: {e}")
            return None


async def notify_onramp_confirmed(sender: NotificationSender, user_id: uuid.UUID, coin: str, batch_id: str, amount: float, currency: str) -> None:
    await sender.send(
        user_id,
        "ONRAMP_CONFIRMED",
        "Funds received",
        f"Funds received: {amount:g} {currency}. Ready to swap to {coin}.",
        {"batch_id": batch_id, "amount": amount},
    )


async def notify_swap_confirmed(sender: NotificationSender, user_id: uuid.UUID, coin: str, batch_id: str, amount_crypto: float, progress: float) -> None:
    await sender.send(
        user_id,
        "SWAP_CONFIRMED",
        "Swap confirmed",
        f"Success! +{amount_crypto:.8f} {coin} added to your goal. Progress: {progress:.1f}%.",
        {"batch_id": batch_id, "amount_crypto": amount_crypto, "progress_percentage": progress},
    )


async def notify_goal_completed(sender: NotificationSender, user_id: uuid.UUID, goal_id: uuid.UUID, coin: str, invested: float) -> None:
    await sender.send(
        user_id,
        "GOAL_COMPLETED",
        "Goal reached!",
        f"Congratulations! You now hold {invested:g} {coin} and reached your goal.",
        {"goal_id": str(goal_id), "invested_amount": invested},
    )
