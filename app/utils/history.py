# app/utils/history.py
"""
Deposit history grouped by batch.

A batch is one ONRAMP and, once swapped, one SWAP. History pages list
transactions newest first; ``group_by_batch`` folds them into one entry per
batch so the two legs of a deposit are shown together.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from app.models.transaction import Transaction, TransactionState, TransactionType


@dataclass
class BatchHistory:
    batch_id: str
    goal_id: uuid.UUID
    coin: str
    timestamp: datetime
    onramp: Optional[Transaction] = None
    swap: Optional[Transaction] = None

    @property
    def state(self) -> str:
        if self.swap is not None:
            return TransactionState.SWAP_CONFIRMED.value
        return TransactionState.ONRAMP_CONFIRMED.value


def group_by_batch(rows: Iterable[Tuple[Transaction, str]]) -> List[BatchHistory]:
    """
    Fold ``(transaction, coin)`` rows into batches, newest batch first.

    A batch's timestamp is that of its latest leg.
    """
    batches: Dict[str, BatchHistory] = {}
    for txn, coin in rows:
        batch = batches.get(txn.batch_id)
        if batch is None:
            batch = batches[txn.batch_id] = BatchHistory(
                batch_id=txn.batch_id,
                goal_id=txn.goal_id,
                coin=coin,
                timestamp=txn.timestamp,
            )

        if TransactionType(txn.type) == TransactionType.ONRAMP:
            batch.onramp = txn
        else:
            batch.swap = txn

        if txn.timestamp > batch.timestamp:
            batch.timestamp = txn.timestamp

    return sorted(batches.values(), key=lambda b: b.timestamp, reverse=True)
