import uuid
from datetime import datetime, timedelta

from app.models.transaction import Transaction, TransactionType
from app.utils.history import group_by_batch

START = datetime(2026, 1, 1, 12, 0, 0)
GOAL_ID = uuid.uuid4()


def txn(batch_id, txn_type, minutes):
    return Transaction(
        id=uuid.uuid4(),
        goal_id=GOAL_ID,
        batch_id=batch_id,
        type=txn_type,
        timestamp=START + timedelta(minutes=minutes),
    )


class TestGroupByBatch:
    def test_pairs_legs(self):
        onramp = txn("a", TransactionType.ONRAMP, 0)
        swap = txn("a", TransactionType.SWAP, 1)

        [batch] = group_by_batch([(swap, "BTC"), (onramp, "BTC")])

        assert batch.onramp is onramp
        assert batch.swap is swap
        assert batch.coin == "BTC"
        assert batch.state == "SWAP_CONFIRMED"
        assert batch.timestamp == swap.timestamp

    def test_newest_batch_first(self):
        rows = [
            (txn("old", TransactionType.ONRAMP, 0), "ETH"),
            (txn("new", TransactionType.ONRAMP, 10), "SOL"),
            (txn("old", TransactionType.SWAP, 20), "ETH"),
        ]

        batches = group_by_batch(rows)

        # "old" was swapped last, so its latest leg makes it the newest batch
        assert [b.batch_id for b in batches] == ["old", "new"]
        assert batches[1].state == "ONRAMP_CONFIRMED"
        assert batches[1].swap is None

    def test_empty(self):
        assert group_by_batch([]) == []
