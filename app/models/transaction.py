# app/models/transaction.py
import enum
import uuid
from sqlalchemy import Column, String, ForeignKey, Float, DateTime, Enum, JSON, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.goal import utc_now


class TransactionType(str, enum.Enum):
    ONRAMP = "ONRAMP"
    SWAP = "SWAP"


class Provider(str, enum.Enum):
    ONMETA = "ONMETA"
    JUPITER = "JUPITER"


class Network(str, enum.Enum):
    DEVNET = "DEVNET"
    MAINNET = "MAINNET"


class TransactionState(str, enum.Enum):
    PENDING = "PENDING"
    ONRAMP_CONFIRMED = "ONRAMP_CONFIRMED"
    SWAP_CONFIRMED = "SWAP_CONFIRMED"


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    goal_id = Column(Uuid(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False, index=True)
    batch_id = Column(String(length=64), nullable=False, index=True)
    type = Column(Enum(TransactionType, name="transaction_type"), nullable=False)
    # Filled in by the recording operation, empty while the row is only a claim
    provider = Column(Enum(Provider, name="provider"), nullable=True)
    network = Column(Enum(Network, name="network"), nullable=True)
    txn_hash = Column(String, nullable=True)
    amount_reference = Column(Float, nullable=True)
    amount_crypto = Column(Float, nullable=True)
    token_mint = Column(String, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    meta = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)

    goal = relationship("Goal", back_populates="transactions")

    __table_args__ = (
        UniqueConstraint("batch_id", "type", name="uq_transactions_batch_id_type"),
    )

    @property
    def state(self):
        return (self.meta or {}).get("state")

    def __repr__(self):
        return f"<Transaction type={self.type} batch_id={self.batch_id} goal_id={self.goal_id}>"
