# app/models/goal.py
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Enum, Index, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Frequency(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class GoalStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"


class Goal(Base):
    __tablename__ = "goals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    coin = Column(String(length=10), nullable=False)
    # Coin units
    target_amount = Column(Float, nullable=False)
    invested_amount = Column(Float, nullable=False, default=0.0)
    # Reference currency per interval
    contribution_amount = Column(Float, nullable=False)
    frequency = Column(Enum(Frequency, name="frequency"), nullable=False)
    status = Column(Enum(GoalStatus, name="goal_status"), nullable=False, default=GoalStatus.ACTIVE)

    created_at = Column(DateTime(timezone=True), default=utc_now)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="goals")
    transactions = relationship("Transaction", back_populates="goal", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_goals_user_status", "user_id", "status"),
    )

    def __repr__(self):
        return f"<Goal coin={self.coin} target={self.target_amount} invested={self.invested_amount} status={self.status} user_id={self.user_id}>"
