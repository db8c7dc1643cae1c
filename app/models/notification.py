import uuid
from sqlalchemy import Column, String, ForeignKey, Boolean, DateTime, JSON, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.goal import utc_now

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    type = Column(String, nullable=False)  # e.g. 'ONRAMP_CONFIRMED', 'GOAL_COMPLETED'
    meta = Column(JSON, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now)

    user = relationship("User", back_populates="notifications")
