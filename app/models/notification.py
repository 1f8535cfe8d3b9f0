import enum
import uuid
from sqlalchemy import Column, String, Boolean, Text, DateTime, Enum, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.time import utc_now


class NotificationType(str, enum.Enum):
    STAGE_CHANGE = "stage_change"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_CANCELLED = "interview_cancelled"
    FEEDBACK_PENDING = "feedback_pending"
    SLA_BREACH = "sla_breach"


class Notification(Base):
    """
    One in-app notification for one recipient user.
    """
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_unread", "user_id", "is_read"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(Enum(NotificationType), nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)

    # What the notification points at, e.g. ("candidate", <uuid>)
    entity_type = Column(String, nullable=True)
    entity_id = Column(String, nullable=True)

    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)

    user = relationship("User", back_populates="notifications")

    def __repr__(self):
        return f"<Notification(id={self.id}, user_id={self.user_id}, type={self.type.value}, read={self.is_read})>"
