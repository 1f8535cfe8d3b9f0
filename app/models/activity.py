import enum
import uuid
from sqlalchemy import Column, Text, DateTime, Enum, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.time import utc_now


class ActivityType(str, enum.Enum):
    APPLICATION = "application"
    STAGE_CHANGE = "stage_change"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_CANCELLED = "interview_cancelled"
    FEEDBACK_SUBMITTED = "feedback_submitted"


class CandidateActivity(Base):
    """
    Timeline entry on a candidate (stage changes, interviews, ...).
    """
    __tablename__ = "candidate_activities"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    candidate_id = Column(Uuid(as_uuid=True), ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
    job_candidate_id = Column(
        Uuid(as_uuid=True), ForeignKey("job_candidates.id", ondelete="CASCADE"), nullable=True, index=True
    )

    activity_type = Column(Enum(ActivityType), nullable=False, index=True)
    description = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes, so the attribute is renamed
    activity_metadata = Column("metadata", JSON, nullable=True)

    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    candidate = relationship("Candidate", back_populates="activities")
