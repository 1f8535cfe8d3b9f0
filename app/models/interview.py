"""
Interview models.

An Interview is scheduled for a JobCandidate with one or more panel members.
Each panel member may submit one feedback record; once every panel member has
submitted, the interview is completed.

    scheduled -> in_progress -> completed
        |            |
        +-> cancelled / no_show
"""

import enum
import uuid
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.time import utc_now


class InterviewStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class InterviewMode(str, enum.Enum):
    GOOGLE_MEET = "google_meet"
    MICROSOFT_TEAMS = "microsoft_teams"
    IN_PERSON = "in_person"
    CUSTOM_URL = "custom_url"
    PHONE = "phone"


class Recommendation(str, enum.Enum):
    STRONG_HIRE = "strong_hire"
    HIRE = "hire"
    NO_HIRE = "no_hire"
    STRONG_NO_HIRE = "strong_no_hire"


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    job_candidate_id = Column(
        Uuid(as_uuid=True), ForeignKey("job_candidates.id", ondelete="CASCADE"), nullable=False, index=True
    )

    scheduled_at = Column(DateTime(timezone=True), nullable=False, index=True)
    duration = Column(Integer, nullable=False)  # minutes
    timezone = Column(String, nullable=False)
    mode = Column(Enum(InterviewMode), nullable=False)
    location = Column(String, nullable=True)  # room for in_person, URL for custom_url
    meeting_link = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    status = Column(Enum(InterviewStatus), default=InterviewStatus.SCHEDULED, nullable=False, index=True)
    cancel_reason = Column(Text, nullable=True)

    scheduled_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    job_candidate = relationship("JobCandidate", back_populates="interviews")
    scheduler = relationship("User")
    panel_members = relationship("InterviewPanelMember", back_populates="interview", cascade="all, delete-orphan")
    feedback = relationship("InterviewFeedback", back_populates="interview", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Interview(id={self.id}, status={self.status.value}, at={self.scheduled_at})>"


class InterviewPanelMember(Base):
    __tablename__ = "interview_panel_members"
    __table_args__ = (
        UniqueConstraint("interview_id", "user_id", name="uq_interview_panel_member"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    interview_id = Column(Uuid(as_uuid=True), ForeignKey("interviews.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    interview = relationship("Interview", back_populates="panel_members")
    user = relationship("User")


class InterviewFeedback(Base):
    __tablename__ = "interview_feedback"
    __table_args__ = (
        UniqueConstraint("interview_id", "panel_member_id", name="uq_interview_feedback_member"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    interview_id = Column(Uuid(as_uuid=True), ForeignKey("interviews.id", ondelete="CASCADE"), nullable=False, index=True)
    panel_member_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)

    rating = Column(Integer, nullable=False)  # 1..5
    recommendation = Column(Enum(Recommendation), nullable=False)
    comments = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    interview = relationship("Interview", back_populates="feedback")
    panel_member = relationship("User")
