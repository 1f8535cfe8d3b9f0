"""
JobCandidate (application) and StageHistory models.

A JobCandidate is one candidate's application to one job and is the unit that
moves through pipeline stages. StageHistory is the append-only log of stage
visits for an application:

    Applied    entered 09:00  exited 11:30   <- closed when the next entry opens
    Screening  entered 11:30  exited NULL    <- the single open row

At most one row per application has exited_at = NULL.
"""

import uuid
from sqlalchemy import Column, String, Float, Text, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.time import utc_now


class JobCandidate(Base):
    __tablename__ = "job_candidates"
    __table_args__ = (
        UniqueConstraint("job_id", "candidate_id", name="uq_job_candidates_job_candidate"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    candidate_id = Column(Uuid(as_uuid=True), ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False, index=True)
    current_stage_id = Column(Uuid(as_uuid=True), ForeignKey("pipeline_stages.id"), nullable=False, index=True)

    applied_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Relationships
    job = relationship("Job", back_populates="job_candidates")
    candidate = relationship("Candidate", back_populates="applications")
    current_stage = relationship("PipelineStage")
    stage_history = relationship(
        "StageHistory",
        back_populates="job_candidate",
        order_by="StageHistory.entered_at",
        cascade="all, delete-orphan",
    )
    interviews = relationship("Interview", back_populates="job_candidate", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<JobCandidate(id={self.id}, job_id={self.job_id}, stage={self.current_stage_id})>"


class StageHistory(Base):
    __tablename__ = "stage_history"
    __table_args__ = (
        Index("ix_stage_history_open", "job_candidate_id", "exited_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    job_candidate_id = Column(
        Uuid(as_uuid=True), ForeignKey("job_candidates.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # stage_name is a snapshot so history survives stage renames and deletes
    stage_id = Column(Uuid(as_uuid=True), ForeignKey("pipeline_stages.id", ondelete="SET NULL"), nullable=True)
    stage_name = Column(String, nullable=False)

    entered_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    exited_at = Column(DateTime(timezone=True), nullable=True)
    duration_hours = Column(Float, nullable=True)

    comment = Column(Text, nullable=True)
    moved_by = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)

    # Relationships
    job_candidate = relationship("JobCandidate", back_populates="stage_history")
    mover = relationship("User")

    @property
    def moved_by_name(self):
        return self.mover.name if self.mover else None

    def __repr__(self):
        return f"<StageHistory(job_candidate_id={self.job_candidate_id}, stage='{self.stage_name}', open={self.exited_at is None})>"
