import enum
import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.time import utc_now


class JobStatus(str, enum.Enum):
    """
    Requisition status.

    Only ACTIVE jobs take part in SLA evaluation.
    """
    DRAFT = "draft"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    CLOSED = "closed"


class Job(Base):
    """
    A requisition owned by a company, with its own ordered pipeline of stages.
    """
    __tablename__ = "jobs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), nullable=False, index=True)

    title = Column(String, nullable=False, index=True)
    department = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    openings = Column(Integer, nullable=False, default=1)

    status = Column(Enum(JobStatus), default=JobStatus.ACTIVE, nullable=False, index=True)
    assigned_recruiter_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=utc_now)

    # Relationships
    company = relationship("Company", back_populates="jobs")
    assigned_recruiter = relationship("User")
    stages = relationship(
        "PipelineStage",
        back_populates="job",
        order_by="PipelineStage.position",
        cascade="all, delete-orphan",
    )
    job_candidates = relationship("JobCandidate", back_populates="job", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', status={self.status.value})>"


class PipelineStage(Base):
    """
    A named step in a job's hiring funnel.

    Stages are not a fixed state machine: a candidate may move from any stage
    of a job to any other stage of the same job. "Hired" and "Rejected" are
    terminal by convention only.
    """
    __tablename__ = "pipeline_stages"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    position = Column(Integer, nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    is_mandatory = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    job = relationship("Job", back_populates="stages")

    def __repr__(self):
        return f"<PipelineStage(id={self.id}, name='{self.name}', position={self.position})>"
