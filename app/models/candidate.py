"""
Candidate database model.

A person profile owned by a company. Candidates are never hard-deleted in the
normal flow; their state lives in the pipeline stage of each application.
"""

import uuid
from sqlalchemy import Column, Integer, String, ForeignKey, Text, DateTime, JSON, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.time import utc_now


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id"), nullable=False, index=True)

    # Profile
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=True)
    location = Column(String, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    experience_years = Column(Integer, nullable=False, default=0)
    current_company = Column(String, nullable=True)
    summary = Column(Text, nullable=True)

    # Resume is stored externally; this is the object key / URL
    resume_url = Column(String, nullable=True)
    source = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=utc_now)

    # Relationships
    applications = relationship("JobCandidate", back_populates="candidate", cascade="all, delete-orphan")
    activities = relationship("CandidateActivity", back_populates="candidate", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Candidate(id={self.id}, name='{self.name}')>"
