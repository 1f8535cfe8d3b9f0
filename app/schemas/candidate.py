"""
Pydantic schemas for Candidate, application and activity API requests/responses.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import EmailStr, Field
from app.models.activity import ActivityType
from app.schemas.base import CamelModel, UTCDateTime
from app.schemas.job import PipelineStageResponse


class CandidateBase(CamelModel):
    """Base candidate schema with common fields."""
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = None
    location: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    experience_years: int = Field(0, ge=0)
    current_company: Optional[str] = None
    summary: Optional[str] = None
    resume_url: Optional[str] = Field(None, description="Reference to the stored resume file")
    source: Optional[str] = None


class CandidateCreateRequest(CandidateBase):
    pass


class CandidateResponse(CandidateBase):
    id: UUID
    company_id: UUID
    # Stored values are returned as-is, even if they predate validation
    email: str
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None


class ApplicationCreateRequest(CamelModel):
    candidate_id: UUID


class JobCandidateResponse(CamelModel):
    """One candidate's application to one job."""
    id: UUID
    job_id: UUID
    candidate_id: UUID
    current_stage_id: UUID
    current_stage: Optional[PipelineStageResponse] = None
    applied_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None


class ActivityResponse(CamelModel):
    id: UUID
    candidate_id: UUID
    job_candidate_id: Optional[UUID] = None
    activity_type: ActivityType
    description: str
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="activity_metadata")
    created_by: Optional[UUID] = None
    created_at: UTCDateTime
