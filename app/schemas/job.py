"""
Pydantic schemas for Job and PipelineStage API requests/responses.
"""

from typing import List, Optional
from uuid import UUID
from pydantic import Field
from app.models.job import JobStatus
from app.schemas.base import CamelModel, UTCDateTime


class PipelineStageResponse(CamelModel):
    id: UUID
    job_id: UUID
    name: str
    position: int
    is_default: bool
    is_mandatory: bool


class JobCreateRequest(CamelModel):
    """Schema for creating a new job. Omit `stages` to get the default pipeline."""
    title: str = Field(..., min_length=1, max_length=200)
    department: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    openings: int = Field(1, ge=1)
    status: JobStatus = JobStatus.ACTIVE
    assigned_recruiter_id: Optional[UUID] = None
    stages: Optional[List[str]] = Field(None, description="Custom stage names in pipeline order")


class JobResponse(CamelModel):
    id: UUID
    company_id: UUID
    title: str
    department: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    openings: int
    status: JobStatus
    assigned_recruiter_id: Optional[UUID] = None
    stages: List[PipelineStageResponse]
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None


class StageCreateRequest(CamelModel):
    name: str
    position: int


class StageReorderRequest(CamelModel):
    new_position: int
