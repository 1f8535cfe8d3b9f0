"""
Pydantic schemas for stage moves and stage history.
"""

from typing import List, Optional
from uuid import UUID
from pydantic import Field
from app.schemas.base import CamelModel, UTCDateTime
from app.schemas.candidate import ActivityResponse, JobCandidateResponse


class MoveRequest(CamelModel):
    """Single move of one application."""
    target_stage_id: UUID
    comment: Optional[str] = None
    moved_by: Optional[UUID] = Field(None, description="Must match the authenticated user when given")


class MoveResponse(CamelModel):
    job_candidate: JobCandidateResponse
    activity: Optional[ActivityResponse] = None


class BulkMoveRequest(CamelModel):
    """
    Move several applications of one job to the same stage.

    `candidateIds` are JobCandidate (application) ids.
    """
    candidate_ids: List[UUID]
    target_stage_id: UUID
    job_id: UUID
    comment: Optional[str] = None
    moved_by: Optional[UUID] = Field(None, description="Must match the authenticated user when given")


class BulkMoveFailureResponse(CamelModel):
    candidate_id: UUID
    candidate_name: Optional[str] = None
    error: str


class BulkMoveResponse(CamelModel):
    success: bool
    moved_count: int
    failed_count: int
    failures: List[BulkMoveFailureResponse] = Field(default_factory=list)


class StageHistoryResponse(CamelModel):
    id: UUID
    job_candidate_id: UUID
    stage_id: Optional[UUID] = None
    stage_name: str
    entered_at: UTCDateTime
    exited_at: Optional[UTCDateTime] = None
    duration_hours: Optional[float] = None
    comment: Optional[str] = None
    moved_by: Optional[UUID] = None
    moved_by_name: Optional[str] = None
