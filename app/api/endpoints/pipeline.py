import logging
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import ensure_same_user, get_current_user
from app.models.user import User
from app.schemas.candidate import ActivityResponse, JobCandidateResponse
from app.schemas.job import PipelineStageResponse, StageCreateRequest, StageReorderRequest
from app.schemas.pipeline import (
    BulkMoveFailureResponse,
    BulkMoveRequest,
    BulkMoveResponse,
    MoveRequest,
    MoveResponse,
    StageHistoryResponse,
)
from app.services import pipeline, pipeline_stages, stage_history

router = APIRouter(prefix="/pipeline", tags=["Pipeline"])
logger = logging.getLogger(__name__)


# -- Stages ------------------------------------------------------------------

@router.get("/jobs/{job_id}/stages", response_model=List[PipelineStageResponse])
def list_stages(
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the pipeline stages of a job, ordered by position."""
    return pipeline_stages.get_stages(db, job_id, current_user.company_id)


@router.post("/jobs/{job_id}/stages", status_code=201, response_model=PipelineStageResponse)
def insert_stage(
    job_id: UUID,
    request: StageCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Insert a custom stage at a position (0..number of stages).

    Stages at or after the position shift down by one.
    """
    return pipeline_stages.insert_stage(db, job_id, current_user.company_id, request.name, request.position)


@router.put("/stages/{stage_id}/position", response_model=List[PipelineStageResponse])
def reorder_stage(
    stage_id: UUID,
    request: StageReorderRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Move a stage to a new position and return the job's stages in order."""
    return pipeline_stages.reorder_stage(db, stage_id, current_user.company_id, request.new_position)


@router.delete("/stages/{stage_id}", status_code=204)
def delete_stage(
    stage_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a custom stage that no candidate currently occupies."""
    pipeline_stages.delete_stage(db, stage_id, current_user.company_id)
    return None


# -- Moves -------------------------------------------------------------------

@router.post("/applications/{job_candidate_id}/move", response_model=MoveResponse)
def move_candidate(
    job_candidate_id: UUID,
    request: MoveRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Move one application to another stage of its job.

    Any stage of the job may be targeted. Moving to a rejection stage needs a
    comment. Moving to the current stage is a no-op (`activity` is null).
    """
    moved_by = ensure_same_user(current_user, request.moved_by)
    result = pipeline.move_candidate(
        db,
        job_candidate_id=job_candidate_id,
        target_stage_id=request.target_stage_id,
        company_id=current_user.company_id,
        moved_by=moved_by,
        comment=request.comment,
    )
    return MoveResponse(
        job_candidate=JobCandidateResponse.model_validate(result.job_candidate),
        activity=ActivityResponse.model_validate(result.activity) if result.activity else None,
    )


@router.post("/move", response_model=BulkMoveResponse)
def bulk_move(
    request: BulkMoveRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Move several applications of a job to one stage.

    Each application is moved in its own transaction. Returns 200 when every
    application moved (or every one failed) and 207 when the batch is mixed.
    """
    moved_by = ensure_same_user(current_user, request.moved_by)
    result = pipeline.bulk_move(
        db,
        job_candidate_ids=request.candidate_ids,
        target_stage_id=request.target_stage_id,
        job_id=request.job_id,
        company_id=current_user.company_id,
        moved_by=moved_by,
        comment=request.comment,
    )
    response = BulkMoveResponse(
        success=result.success,
        moved_count=result.moved_count,
        failed_count=result.failed_count,
        failures=[
            BulkMoveFailureResponse(
                candidate_id=failure.candidate_id,
                candidate_name=failure.candidate_name,
                error=failure.error,
            )
            for failure in result.failures
        ],
    )

    status_code = 207 if result.is_partial else 200
    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json", by_alias=True))


# -- History -----------------------------------------------------------------

@router.get("/applications/{job_candidate_id}/history", response_model=List[StageHistoryResponse])
def get_stage_history(
    job_candidate_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Stage visits of one application, oldest first."""
    return stage_history.get_history(db, job_candidate_id, current_user.company_id)
