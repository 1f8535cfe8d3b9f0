import logging
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.activity import ActivityType
from app.models.user import User
from app.schemas.candidate import ActivityResponse, CandidateCreateRequest, CandidateResponse
from app.schemas.pipeline import StageHistoryResponse
from app.services import candidates

router = APIRouter(prefix="/candidates", tags=["Candidates"])
logger = logging.getLogger(__name__)


@router.post("", status_code=201, response_model=CandidateResponse)
def create_candidate(
    request: CandidateCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a candidate profile in the caller's company."""
    fields = request.model_dump(exclude={"name"})
    return candidates.create_candidate(db, current_user.company_id, request.name, **fields)


@router.get("/{candidate_id}", response_model=CandidateResponse)
def get_candidate(
    candidate_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return candidates.get_candidate(db, candidate_id, current_user.company_id)


@router.get("/{candidate_id}/activities", response_model=List[ActivityResponse])
def get_activities(
    candidate_id: UUID,
    activity_type: Optional[ActivityType] = Query(None, alias="type"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Activity timeline of a candidate, newest first."""
    return candidates.get_activities(db, candidate_id, current_user.company_id, activity_type=activity_type)


@router.get("/{candidate_id}/stage-history", response_model=List[StageHistoryResponse])
def get_stage_history(
    candidate_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Stage visits across all of the candidate's applications, newest first."""
    return candidates.get_stage_history(db, candidate_id, current_user.company_id)
