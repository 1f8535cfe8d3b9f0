"""
Candidate profiles and their timelines.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.crud import candidate as candidate_crud
from app.models.activity import ActivityType, CandidateActivity
from app.models.candidate import Candidate
from app.models.job_candidate import StageHistory
from app.services import stage_history

logger = logging.getLogger(__name__)


def create_candidate(db: Session, company_id: UUID, name: str, **fields) -> Candidate:
    if not name or not name.strip():
        raise ValidationError({"name": ["Name is required"]})

    candidate = candidate_crud.create(db, company_id=company_id, name=name.strip(), **fields)
    db.commit()
    db.refresh(candidate)

    logger.info(f"Created candidate {candidate.id}")
    return candidate


def get_candidate(db: Session, candidate_id: UUID, company_id: UUID) -> Candidate:
    candidate = candidate_crud.get_for_company(db, candidate_id, company_id)
    if candidate is None:
        raise NotFoundError("Candidate")
    return candidate


def get_activities(
    db: Session,
    candidate_id: UUID,
    company_id: UUID,
    activity_type: Optional[ActivityType] = None
) -> List[CandidateActivity]:
    get_candidate(db, candidate_id, company_id)
    return candidate_crud.get_activities(db, candidate_id, activity_type=activity_type)


def get_stage_history(db: Session, candidate_id: UUID, company_id: UUID) -> List[StageHistory]:
    """Stage visits across all of the candidate's applications, newest first."""
    get_candidate(db, candidate_id, company_id)
    return stage_history.get_history_for_candidate(db, candidate_id)
