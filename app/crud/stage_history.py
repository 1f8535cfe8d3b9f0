"""
CRUD operations for StageHistory rows.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session, joinedload
from app.models.job_candidate import JobCandidate, StageHistory


def create_entry(
    db: Session,
    job_candidate_id: UUID,
    stage_id: UUID,
    stage_name: str,
    entered_at: datetime,
    comment: Optional[str] = None,
    moved_by: Optional[UUID] = None
) -> StageHistory:
    entry = StageHistory(
        job_candidate_id=job_candidate_id,
        stage_id=stage_id,
        stage_name=stage_name,
        entered_at=entered_at,
        comment=comment,
        moved_by=moved_by,
    )
    db.add(entry)
    db.flush()
    return entry


def get_open_entries(db: Session, job_candidate_id: UUID) -> List[StageHistory]:
    """Rows with exited_at IS NULL, newest first. Normally zero or one."""
    return db.query(StageHistory).filter(
        StageHistory.job_candidate_id == job_candidate_id,
        StageHistory.exited_at.is_(None)
    ).order_by(StageHistory.entered_at.desc()).all()


def get_open_entries_for_applications(db: Session, job_candidate_ids: List[UUID]) -> List[StageHistory]:
    if not job_candidate_ids:
        return []
    return db.query(StageHistory).filter(
        StageHistory.job_candidate_id.in_(job_candidate_ids),
        StageHistory.exited_at.is_(None)
    ).all()


def get_for_application(db: Session, job_candidate_id: UUID) -> List[StageHistory]:
    return db.query(StageHistory).options(joinedload(StageHistory.mover)).filter(
        StageHistory.job_candidate_id == job_candidate_id
    ).order_by(StageHistory.entered_at.asc()).all()


def get_for_candidate(db: Session, candidate_id: UUID) -> List[StageHistory]:
    return db.query(StageHistory).join(
        JobCandidate, StageHistory.job_candidate_id == JobCandidate.id
    ).options(joinedload(StageHistory.mover)).filter(
        JobCandidate.candidate_id == candidate_id
    ).order_by(StageHistory.entered_at.desc()).all()
