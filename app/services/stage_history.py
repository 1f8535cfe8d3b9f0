"""
Stage history recorder.

Append/close operations on StageHistory used by the stage transition service,
plus the read side (timeline per application or per candidate). Writes only
flush; they run inside the caller's transaction.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.crud import candidate as candidate_crud
from app.crud import stage_history as history_crud
from app.models.job import PipelineStage
from app.models.job_candidate import JobCandidate, StageHistory
from app.utils.time import as_utc, hours_between, utc_now

logger = logging.getLogger(__name__)


def close_open_entries(db: Session, job_candidate_id: UUID, exited_at: Optional[datetime] = None) -> List[StageHistory]:
    """
    Close every open row of the application, setting exited_at and
    duration_hours. A first stage entry has nothing to close.
    """
    exited_at = exited_at or utc_now()
    closed = history_crud.get_open_entries(db, job_candidate_id)
    for entry in closed:
        entry.exited_at = exited_at
        entry.duration_hours = hours_between(entry.entered_at, exited_at)

    if len(closed) > 1:
        logger.warning(f"Job candidate {job_candidate_id} had {len(closed)} open stage entries; closed all")

    db.flush()
    return closed


def open_entry(
    db: Session,
    job_candidate_id: UUID,
    stage: PipelineStage,
    comment: Optional[str] = None,
    moved_by: Optional[UUID] = None,
    entered_at: Optional[datetime] = None
) -> StageHistory:
    return history_crud.create_entry(
        db,
        job_candidate_id=job_candidate_id,
        stage_id=stage.id,
        stage_name=stage.name,
        entered_at=entered_at or utc_now(),
        comment=comment,
        moved_by=moved_by,
    )


def record_transition(
    db: Session,
    job_candidate_id: UUID,
    stage: PipelineStage,
    comment: Optional[str] = None,
    moved_by: Optional[UUID] = None
) -> StageHistory:
    """
    Close the current row and open the next one with the same timestamp,
    keeping the single-open-row invariant.
    """
    now = utc_now()
    close_open_entries(db, job_candidate_id, exited_at=now)
    return open_entry(db, job_candidate_id, stage, comment=comment, moved_by=moved_by, entered_at=now)


def current_entry(db: Session, job_candidate_id: UUID) -> Optional[StageHistory]:
    entries = history_crud.get_open_entries(db, job_candidate_id)
    return entries[0] if entries else None


def stage_entered_at(job_candidate: JobCandidate, open_entry_row: Optional[StageHistory]) -> datetime:
    """Entry time of the current stage; applications without history fall back to applied_at."""
    if open_entry_row is not None:
        return as_utc(open_entry_row.entered_at)
    return as_utc(job_candidate.applied_at)


def get_history(db: Session, job_candidate_id: UUID, company_id: UUID) -> List[StageHistory]:
    """Stage visits of one application, oldest first."""
    if candidate_crud.get_application_for_company(db, job_candidate_id, company_id) is None:
        raise NotFoundError("Job candidate")
    return history_crud.get_for_application(db, job_candidate_id)


def get_history_for_candidate(db: Session, candidate_id: UUID) -> List[StageHistory]:
    return history_crud.get_for_candidate(db, candidate_id)
