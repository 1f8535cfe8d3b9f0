import logging
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.job import JobStatus
from app.models.user import User
from app.schemas.candidate import ApplicationCreateRequest, JobCandidateResponse
from app.schemas.job import JobCreateRequest, JobResponse
from app.services import jobs

router = APIRouter(prefix="/jobs", tags=["Jobs"])
logger = logging.getLogger(__name__)


@router.post("", status_code=201, response_model=JobResponse)
def create_job(
    request: JobCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a job in the caller's company.

    Without `stages` the job gets the default pipeline:
    Applied, Screening, Interview (mandatory), Offer, Hired, Rejected.
    """
    fields = request.model_dump(exclude={"title", "stages", "assigned_recruiter_id"})
    return jobs.create_job(
        db,
        company_id=current_user.company_id,
        title=request.title,
        stage_names=request.stages,
        assigned_recruiter_id=request.assigned_recruiter_id,
        **fields,
    )


@router.get("", response_model=List[JobResponse])
def list_jobs(
    skip: int = 0,
    limit: int = 100,
    status: Optional[JobStatus] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the company's jobs with pagination and optional status filtering.

    Args:
        skip: Number of records to skip (default: 0)
        limit: Maximum number of records to return (default: 100, max: 100)
        status: Optional filter (draft, active, on_hold, closed)
    """
    if limit > 100:
        limit = 100

    return jobs.list_jobs(db, current_user.company_id, skip=skip, limit=limit, status=status)


@router.get("/{job_id}", response_model=JobResponse)
def get_job(
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Retrieve a job and its pipeline stages."""
    return jobs.get_job(db, job_id, current_user.company_id)


@router.post("/{job_id}/applications", status_code=201, response_model=JobCandidateResponse)
def apply_candidate(
    job_id: UUID,
    request: ApplicationCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Apply a candidate to the job. The application starts in the first stage.
    """
    return jobs.apply_candidate(db, job_id, request.candidate_id, current_user.company_id, current_user.id)
