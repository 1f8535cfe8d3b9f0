"""
Job requisitions and candidate applications.
"""

import logging
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.crud import candidate as candidate_crud
from app.crud import job as job_crud
from app.crud import notification as notification_crud
from app.models.activity import ActivityType
from app.models.job import Job, JobStatus
from app.models.job_candidate import JobCandidate
from app.services import stage_history

logger = logging.getLogger(__name__)

DEFAULT_STAGES = ["Applied", "Screening", "Interview", "Offer", "Hired", "Rejected"]
MANDATORY_STAGES = ["Interview"]


def create_job(
    db: Session,
    company_id: UUID,
    title: str,
    stage_names: Optional[Sequence[str]] = None,
    assigned_recruiter_id: Optional[UUID] = None,
    **fields
) -> Job:
    """
    Create a job with the default pipeline, or with `stage_names` in the
    given order when supplied.
    """
    errors = {}
    if not title or not title.strip():
        errors["title"] = ["Title is required"]

    if stage_names:
        cleaned = [name.strip() for name in stage_names]
        if any(not name for name in cleaned):
            errors["stages"] = ["Stage names cannot be blank"]
        elif len({name.lower() for name in cleaned}) != len(cleaned):
            errors["stages"] = ["Stage names must be unique"]
    else:
        cleaned = None

    if assigned_recruiter_id is not None:
        recruiter = notification_crud.get_user(db, assigned_recruiter_id)
        if recruiter is None or recruiter.company_id != company_id:
            errors["assignedRecruiterId"] = ["Recruiter must be a user of the same company"]

    if errors:
        raise ValidationError(errors)

    job = job_crud.create(
        db,
        company_id=company_id,
        title=title.strip(),
        stage_names=cleaned or DEFAULT_STAGES,
        default_stages=cleaned is None,
        mandatory_stage_names=MANDATORY_STAGES if cleaned is None else (),
        assigned_recruiter_id=assigned_recruiter_id,
        **fields,
    )
    db.commit()
    db.refresh(job)

    logger.info(f"Created job {job.id}: {job.title} with {len(job.stages)} stages")
    return job


def get_job(db: Session, job_id: UUID, company_id: UUID) -> Job:
    job = job_crud.get_for_company(db, job_id, company_id)
    if job is None:
        raise NotFoundError("Job")
    return job


def list_jobs(
    db: Session,
    company_id: UUID,
    skip: int = 0,
    limit: int = 100,
    status: Optional[JobStatus] = None
) -> List[Job]:
    return job_crud.get_multi(db, company_id, skip=skip, limit=limit, status=status)


def apply_candidate(db: Session, job_id: UUID, candidate_id: UUID, company_id: UUID, applied_by: UUID) -> JobCandidate:
    """
    Put a candidate into the first stage of a job's pipeline.

    Opens the first StageHistory row and records an application activity.

    Raises:
        NotFoundError: Job or candidate missing in this company
        ValidationError: Already applied, or the job has no stages
    """
    job = get_job(db, job_id, company_id)
    candidate = candidate_crud.get_for_company(db, candidate_id, company_id)
    if candidate is None:
        raise NotFoundError("Candidate")

    if candidate_crud.find_application(db, job_id, candidate_id) is not None:
        raise ValidationError({"candidateId": ["Candidate has already applied to this job"]})

    stages = job_crud.get_stages(db, job_id)
    if not stages:
        raise ValidationError({"jobId": ["Job has no pipeline stages"]})
    first_stage = stages[0]

    try:
        job_candidate = candidate_crud.create_application(db, job_id, candidate_id, first_stage.id)
        stage_history.open_entry(
            db, job_candidate.id, first_stage, moved_by=applied_by, entered_at=job_candidate.applied_at
        )
        candidate_crud.create_activity(
            db,
            candidate_id=candidate_id,
            activity_type=ActivityType.APPLICATION,
            description=f"Applied to {job.title}",
            job_candidate_id=job_candidate.id,
            metadata={"jobId": str(job_id), "stageId": str(first_stage.id), "stageName": first_stage.name},
            created_by=applied_by,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(job_candidate)
    logger.info(f"Candidate {candidate_id} applied to job {job_id} in stage '{first_stage.name}'")
    return job_candidate
