"""
CRUD operations for Job and PipelineStage models.

Implements the Repository pattern to encapsulate all database operations
for jobs and their stages. Functions here add/flush only; the calling service
owns the transaction and decides when to commit.
"""

from typing import List, Optional, Sequence
from uuid import UUID
from sqlalchemy.orm import Session, selectinload
from app.models.job import Job, JobStatus, PipelineStage
from app.models.job_candidate import JobCandidate


def create(
    db: Session,
    company_id: UUID,
    title: str,
    stage_names: Sequence[str],
    default_stages: bool,
    mandatory_stage_names: Sequence[str] = (),
    **fields
) -> Job:
    """
    Create a job together with its ordered pipeline stages.

    Args:
        db: Database session
        company_id: Owning company
        title: Job title
        stage_names: Stage names in pipeline order (position 0 first)
        default_stages: Whether the stages come from the default template
        mandatory_stage_names: Names of stages flagged mandatory
        **fields: Remaining Job columns (department, description, ...)

    Returns:
        The new Job, flushed so ids are populated
    """
    db_job = Job(company_id=company_id, title=title, **fields)
    mandatory = {name.lower() for name in mandatory_stage_names}
    for position, name in enumerate(stage_names):
        db_job.stages.append(PipelineStage(
            name=name,
            position=position,
            is_default=default_stages,
            is_mandatory=name.lower() in mandatory,
        ))

    db.add(db_job)
    db.flush()
    return db_job


def get_for_company(db: Session, job_id: UUID, company_id: UUID) -> Optional[Job]:
    """
    Retrieve a job by id, scoped to the company.

    Returns None both when the job does not exist and when it belongs to
    another tenant.
    """
    return db.query(Job).options(selectinload(Job.stages)).filter(
        Job.id == job_id,
        Job.company_id == company_id
    ).first()


def get_multi(
    db: Session,
    company_id: UUID,
    skip: int = 0,
    limit: int = 100,
    status: Optional[JobStatus] = None
) -> List[Job]:
    query = db.query(Job).options(selectinload(Job.stages)).filter(Job.company_id == company_id)

    if status:
        query = query.filter(Job.status == status)

    return query.order_by(Job.created_at.desc()).offset(skip).limit(limit).all()


def get_active_for_company(db: Session, company_id: UUID) -> List[Job]:
    return db.query(Job).filter(
        Job.company_id == company_id,
        Job.status == JobStatus.ACTIVE
    ).all()


# -- Pipeline stages ---------------------------------------------------------

def get_stage(db: Session, stage_id: UUID) -> Optional[PipelineStage]:
    return db.query(PipelineStage).filter(PipelineStage.id == stage_id).first()


def get_stages(db: Session, job_id: UUID) -> List[PipelineStage]:
    return db.query(PipelineStage).filter(
        PipelineStage.job_id == job_id
    ).order_by(PipelineStage.position.asc()).all()


def shift_stage_positions(
    db: Session,
    job_id: UUID,
    delta: int,
    min_position: int,
    max_position: Optional[int] = None
) -> int:
    """
    Add `delta` to the position of every stage of the job whose position is
    within [min_position, max_position].

    Returns:
        Number of stages shifted
    """
    query = db.query(PipelineStage).filter(
        PipelineStage.job_id == job_id,
        PipelineStage.position >= min_position
    )
    if max_position is not None:
        query = query.filter(PipelineStage.position <= max_position)

    return query.update(
        {PipelineStage.position: PipelineStage.position + delta},
        synchronize_session="fetch"
    )


def count_candidates_in_stage(db: Session, stage_id: UUID) -> int:
    return db.query(JobCandidate).filter(JobCandidate.current_stage_id == stage_id).count()
