"""
CRUD operations for candidates, applications (JobCandidate) and the
candidate activity timeline.
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session, joinedload
from app.models.activity import ActivityType, CandidateActivity
from app.models.candidate import Candidate
from app.models.job import Job, JobStatus
from app.models.job_candidate import JobCandidate


def create(db: Session, company_id: UUID, **fields) -> Candidate:
    candidate = Candidate(company_id=company_id, **fields)
    db.add(candidate)
    db.flush()
    return candidate


def get_for_company(db: Session, candidate_id: UUID, company_id: UUID) -> Optional[Candidate]:
    return db.query(Candidate).filter(
        Candidate.id == candidate_id,
        Candidate.company_id == company_id
    ).first()


# -- Applications ------------------------------------------------------------

def get_application(db: Session, job_candidate_id: UUID) -> Optional[JobCandidate]:
    """
    Load a JobCandidate with the relations a stage move needs
    (candidate, job, current stage).
    """
    return db.query(JobCandidate).options(
        joinedload(JobCandidate.candidate),
        joinedload(JobCandidate.job),
        joinedload(JobCandidate.current_stage),
    ).filter(JobCandidate.id == job_candidate_id).first()


def get_application_for_company(db: Session, job_candidate_id: UUID, company_id: UUID) -> Optional[JobCandidate]:
    job_candidate = get_application(db, job_candidate_id)
    if job_candidate is None or job_candidate.job.company_id != company_id:
        return None
    return job_candidate


def find_application(db: Session, job_id: UUID, candidate_id: UUID) -> Optional[JobCandidate]:
    return db.query(JobCandidate).filter(
        JobCandidate.job_id == job_id,
        JobCandidate.candidate_id == candidate_id
    ).first()


def create_application(db: Session, job_id: UUID, candidate_id: UUID, stage_id: UUID) -> JobCandidate:
    job_candidate = JobCandidate(job_id=job_id, candidate_id=candidate_id, current_stage_id=stage_id)
    db.add(job_candidate)
    db.flush()
    return job_candidate


def get_applications_for_candidate(db: Session, candidate_id: UUID) -> List[JobCandidate]:
    return db.query(JobCandidate).filter(JobCandidate.candidate_id == candidate_id).all()


def get_active_applications(db: Session, company_id: UUID) -> List[JobCandidate]:
    """
    All applications on ACTIVE jobs of the company, with candidate, job and
    current stage eagerly loaded.
    """
    return db.query(JobCandidate).join(Job, JobCandidate.job_id == Job.id).options(
        joinedload(JobCandidate.candidate),
        joinedload(JobCandidate.job),
        joinedload(JobCandidate.current_stage),
    ).filter(
        Job.company_id == company_id,
        Job.status == JobStatus.ACTIVE
    ).all()


# -- Activities --------------------------------------------------------------

def create_activity(
    db: Session,
    candidate_id: UUID,
    activity_type: ActivityType,
    description: str,
    job_candidate_id: Optional[UUID] = None,
    metadata: Optional[dict] = None,
    created_by: Optional[UUID] = None
) -> CandidateActivity:
    activity = CandidateActivity(
        candidate_id=candidate_id,
        job_candidate_id=job_candidate_id,
        activity_type=activity_type,
        description=description,
        activity_metadata=metadata,
        created_by=created_by,
    )
    db.add(activity)
    db.flush()
    return activity


def get_activities(
    db: Session,
    candidate_id: UUID,
    activity_type: Optional[ActivityType] = None
) -> List[CandidateActivity]:
    query = db.query(CandidateActivity).filter(CandidateActivity.candidate_id == candidate_id)
    if activity_type:
        query = query.filter(CandidateActivity.activity_type == activity_type)
    return query.order_by(CandidateActivity.created_at.desc()).all()
