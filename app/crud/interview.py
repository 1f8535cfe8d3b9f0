"""
CRUD operations for interviews, panel members and feedback.
"""

from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload
from app.models.interview import Interview, InterviewFeedback, InterviewPanelMember, InterviewStatus
from app.models.job import Job
from app.models.job_candidate import JobCandidate


def _with_relations(query):
    return query.options(
        joinedload(Interview.job_candidate).joinedload(JobCandidate.candidate),
        joinedload(Interview.job_candidate).joinedload(JobCandidate.job),
        selectinload(Interview.panel_members).joinedload(InterviewPanelMember.user),
        selectinload(Interview.feedback),
    )


def create(db: Session, panel_member_ids: Sequence[UUID], **fields) -> Interview:
    interview = Interview(**fields)
    for user_id in panel_member_ids:
        interview.panel_members.append(InterviewPanelMember(user_id=user_id))
    db.add(interview)
    db.flush()
    return interview


def get_for_company(db: Session, interview_id: UUID, company_id: UUID) -> Optional[Interview]:
    return _with_relations(db.query(Interview)).join(
        JobCandidate, Interview.job_candidate_id == JobCandidate.id
    ).join(Job, JobCandidate.job_id == Job.id).filter(
        Interview.id == interview_id,
        Job.company_id == company_id
    ).first()


def get_multi(
    db: Session,
    company_id: UUID,
    job_candidate_id: Optional[UUID] = None,
    status: Optional[InterviewStatus] = None
) -> List[Interview]:
    query = _with_relations(db.query(Interview)).join(
        JobCandidate, Interview.job_candidate_id == JobCandidate.id
    ).join(Job, JobCandidate.job_id == Job.id).filter(Job.company_id == company_id)

    if job_candidate_id:
        query = query.filter(Interview.job_candidate_id == job_candidate_id)
    if status:
        query = query.filter(Interview.status == status)

    return query.order_by(Interview.scheduled_at.asc()).all()


def get_awaiting_feedback(db: Session, scheduled_before: datetime, company_id: Optional[UUID] = None) -> List[Interview]:
    """
    Interviews that should have feedback by now: completed ones, and
    scheduled ones whose start time is before `scheduled_before`.
    """
    query = _with_relations(db.query(Interview)).filter(
        or_(
            Interview.status == InterviewStatus.COMPLETED,
            (Interview.status == InterviewStatus.SCHEDULED) & (Interview.scheduled_at < scheduled_before),
        )
    )
    if company_id is not None:
        query = query.join(
            JobCandidate, Interview.job_candidate_id == JobCandidate.id
        ).join(Job, JobCandidate.job_id == Job.id).filter(Job.company_id == company_id)

    return query.order_by(Interview.scheduled_at.desc()).all()


def add_feedback(db: Session, interview: Interview, panel_member_id: UUID, **fields) -> InterviewFeedback:
    feedback = InterviewFeedback(interview_id=interview.id, panel_member_id=panel_member_id, **fields)
    db.add(feedback)
    db.flush()
    db.refresh(interview)
    return feedback
