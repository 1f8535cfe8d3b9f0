import logging
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.interview import InterviewStatus
from app.models.user import User
from app.schemas.interview import (
    FeedbackCreateRequest,
    FeedbackResponse,
    FeedbackStatusResponse,
    InterviewCancelRequest,
    InterviewCreateRequest,
    InterviewResponse,
    InterviewStatusUpdate,
    PendingMember,
)
from app.services import interviews

router = APIRouter(prefix="/interviews", tags=["Interviews"])
logger = logging.getLogger(__name__)


@router.post("", status_code=201, response_model=InterviewResponse)
def schedule_interview(
    request: InterviewCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Schedule an interview for an application.

    `location` is required for in_person and must be an http(s) URL for
    custom_url. Every panel member must be an active user of the company.
    Panel and team notifications plus the confirmation email are sent after
    the interview is saved; failures there do not fail the request.
    """
    return interviews.schedule_interview(
        db,
        company_id=current_user.company_id,
        scheduled_by=current_user.id,
        **request.model_dump(),
    )


@router.get("", response_model=List[InterviewResponse])
def list_interviews(
    job_candidate_id: Optional[UUID] = Query(None, alias="jobCandidateId"),
    status: Optional[InterviewStatus] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return interviews.list_interviews(db, current_user.company_id, job_candidate_id=job_candidate_id, status=status)


@router.get("/{interview_id}", response_model=InterviewResponse)
def get_interview(
    interview_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return interviews.get_interview(db, interview_id, current_user.company_id)


@router.patch("/{interview_id}/status", response_model=InterviewResponse)
def update_status(
    interview_id: UUID,
    request: InterviewStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change the status of an interview. Cancelled interviews are final."""
    return interviews.update_status(db, interview_id, current_user.company_id, request.status)


@router.post("/{interview_id}/cancel", response_model=InterviewResponse)
def cancel_interview(
    interview_id: UUID,
    request: Optional[InterviewCancelRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    reason = request.reason if request else None
    return interviews.cancel_interview(db, interview_id, current_user.company_id, current_user.id, reason=reason)


@router.post("/{interview_id}/feedback", status_code=201, response_model=FeedbackResponse)
def submit_feedback(
    interview_id: UUID,
    request: FeedbackCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Submit the caller's panel feedback. Only panel members may submit, once
    each; the interview completes when every member has submitted.
    """
    return interviews.submit_feedback(
        db,
        interview_id,
        current_user.company_id,
        panel_member_id=current_user.id,
        rating=request.rating,
        recommendation=request.recommendation,
        comments=request.comments,
    )


@router.get("/{interview_id}/feedback-status", response_model=FeedbackStatusResponse)
def feedback_status(
    interview_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    status = interviews.get_feedback_status(db, interview_id, current_user.company_id)
    return FeedbackStatusResponse(
        total=status.total,
        submitted=status.submitted,
        pending=status.pending,
        percentage=status.percentage,
        pending_members=[PendingMember(**m) for m in status.pending_members],
    )
