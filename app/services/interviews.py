"""
Interview scheduling, status changes and panel feedback.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlparse
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.errors import AuthorizationError, NotFoundError, ValidationError
from app.crud import candidate as candidate_crud
from app.crud import interview as interview_crud
from app.crud import notification as notification_crud
from app.models.activity import ActivityType
from app.models.interview import Interview, InterviewFeedback, InterviewMode, InterviewStatus, Recommendation
from app.services import email_service, notifications
from app.services.hooks import InterviewEvent, run_post_commit_hooks
from app.utils.time import as_utc, hours_between, utc_now

logger = logging.getLogger(__name__)

INTERVIEW_HOOKS = [notifications.dispatch_interview_event, email_service.send_interview_emails]


def _is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _validate_location(mode: InterviewMode, location: Optional[str]) -> Dict[str, List[str]]:
    if mode == InterviewMode.IN_PERSON and not location:
        return {"location": ["Location is required for in-person interviews"]}
    if mode == InterviewMode.CUSTOM_URL:
        if not location:
            return {"location": ["Meeting URL is required for custom URL interviews"]}
        if not _is_valid_url(location):
            return {"location": ["Please provide a valid URL for the meeting"]}
    return {}


def _event(interview: Interview, actor_id: UUID, cancelled: bool = False, reason: Optional[str] = None) -> InterviewEvent:
    job_candidate = interview.job_candidate
    return InterviewEvent(
        company_id=job_candidate.job.company_id,
        interview_id=interview.id,
        candidate_id=job_candidate.candidate_id,
        candidate_name=job_candidate.candidate.name,
        candidate_email=job_candidate.candidate.email,
        job_title=job_candidate.job.title,
        scheduled_at=as_utc(interview.scheduled_at),
        duration=interview.duration,
        timezone=interview.timezone,
        mode=interview.mode.value,
        location=interview.location,
        actor_id=actor_id,
        panel_emails=tuple(member.user.email for member in interview.panel_members),
        cancelled=cancelled,
        reason=reason,
    )


def get_interview(db: Session, interview_id: UUID, company_id: UUID) -> Interview:
    interview = interview_crud.get_for_company(db, interview_id, company_id)
    if interview is None:
        raise NotFoundError("Interview")
    return interview


def list_interviews(
    db: Session,
    company_id: UUID,
    job_candidate_id: Optional[UUID] = None,
    status: Optional[InterviewStatus] = None
) -> List[Interview]:
    return interview_crud.get_multi(db, company_id, job_candidate_id=job_candidate_id, status=status)


def schedule_interview(
    db: Session,
    company_id: UUID,
    scheduled_by: UUID,
    job_candidate_id: UUID,
    scheduled_at: datetime,
    duration: int,
    timezone: str,
    mode: InterviewMode,
    panel_member_ids: Sequence[UUID],
    location: Optional[str] = None,
    meeting_link: Optional[str] = None,
    notes: Optional[str] = None
) -> Interview:
    """
    Schedule an interview for an application.

    Raises:
        ValidationError: Bad duration/timezone/location or panel
        NotFoundError: Application missing in this company
    """
    errors: Dict[str, List[str]] = {}
    if duration is None or duration <= 0:
        errors["duration"] = ["Duration must be a positive number"]
    if not timezone or not timezone.strip():
        errors["timezone"] = ["Timezone is required"]
    if not panel_member_ids:
        errors["panelMemberIds"] = ["At least one panel member is required"]
    errors.update(_validate_location(mode, location))
    if errors:
        raise ValidationError(errors)

    job_candidate = candidate_crud.get_application_for_company(db, job_candidate_id, company_id)
    if job_candidate is None:
        raise NotFoundError("Job candidate")

    panel_member_ids = list(dict.fromkeys(panel_member_ids))
    members = {user.id for user in notification_crud.get_active_users(db, company_id)}
    if any(user_id not in members for user_id in panel_member_ids):
        raise ValidationError({"panelMemberIds": ["One or more panel members not found"]})

    try:
        interview = interview_crud.create(
            db,
            panel_member_ids=panel_member_ids,
            job_candidate_id=job_candidate_id,
            scheduled_at=as_utc(scheduled_at),
            duration=duration,
            timezone=timezone.strip(),
            mode=mode,
            location=location,
            meeting_link=meeting_link or (location if mode == InterviewMode.CUSTOM_URL else None),
            notes=notes,
            status=InterviewStatus.SCHEDULED,
            scheduled_by=scheduled_by,
        )
        candidate_crud.create_activity(
            db,
            candidate_id=job_candidate.candidate_id,
            activity_type=ActivityType.INTERVIEW_SCHEDULED,
            description=f"Interview scheduled for {as_utc(scheduled_at).strftime('%Y-%m-%d %H:%M UTC')}",
            job_candidate_id=job_candidate_id,
            metadata={"interviewId": str(interview.id), "mode": mode.value, "duration": duration},
            created_by=scheduled_by,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    interview = get_interview(db, interview.id, company_id)
    logger.info(f"Scheduled interview {interview.id} for job candidate {job_candidate_id}")

    run_post_commit_hooks(db, INTERVIEW_HOOKS, _event(interview, scheduled_by))
    return get_interview(db, interview.id, company_id)


def update_status(db: Session, interview_id: UUID, company_id: UUID, status: InterviewStatus) -> Interview:
    interview = get_interview(db, interview_id, company_id)
    if interview.status == InterviewStatus.CANCELLED:
        raise ValidationError({"status": ["Cannot update a cancelled interview"]})

    interview.status = status
    db.commit()
    logger.info(f"Interview {interview_id} status -> {status.value}")
    return get_interview(db, interview_id, company_id)


def cancel_interview(
    db: Session,
    interview_id: UUID,
    company_id: UUID,
    cancelled_by: UUID,
    reason: Optional[str] = None
) -> Interview:
    interview = get_interview(db, interview_id, company_id)
    if interview.status == InterviewStatus.CANCELLED:
        raise ValidationError({"status": ["Interview is already cancelled"]})

    interview.status = InterviewStatus.CANCELLED
    interview.cancel_reason = reason
    description = "Interview cancelled"
    if reason:
        description += f". Reason: {reason}"
    candidate_crud.create_activity(
        db,
        candidate_id=interview.job_candidate.candidate_id,
        activity_type=ActivityType.INTERVIEW_CANCELLED,
        description=description,
        job_candidate_id=interview.job_candidate_id,
        metadata={"interviewId": str(interview.id), "reason": reason},
        created_by=cancelled_by,
    )
    db.commit()

    interview = get_interview(db, interview_id, company_id)
    logger.info(f"Cancelled interview {interview_id}")

    run_post_commit_hooks(db, INTERVIEW_HOOKS, _event(interview, cancelled_by, cancelled=True, reason=reason))
    return get_interview(db, interview_id, company_id)


# -- Feedback ----------------------------------------------------------------

def submit_feedback(
    db: Session,
    interview_id: UUID,
    company_id: UUID,
    panel_member_id: UUID,
    rating: int,
    recommendation: Recommendation,
    comments: Optional[str] = None
) -> InterviewFeedback:
    """
    Record one panel member's feedback. When the last member submits, the
    interview becomes completed.

    Raises:
        AuthorizationError: The user is not on the panel
        ValidationError: Bad rating, cancelled interview, or already submitted
    """
    interview = get_interview(db, interview_id, company_id)

    if panel_member_id not in {member.user_id for member in interview.panel_members}:
        raise AuthorizationError("Only panel members can submit feedback")
    if interview.status == InterviewStatus.CANCELLED:
        raise ValidationError({"status": ["Cannot submit feedback for a cancelled interview"]})
    if rating is None or not 1 <= rating <= 5:
        raise ValidationError({"rating": ["Rating must be between 1 and 5"]})
    if any(fb.panel_member_id == panel_member_id for fb in interview.feedback):
        raise ValidationError({"feedback": ["Feedback has already been submitted"]})

    feedback = interview_crud.add_feedback(
        db, interview, panel_member_id,
        rating=rating, recommendation=recommendation, comments=comments,
    )
    candidate_crud.create_activity(
        db,
        candidate_id=interview.job_candidate.candidate_id,
        activity_type=ActivityType.FEEDBACK_SUBMITTED,
        description=f"Interview feedback submitted: {recommendation.value} ({rating}/5)",
        job_candidate_id=interview.job_candidate_id,
        metadata={"interviewId": str(interview.id), "rating": rating, "recommendation": recommendation.value},
        created_by=panel_member_id,
    )

    submitted = {fb.panel_member_id for fb in interview.feedback}
    if all(member.user_id in submitted for member in interview.panel_members):
        interview.status = InterviewStatus.COMPLETED
        logger.info(f"All panel feedback in; interview {interview_id} completed")

    db.commit()
    db.refresh(feedback)
    return feedback


@dataclass
class FeedbackStatus:
    total: int
    submitted: int
    pending: int
    percentage: int
    pending_members: List[dict]


def get_feedback_status(db: Session, interview_id: UUID, company_id: UUID) -> FeedbackStatus:
    interview = get_interview(db, interview_id, company_id)
    submitted = {fb.panel_member_id for fb in interview.feedback}
    pending = [m for m in interview.panel_members if m.user_id not in submitted]
    total = len(interview.panel_members)
    done = total - len(pending)
    return FeedbackStatus(
        total=total,
        submitted=done,
        pending=len(pending),
        percentage=round(done * 100 / total) if total else 0,
        pending_members=[{"id": m.user_id, "name": m.user.name, "email": m.user.email} for m in pending],
    )


def get_pending_feedback(db: Session, company_id: UUID, now: Optional[datetime] = None) -> List[dict]:
    """
    Interviews of the company that have ended and still miss feedback from
    at least one panel member, oldest interview last.
    """
    now = now or utc_now()
    alerts = []
    for interview in interview_crud.get_awaiting_feedback(db, scheduled_before=now, company_id=company_id):
        submitted = {fb.panel_member_id for fb in interview.feedback}
        pending = [m for m in interview.panel_members if m.user_id not in submitted]
        if not pending:
            continue
        alerts.append({
            "interview_id": interview.id,
            "candidate_name": interview.job_candidate.candidate.name,
            "job_title": interview.job_candidate.job.title,
            "scheduled_at": as_utc(interview.scheduled_at),
            "hours_since_interview": int(hours_between(interview.scheduled_at, now)),
            "pending_members": [m.user.name for m in pending],
        })
    return alerts
