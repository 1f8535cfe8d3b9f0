"""
Notification dispatcher and inbox operations.

Recipients for pipeline and interview events are every active user of the
company except the actor. SLA breach alerts go to admins, hiring managers and
the job's assigned recruiter. Feedback reminders go to the panel members who
still owe feedback.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.crud import interview as interview_crud
from app.crud import notification as notification_crud
from app.models.job import Job
from app.models.notification import Notification, NotificationType
from app.models.user import UserRole
from app.services.hooks import InterviewEvent, StageChangeEvent
from app.utils.time import as_utc, utc_now

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    user_id: UUID,
    type: NotificationType,
    title: str,
    message: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None
) -> Notification:
    """
    Validate and insert one notification (flushed, not committed).

    Raises:
        ValidationError: If title or message is blank
        NotFoundError: If the recipient does not exist
    """
    errors: Dict[str, List[str]] = {}
    if not title or not title.strip():
        errors["title"] = ["Title is required"]
    if not message or not message.strip():
        errors["message"] = ["Message is required"]
    if errors:
        raise ValidationError(errors)

    if notification_crud.get_user(db, user_id) is None:
        raise NotFoundError("User")

    return notification_crud.create(
        db,
        user_id=user_id,
        type=type,
        title=title.strip(),
        message=message.strip(),
        entity_type=entity_type,
        entity_id=entity_id,
    )


def _broadcast(
    db: Session,
    company_id: UUID,
    actor_id: Optional[UUID],
    type: NotificationType,
    title: str,
    message: str,
    entity_type: str,
    entity_id: str
) -> List[Notification]:
    recipients = notification_crud.get_active_users(db, company_id, exclude_user_id=actor_id)
    notifications = [
        create_notification(db, user.id, type, title, message, entity_type=entity_type, entity_id=entity_id)
        for user in recipients
    ]
    db.commit()
    return notifications


def dispatch_stage_change(db: Session, event: StageChangeEvent) -> List[Notification]:
    """Post-commit hook for stage moves."""
    notifications = _broadcast(
        db,
        event.company_id,
        event.actor_id,
        NotificationType.STAGE_CHANGE,
        "Candidate Stage Changed",
        f"{event.candidate_name} moved from {event.from_stage_name} to {event.to_stage_name} for {event.job_title}",
        entity_type="candidate",
        entity_id=str(event.candidate_id),
    )
    logger.info(
        f"Dispatched {len(notifications)} stage_change notifications for job candidate {event.job_candidate_id}"
    )
    return notifications


def dispatch_interview_event(db: Session, event: InterviewEvent) -> List[Notification]:
    """Post-commit hook for interview scheduling and cancellation."""
    when = as_utc(event.scheduled_at).strftime("%Y-%m-%d %H:%M UTC")
    if event.cancelled:
        type = NotificationType.INTERVIEW_CANCELLED
        title = "Interview Cancelled"
        message = f"Interview with {event.candidate_name} for {event.job_title} on {when} was cancelled"
        if event.reason:
            message += f". Reason: {event.reason}"
    else:
        type = NotificationType.INTERVIEW_SCHEDULED
        title = "Interview Scheduled"
        message = f"Interview with {event.candidate_name} for {event.job_title} scheduled for {when}"

    notifications = _broadcast(
        db, event.company_id, event.actor_id, type, title, message,
        entity_type="interview", entity_id=str(event.interview_id),
    )
    logger.info(f"Dispatched {len(notifications)} {type.value} notifications for interview {event.interview_id}")
    return notifications


def notify_sla_breach(db: Session, breach, job: Job) -> List[Notification]:
    """
    Alert admins, hiring managers and the assigned recruiter about a breach.

    A user who still has an unread sla_breach alert for the same application
    is skipped, so periodic sweeps do not pile up duplicates.
    """
    recipients = {
        user.id
        for user in notification_crud.get_active_users(
            db, job.company_id, roles=(UserRole.ADMIN, UserRole.HIRING_MANAGER)
        )
    }
    if job.assigned_recruiter_id:
        recipients.add(job.assigned_recruiter_id)

    entity_id = str(breach.job_candidate_id)
    created = []
    for user_id in recipients:
        if notification_crud.exists(
            db, user_id, NotificationType.SLA_BREACH, "job_candidate", entity_id, unread_only=True
        ):
            continue
        created.append(create_notification(
            db,
            user_id,
            NotificationType.SLA_BREACH,
            "SLA Breach Alert",
            f"{breach.candidate_name} has been in {breach.stage_name} for {breach.days_in_stage} days "
            f"({breach.days_overdue} days overdue) for {breach.job_title}",
            entity_type="job_candidate",
            entity_id=entity_id,
        ))

    db.commit()
    return created


# -- Inbox -------------------------------------------------------------------

def get_notifications(
    db: Session,
    user_id: UUID,
    unread_only: bool = False,
    limit: Optional[int] = None
) -> Tuple[List[Notification], int]:
    """
    Returns:
        (notifications newest first, unread count)
    """
    if notification_crud.get_user(db, user_id) is None:
        raise NotFoundError("User")

    limit = limit or settings.NOTIFICATION_PAGE_LIMIT
    notifications = notification_crud.get_multi(db, user_id, unread_only=unread_only, limit=limit)
    return notifications, notification_crud.count_unread(db, user_id)


def get_unread_count(db: Session, user_id: UUID) -> int:
    return notification_crud.count_unread(db, user_id)


def _get_owned(db: Session, notification_id: UUID, user_id: UUID) -> Notification:
    notification = notification_crud.get(db, notification_id)
    # Someone else's notification is indistinguishable from a missing one
    if notification is None or notification.user_id != user_id:
        raise NotFoundError("Notification")
    return notification


def mark_as_read(db: Session, notification_id: UUID, user_id: UUID) -> Notification:
    notification = _get_owned(db, notification_id, user_id)
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, user_id: UUID) -> int:
    if notification_crud.get_user(db, user_id) is None:
        raise NotFoundError("User")

    count = notification_crud.mark_all_read(db, user_id)
    db.commit()
    logger.info(f"Marked {count} notifications read for user {user_id}")
    return count


def delete_notification(db: Session, notification_id: UUID, user_id: UUID) -> None:
    notification = _get_owned(db, notification_id, user_id)
    db.delete(notification)
    db.commit()


# -- Interview feedback reminders --------------------------------------------

@dataclass
class ReminderResult:
    notifications_created: int = 0
    errors: List[str] = field(default_factory=list)


def send_feedback_reminders(db: Session, hours_threshold: Optional[int] = None, now=None) -> ReminderResult:
    """
    Create one feedback_pending notification per (panel member, interview)
    for interviews that ended more than `hours_threshold` hours ago and still
    miss that member's feedback.
    """
    hours_threshold = hours_threshold if hours_threshold is not None else settings.FEEDBACK_REMINDER_HOURS
    now = now or utc_now()
    cutoff = now - timedelta(hours=hours_threshold)
    result = ReminderResult()

    for interview in interview_crud.get_awaiting_feedback(db, scheduled_before=cutoff):
        ended_at = as_utc(interview.scheduled_at) + timedelta(minutes=interview.duration)
        if ended_at >= cutoff:
            continue

        submitted = {fb.panel_member_id for fb in interview.feedback}
        candidate_name = interview.job_candidate.candidate.name
        job_title = interview.job_candidate.job.title

        for member in interview.panel_members:
            if member.user_id in submitted:
                continue
            if notification_crud.exists(
                db, member.user_id, NotificationType.FEEDBACK_PENDING, "interview", str(interview.id)
            ):
                continue
            try:
                create_notification(
                    db,
                    member.user_id,
                    NotificationType.FEEDBACK_PENDING,
                    "Interview Feedback Pending",
                    f"Your feedback for the interview with {candidate_name} for {job_title} is overdue.",
                    entity_type="interview",
                    entity_id=str(interview.id),
                )
                result.notifications_created += 1
            except (ValidationError, NotFoundError) as e:
                logger.error(f"Could not remind panel member {member.user_id} for interview {interview.id}: {e}")
                result.errors.append(f"{member.user_id}: {e}")

    db.commit()
    logger.info(f"Feedback reminders: {result.notifications_created} created, {len(result.errors)} errors")
    return result
