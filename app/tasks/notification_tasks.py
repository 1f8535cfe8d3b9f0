"""
Celery tasks for scheduled notifications.
"""

import logging
from typing import Optional
from app.core.celery_app import celery_app
from app.core.database import SessionLocal
from app.services import notifications

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.notification_tasks.send_feedback_reminders_task", bind=True)
def send_feedback_reminders_task(self, hours_threshold: Optional[int] = None):
    """
    Remind panel members whose interview feedback is overdue.

    Args:
        hours_threshold: Hours after the interview ends before reminding
            (defaults to FEEDBACK_REMINDER_HOURS)
    """
    logger.info(f"[Task {self.request.id}] Sending interview feedback reminders")

    # Create a new database session for this task
    db = SessionLocal()

    try:
        result = notifications.send_feedback_reminders(db, hours_threshold=hours_threshold)
        return {
            "status": "success",
            "notifications_created": result.notifications_created,
            "errors": result.errors,
        }
    finally:
        db.close()
