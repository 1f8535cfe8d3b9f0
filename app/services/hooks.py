"""
Post-commit side effects.

A primary operation (stage move, interview scheduling) commits first and then
hands an event to a list of hooks. Each hook runs on its own: a failure is
logged and rolled back, and neither stops the remaining hooks nor fails the
primary operation.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

PostCommitHook = Callable[[Session, Any], Any]


@dataclass(frozen=True)
class StageChangeEvent:
    company_id: UUID
    job_candidate_id: UUID
    candidate_id: UUID
    candidate_name: str
    job_id: UUID
    job_title: str
    from_stage_name: str
    to_stage_name: str
    actor_id: Optional[UUID]
    comment: Optional[str] = None


@dataclass(frozen=True)
class InterviewEvent:
    company_id: UUID
    interview_id: UUID
    candidate_id: UUID
    candidate_name: str
    candidate_email: Optional[str]
    job_title: str
    scheduled_at: datetime
    duration: int
    timezone: str
    mode: str
    location: Optional[str]
    actor_id: UUID
    panel_emails: Sequence[str] = ()
    cancelled: bool = False
    reason: Optional[str] = None


def run_post_commit_hooks(db: Session, hooks: Sequence[PostCommitHook], event: Any) -> int:
    """
    Run every hook against the event.

    Returns:
        Number of hooks that failed
    """
    failures = 0
    for hook in hooks:
        name = getattr(hook, "__name__", repr(hook))
        try:
            hook(db, event)
        except Exception:
            failures += 1
            logger.error(f"Post-commit hook {name} failed for {type(event).__name__}", exc_info=True)
            db.rollback()
    return failures
