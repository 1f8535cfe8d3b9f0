"""
Database models package.
"""

from app.models.company import Company
from app.models.user import User, UserRole
from app.models.candidate import Candidate
from app.models.job import Job, JobStatus, PipelineStage
from app.models.job_candidate import JobCandidate, StageHistory
from app.models.activity import CandidateActivity, ActivityType
from app.models.sla_config import SLAConfig
from app.models.notification import Notification, NotificationType
from app.models.interview import (
    Interview,
    InterviewStatus,
    InterviewMode,
    InterviewPanelMember,
    InterviewFeedback,
    Recommendation,
)

__all__ = [
    "Company",
    "User",
    "UserRole",
    "Candidate",
    "Job",
    "JobStatus",
    "PipelineStage",
    "JobCandidate",
    "StageHistory",
    "CandidateActivity",
    "ActivityType",
    "SLAConfig",
    "Notification",
    "NotificationType",
    "Interview",
    "InterviewStatus",
    "InterviewMode",
    "InterviewPanelMember",
    "InterviewFeedback",
    "Recommendation",
]
