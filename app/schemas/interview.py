"""
Pydantic schemas for interviews and panel feedback.
"""

from typing import List, Optional
from uuid import UUID
from pydantic import Field
from app.models.interview import InterviewMode, InterviewStatus, Recommendation
from app.schemas.base import CamelModel, UTCDateTime
from app.schemas.user import UserSummary


class InterviewCreateRequest(CamelModel):
    job_candidate_id: UUID
    scheduled_at: UTCDateTime
    duration: int = Field(..., description="Length in minutes")
    timezone: str
    mode: InterviewMode
    location: Optional[str] = Field(None, description="Room for in_person, meeting URL for custom_url")
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    panel_member_ids: List[UUID]


class InterviewStatusUpdate(CamelModel):
    status: InterviewStatus


class InterviewCancelRequest(CamelModel):
    reason: Optional[str] = None


class PanelMemberResponse(CamelModel):
    user_id: UUID
    user: UserSummary


class FeedbackCreateRequest(CamelModel):
    rating: int
    recommendation: Recommendation
    comments: Optional[str] = None


class FeedbackResponse(CamelModel):
    id: UUID
    interview_id: UUID
    panel_member_id: UUID
    rating: int
    recommendation: Recommendation
    comments: Optional[str] = None
    submitted_at: UTCDateTime


class InterviewResponse(CamelModel):
    id: UUID
    job_candidate_id: UUID
    scheduled_at: UTCDateTime
    duration: int
    timezone: str
    mode: InterviewMode
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    status: InterviewStatus
    cancel_reason: Optional[str] = None
    scheduled_by: UUID
    panel_members: List[PanelMemberResponse]
    feedback: List[FeedbackResponse]
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None


class PendingMember(CamelModel):
    id: UUID
    name: str
    email: str


class FeedbackStatusResponse(CamelModel):
    total: int
    submitted: int
    pending: int
    percentage: int
    pending_members: List[PendingMember]
