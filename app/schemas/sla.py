"""
Pydantic schemas for SLA thresholds, breaches and role summaries.
"""

from typing import List, Optional, Union
from uuid import UUID
from pydantic import Field
from app.services.sla import SLAStatus
from app.schemas.base import CamelModel, UTCDateTime


class SLAConfigItem(CamelModel):
    """
    One threshold. Types are loose on purpose so range and whole-number
    checks report field errors in the usual error body.
    """
    stage_name: Optional[str] = None
    threshold_days: Optional[Union[int, float]] = None


class SLAConfigBatch(CamelModel):
    configs: List[SLAConfigItem] = Field(..., min_length=1)


class SLAConfigResponse(CamelModel):
    id: UUID
    company_id: UUID
    stage_name: str
    threshold_days: int
    created_at: UTCDateTime
    updated_at: Optional[UTCDateTime] = None


class SLADefault(CamelModel):
    stage_name: str
    threshold_days: int


class SLAConfigListResponse(CamelModel):
    configs: List[SLAConfigResponse]
    defaults: List[SLADefault]


class SLAEvaluationResponse(CamelModel):
    id: str
    job_candidate_id: UUID
    candidate_id: UUID
    candidate_name: str
    job_id: UUID
    job_title: str
    stage_name: str
    entered_at: UTCDateTime
    days_in_stage: int
    threshold_days: int
    days_overdue: int
    status: SLAStatus


class CandidateSLAResponse(CamelModel):
    status: Optional[SLAStatus] = None
    evaluation: Optional[SLAEvaluationResponse] = None


class PendingFeedbackAlert(CamelModel):
    interview_id: UUID
    candidate_name: str
    job_title: str
    scheduled_at: UTCDateTime
    hours_since_interview: int
    pending_members: List[str]


class SLAAlertsResponse(CamelModel):
    sla_breaches: List[SLAEvaluationResponse]
    pending_feedback: List[PendingFeedbackAlert]


class RoleSLAResponse(CamelModel):
    role_id: UUID
    role_name: str
    status: SLAStatus
    days_open: int
    candidates_breaching: int


class RoleSLASummary(CamelModel):
    on_track: int
    at_risk: int
    breached: int


class RoleSLASummaryResponse(CamelModel):
    summary: RoleSLASummary
    roles: List[RoleSLAResponse]
