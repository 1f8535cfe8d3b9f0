import logging
from typing import List, Optional, Union
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import ensure_same_company, get_current_user
from app.models.user import User
from app.schemas.sla import (
    CandidateSLAResponse,
    PendingFeedbackAlert,
    RoleSLAResponse,
    RoleSLASummary,
    RoleSLASummaryResponse,
    SLAAlertsResponse,
    SLAConfigBatch,
    SLAConfigItem,
    SLAConfigListResponse,
    SLAConfigResponse,
    SLADefault,
    SLAEvaluationResponse,
)
from app.services import sla

router = APIRouter(prefix="/sla", tags=["SLA"])
logger = logging.getLogger(__name__)


@router.get("/config", response_model=SLAConfigListResponse)
def get_config(
    company_id: Optional[UUID] = Query(None, alias="companyId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The company's stage thresholds plus the suggested defaults."""
    company_id = ensure_same_company(current_user, company_id)
    return SLAConfigListResponse(
        configs=[SLAConfigResponse.model_validate(c) for c in sla.get_configs(db, company_id)],
        defaults=[SLADefault(**d) for d in sla.get_default_thresholds()],
    )


@router.put("/config", response_model=Union[SLAConfigResponse, List[SLAConfigResponse]])
def update_config(
    request: Union[SLAConfigBatch, SLAConfigItem],
    company_id: Optional[UUID] = Query(None, alias="companyId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Upsert thresholds. Accepts a single `{stageName, thresholdDays}` or a
    batch `{configs: [...]}`; thresholdDays must be a whole number >= 1.
    """
    company_id = ensure_same_company(current_user, company_id)
    if isinstance(request, SLAConfigBatch):
        configs = sla.update_configs(db, company_id, [item.model_dump() for item in request.configs])
        return [SLAConfigResponse.model_validate(c) for c in configs]

    config = sla.update_config(db, company_id, request.stage_name, request.threshold_days)
    return SLAConfigResponse.model_validate(config)


@router.delete("/config/{stage_name}", status_code=204)
def delete_config(
    stage_name: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    sla.delete_config(db, current_user.company_id, stage_name)
    return None


@router.post("/config/apply-defaults", response_model=List[SLAConfigResponse])
def apply_defaults(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Write the default thresholds into the company's configuration."""
    return [SLAConfigResponse.model_validate(c) for c in sla.apply_defaults(db, current_user.company_id)]


@router.get("/breaches", response_model=List[SLAEvaluationResponse])
def get_breaches(
    company_id: Optional[UUID] = Query(None, alias="companyId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Applications past their stage threshold, most overdue first."""
    company_id = ensure_same_company(current_user, company_id)
    return [SLAEvaluationResponse.model_validate(b) for b in sla.check_sla_breaches(db, company_id)]


@router.get("/alerts", response_model=SLAAlertsResponse)
def get_alerts(
    company_id: Optional[UUID] = Query(None, alias="companyId"),
    type: str = Query("all", pattern="^(sla|feedback|all)$"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """SLA breaches and interviews still waiting for panel feedback."""
    company_id = ensure_same_company(current_user, company_id)
    alerts = sla.get_alerts(db, company_id, type=type)
    return SLAAlertsResponse(
        sla_breaches=[SLAEvaluationResponse.model_validate(b) for b in alerts["sla_breaches"]],
        pending_feedback=[PendingFeedbackAlert(**p) for p in alerts["pending_feedback"]],
    )


@router.get("/applications/{job_candidate_id}/status", response_model=CandidateSLAResponse)
def get_candidate_status(
    job_candidate_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """SLA status of one application; null when its stage has no threshold."""
    evaluation = sla.check_candidate_sla(db, job_candidate_id, current_user.company_id)
    if evaluation is None:
        return CandidateSLAResponse()
    return CandidateSLAResponse(
        status=evaluation.status,
        evaluation=SLAEvaluationResponse.model_validate(evaluation),
    )


@router.get("/roles", response_model=RoleSLASummaryResponse)
def get_role_summary(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Worst SLA status per active job, with company-wide counts."""
    result = sla.get_role_summary(db, current_user.company_id)
    return RoleSLASummaryResponse(
        summary=RoleSLASummary(**result["summary"]),
        roles=[RoleSLAResponse.model_validate(r) for r in result["roles"]],
    )
