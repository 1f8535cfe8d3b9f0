"""
SLA evaluator.

Compares how long each application has sat in its current stage against the
company's per-stage thresholds:

    days_in_stage = floor((now - entered_at) / 1 day)

    breached   days_in_stage >  threshold
    at_risk    days_in_stage >= threshold * SLA_AT_RISK_RATIO
    on_track   otherwise

entered_at comes from the open StageHistory row, or applied_at when an
application has none. Stage names match configs case-insensitively, only
applications on active jobs are evaluated, and an application whose stage has
no configured threshold gets no status at all.

Nothing is cached; every call recomputes from the current clock.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.crud import candidate as candidate_crud
from app.crud import job as job_crud
from app.crud import sla_config as sla_crud
from app.crud import stage_history as history_crud
from app.models.job_candidate import JobCandidate
from app.models.sla_config import SLAConfig
from app.services import notifications, stage_history
from app.utils.time import as_utc, utc_now, whole_days_between

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS = [
    ("Applied", 3),
    ("Screening", 5),
    ("Interview", 7),
    ("Technical Round", 7),
    ("HR Round", 5),
    ("Offer", 3),
]


class SLAStatus(str, Enum):
    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    BREACHED = "breached"


# Higher is worse
STATUS_SEVERITY = {SLAStatus.ON_TRACK: 0, SLAStatus.AT_RISK: 1, SLAStatus.BREACHED: 2}


def classify(days_in_stage: int, threshold_days: int, at_risk_ratio: Optional[float] = None) -> SLAStatus:
    ratio = settings.SLA_AT_RISK_RATIO if at_risk_ratio is None else at_risk_ratio
    if days_in_stage > threshold_days:
        return SLAStatus.BREACHED
    if days_in_stage >= threshold_days * ratio:
        return SLAStatus.AT_RISK
    return SLAStatus.ON_TRACK


@dataclass
class SLAEvaluation:
    job_candidate_id: UUID
    candidate_id: UUID
    candidate_name: str
    job_id: UUID
    job_title: str
    stage_name: str
    entered_at: datetime
    days_in_stage: int
    threshold_days: int
    status: SLAStatus

    @property
    def id(self) -> str:
        return f"sla-{self.job_candidate_id}"

    @property
    def days_overdue(self) -> int:
        return max(self.days_in_stage - self.threshold_days, 0)


def _evaluate(
    job_candidate: JobCandidate,
    thresholds: Dict[str, int],
    entered_at: datetime,
    now: datetime
) -> Optional[SLAEvaluation]:
    stage_name = job_candidate.current_stage.name
    threshold = thresholds.get(stage_name.lower())
    if threshold is None:
        return None

    days_in_stage = whole_days_between(entered_at, now)
    return SLAEvaluation(
        job_candidate_id=job_candidate.id,
        candidate_id=job_candidate.candidate_id,
        candidate_name=job_candidate.candidate.name,
        job_id=job_candidate.job_id,
        job_title=job_candidate.job.title,
        stage_name=stage_name,
        entered_at=entered_at,
        days_in_stage=days_in_stage,
        threshold_days=threshold,
        status=classify(days_in_stage, threshold),
    )


def evaluate_company(db: Session, company_id: UUID, now: Optional[datetime] = None) -> List[SLAEvaluation]:
    """
    Evaluate every application on the company's active jobs that has a
    threshold for its current stage.
    """
    thresholds = sla_crud.threshold_map(db, company_id)
    if not thresholds:
        return []

    now = now or utc_now()
    applications = candidate_crud.get_active_applications(db, company_id)

    open_rows = {}
    # Newest open row wins if an application somehow has more than one
    for row in sorted(
        history_crud.get_open_entries_for_applications(db, [jc.id for jc in applications]),
        key=lambda r: as_utc(r.entered_at),
    ):
        open_rows[row.job_candidate_id] = row

    evaluations = []
    for job_candidate in applications:
        entered_at = stage_history.stage_entered_at(job_candidate, open_rows.get(job_candidate.id))
        evaluation = _evaluate(job_candidate, thresholds, entered_at, now)
        if evaluation is not None:
            evaluations.append(evaluation)
    return evaluations


def check_sla_breaches(db: Session, company_id: UUID, now: Optional[datetime] = None) -> List[SLAEvaluation]:
    """Breached applications, most overdue first."""
    breaches = [e for e in evaluate_company(db, company_id, now) if e.status == SLAStatus.BREACHED]
    breaches.sort(key=lambda e: e.days_overdue, reverse=True)
    return breaches


def check_candidate_sla(
    db: Session,
    job_candidate_id: UUID,
    company_id: UUID,
    now: Optional[datetime] = None
) -> Optional[SLAEvaluation]:
    """
    SLA evaluation of one application, or None when its stage has no threshold.
    """
    job_candidate = candidate_crud.get_application_for_company(db, job_candidate_id, company_id)
    if job_candidate is None:
        raise NotFoundError("Job candidate")

    thresholds = sla_crud.threshold_map(db, company_id)
    entered_at = stage_history.stage_entered_at(
        job_candidate, stage_history.current_entry(db, job_candidate.id)
    )
    return _evaluate(job_candidate, thresholds, entered_at, now or utc_now())


@dataclass
class RoleSLAStatus:
    role_id: UUID
    role_name: str
    status: SLAStatus
    days_open: int
    candidates_breaching: int


def get_role_summary(db: Session, company_id: UUID, now: Optional[datetime] = None) -> dict:
    """
    Per active job, the worst status among its evaluated applications.

    Returns:
        {"summary": {"on_track", "at_risk", "breached"}, "roles": [RoleSLAStatus]}
        with roles sorted worst first, then longest open
    """
    now = now or utc_now()
    by_job: Dict[UUID, List[SLAEvaluation]] = {}
    for evaluation in evaluate_company(db, company_id, now):
        by_job.setdefault(evaluation.job_id, []).append(evaluation)

    roles = []
    for job in job_crud.get_active_for_company(db, company_id):
        evaluations = by_job.get(job.id, [])
        worst = max((e.status for e in evaluations), key=STATUS_SEVERITY.get, default=SLAStatus.ON_TRACK)
        roles.append(RoleSLAStatus(
            role_id=job.id,
            role_name=job.title,
            status=worst,
            days_open=whole_days_between(job.created_at, now),
            candidates_breaching=sum(1 for e in evaluations if e.status == SLAStatus.BREACHED),
        ))

    roles.sort(key=lambda r: (STATUS_SEVERITY[r.status], r.days_open), reverse=True)
    summary = {status: sum(1 for r in roles if r.status == status) for status in SLAStatus}
    return {
        "summary": {
            "on_track": summary[SLAStatus.ON_TRACK],
            "at_risk": summary[SLAStatus.AT_RISK],
            "breached": summary[SLAStatus.BREACHED],
        },
        "roles": roles,
    }


def notify_breaches(db: Session, company_id: UUID, now: Optional[datetime] = None) -> int:
    """
    Raise sla_breach notifications for every current breach of the company.

    Returns:
        Number of notifications created
    """
    created = 0
    jobs = {}
    for breach in check_sla_breaches(db, company_id, now):
        job = jobs.get(breach.job_id) or job_crud.get_for_company(db, breach.job_id, company_id)
        jobs[breach.job_id] = job
        created += len(notifications.notify_sla_breach(db, breach, job))
    return created


def get_alerts(db: Session, company_id: UUID, type: str = "all") -> dict:
    """
    SLA breaches and/or interviews still waiting for feedback.

    `type` is one of "sla", "feedback" or "all".
    """
    # Imported here to keep the interviews -> notifications -> sla graph acyclic
    from app.services import interviews

    if type not in ("sla", "feedback", "all"):
        raise ValidationError({"type": ["Type must be one of: sla, feedback, all"]})

    sla_breaches = check_sla_breaches(db, company_id) if type in ("sla", "all") else []
    pending_feedback = interviews.get_pending_feedback(db, company_id) if type in ("feedback", "all") else []
    return {"sla_breaches": sla_breaches, "pending_feedback": pending_feedback}


# -- Configuration -----------------------------------------------------------

def _validate_config(stage_name, threshold_days) -> Dict[str, List[str]]:
    errors = {}
    if not stage_name or not str(stage_name).strip():
        errors["stageName"] = ["Stage name is required"]
    if threshold_days is None:
        errors["thresholdDays"] = ["Threshold days is required"]
    elif isinstance(threshold_days, bool) or not isinstance(threshold_days, (int, float)):
        errors["thresholdDays"] = ["Threshold days must be a number"]
    elif threshold_days < 1:
        errors["thresholdDays"] = ["Threshold days must be at least 1"]
    elif not float(threshold_days).is_integer():
        errors["thresholdDays"] = ["Threshold days must be a whole number"]
    return errors


def get_configs(db: Session, company_id: UUID) -> List[SLAConfig]:
    return sla_crud.get_multi(db, company_id)


def get_default_thresholds() -> List[dict]:
    return [{"stage_name": name, "threshold_days": days} for name, days in DEFAULT_THRESHOLDS]


def update_configs(db: Session, company_id: UUID, configs: Sequence[dict]) -> List[SLAConfig]:
    """
    Upsert thresholds by trimmed stage name. The whole batch is validated
    before anything is written.

    Args:
        configs: Items with "stage_name" and "threshold_days"
    """
    errors = {}
    for index, item in enumerate(configs):
        for field, messages in _validate_config(item.get("stage_name"), item.get("threshold_days")).items():
            key = field if len(configs) == 1 else f"configs[{index}].{field}"
            errors[key] = messages
    if errors:
        raise ValidationError(errors)

    updated = [
        sla_crud.upsert(db, company_id, item["stage_name"].strip(), int(item["threshold_days"]))
        for item in configs
    ]
    db.commit()
    for config in updated:
        db.refresh(config)

    logger.info(f"Updated {len(updated)} SLA thresholds for company {company_id}")
    return updated


def update_config(db: Session, company_id: UUID, stage_name: str, threshold_days: int) -> SLAConfig:
    return update_configs(db, company_id, [{"stage_name": stage_name, "threshold_days": threshold_days}])[0]


def delete_config(db: Session, company_id: UUID, stage_name: str) -> None:
    config = sla_crud.get_by_stage_name(db, company_id, stage_name)
    if config is None:
        raise NotFoundError("SLA configuration")

    sla_crud.delete(db, config)
    db.commit()
    logger.info(f"Deleted SLA threshold '{stage_name}' for company {company_id}")


def apply_defaults(db: Session, company_id: UUID) -> List[SLAConfig]:
    """Upsert the default thresholds into the company's configuration."""
    return update_configs(db, company_id, get_default_thresholds())
