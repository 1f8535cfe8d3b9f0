"""
CRUD operations for SLAConfig.
"""

from typing import Dict, List, Optional
from uuid import UUID
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.sla_config import SLAConfig


def get_multi(db: Session, company_id: UUID) -> List[SLAConfig]:
    return db.query(SLAConfig).filter(
        SLAConfig.company_id == company_id
    ).order_by(SLAConfig.stage_name.asc()).all()


def get_by_stage_name(db: Session, company_id: UUID, stage_name: str) -> Optional[SLAConfig]:
    """Case-insensitive lookup; stage names are unique per company ignoring case."""
    return db.query(SLAConfig).filter(
        SLAConfig.company_id == company_id,
        func.lower(SLAConfig.stage_name) == stage_name.strip().lower()
    ).first()


def upsert(db: Session, company_id: UUID, stage_name: str, threshold_days: int) -> SLAConfig:
    """
    Insert or update the threshold for (company, stage_name).

    An existing row whose name differs only in case is updated and takes the
    new spelling.
    """
    config = get_by_stage_name(db, company_id, stage_name)
    if config:
        config.stage_name = stage_name
        config.threshold_days = threshold_days
    else:
        config = SLAConfig(company_id=company_id, stage_name=stage_name, threshold_days=threshold_days)
        db.add(config)

    db.flush()
    return config


def delete(db: Session, config: SLAConfig) -> None:
    db.delete(config)
    db.flush()


def threshold_map(db: Session, company_id: UUID) -> Dict[str, int]:
    """
    Lower-cased stage name -> threshold days for the company.
    """
    return {config.stage_name.lower(): config.threshold_days for config in get_multi(db, company_id)}
