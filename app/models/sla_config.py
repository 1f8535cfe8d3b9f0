import uuid
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, Uuid, func
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.utils.time import utc_now


class SLAConfig(Base):
    """
    Per-company, per-stage-name threshold in days.

    Keyed by stage *name* rather than stage id so one setting covers the
    "Screening" stage of every job in the company.
    """
    __tablename__ = "sla_configs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    stage_name = Column(String, nullable=False)
    threshold_days = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    company = relationship("Company", back_populates="sla_configs")

    def __repr__(self):
        return f"<SLAConfig(company_id={self.company_id}, stage='{self.stage_name}', days={self.threshold_days})>"


# One threshold per stage name per company, ignoring case
Index(
    "uq_sla_configs_company_stage",
    SLAConfig.company_id,
    func.lower(SLAConfig.stage_name),
    unique=True,
)
