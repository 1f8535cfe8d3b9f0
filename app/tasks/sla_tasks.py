"""
Celery tasks for SLA monitoring.

The sweep runs from Celery Beat (see app.core.celery_app) and raises
sla_breach notifications for every company.
"""

import logging
from sqlalchemy.exc import SQLAlchemyError
from app.core.celery_app import celery_app
from app.core.config import settings
from app.core.database import SessionLocal
from app.crud import company as company_crud
from app.services import sla

logger = logging.getLogger(__name__)


def sweep_sla_breaches(db) -> dict:
    """
    Notify about current breaches in every active company.

    A company that fails is logged and skipped; the others still run.
    """
    result = {"companies": 0, "notifications_created": 0, "errors": []}

    for company in company_crud.get_active(db):
        company_id = company.id
        try:
            created = sla.notify_breaches(db, company_id)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"SLA sweep failed for company {company_id}: {e}", exc_info=True)
            result["errors"].append(str(company_id))
            continue

        result["companies"] += 1
        result["notifications_created"] += created

    return result


@celery_app.task(name="app.tasks.sla_tasks.sweep_sla_breaches_task", bind=True)
def sweep_sla_breaches_task(self):
    """
    Periodic SLA sweep.

    Returns:
        dict: Companies processed, notifications created and failed company ids
    """
    if not settings.SLA_SWEEP_ENABLED:
        logger.info(f"[Task {self.request.id}] SLA sweep disabled; skipping")
        return {"status": "skipped"}

    logger.info(f"[Task {self.request.id}] Starting SLA breach sweep")

    # Create a new database session for this task
    db = SessionLocal()

    try:
        result = sweep_sla_breaches(db)
        logger.info(
            f"[Task {self.request.id}] SLA sweep done: {result['companies']} companies, "
            f"{result['notifications_created']} notifications, {len(result['errors'])} errors"
        )
        return {"status": "success", **result}
    finally:
        db.close()
