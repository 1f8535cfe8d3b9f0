"""
Health check and monitoring endpoints.

Provides detailed health status for the database and the Redis broker used
by the background workers.
"""

import logging
from typing import Dict, Any
import redis
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy import text, func
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import get_db
from app.models.job import Job, JobStatus
from app.models.job_candidate import JobCandidate, StageHistory
from app.models.candidate import Candidate
from app.models.notification import Notification
from app.utils.time import utc_now

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """
    Basic health check endpoint.

    Returns 200 OK if the service is running.
    Use this for simple uptime monitoring and load balancer health checks.
    """
    return {
        "status": "healthy",
        "timestamp": utc_now().isoformat()
    }


@router.get("/health/detailed", status_code=status.HTTP_200_OK)
def detailed_health_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Detailed health check with dependency status.

    Checks:
    - Database connectivity
    - Redis broker availability (SLA sweeps, feedback reminders)
    """
    health_status = {
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "checks": {}
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful"
        }
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["checks"]["database"] = {
            "status": "unhealthy",
            "message": f"Database error: {str(e)}"
        }

    try:
        redis.Redis.from_url(settings.REDIS_URL, socket_connect_timeout=1).ping()
        health_status["checks"]["broker"] = {
            "status": "healthy",
            "message": "Redis broker reachable"
        }
    except redis.RedisError as e:
        logger.error(f"Broker health check failed: {e}")
        health_status["status"] = "degraded" if health_status["status"] == "healthy" else health_status["status"]
        health_status["checks"]["broker"] = {
            "status": "unhealthy",
            "message": f"Broker error: {str(e)}"
        }

    return health_status


@router.get("/metrics", status_code=status.HTTP_200_OK)
def get_metrics(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Application metrics endpoint.

    Returns basic operational counts across all tenants.
    """
    return {
        "timestamp": utc_now().isoformat(),
        "metrics": {
            "active_jobs": db.query(func.count(Job.id)).filter(Job.status == JobStatus.ACTIVE).scalar() or 0,
            "total_candidates": db.query(func.count(Candidate.id)).scalar() or 0,
            "total_applications": db.query(func.count(JobCandidate.id)).scalar() or 0,
            "open_stage_entries": db.query(func.count(StageHistory.id)).filter(
                StageHistory.exited_at.is_(None)
            ).scalar() or 0,
            "unread_notifications": db.query(func.count(Notification.id)).filter(
                Notification.is_read.is_(False)
            ).scalar() or 0,
        }
    }
