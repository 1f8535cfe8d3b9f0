"""
CRUD operations (Create, Read, Update, Delete) for database models.

This layer provides a clean separation between services and database operations,
following the Repository pattern. Functions add and flush; services commit.
"""

from app.crud import company, job, candidate, stage_history, sla_config, notification, interview

__all__ = ["company", "job", "candidate", "stage_history", "sla_config", "notification", "interview"]
