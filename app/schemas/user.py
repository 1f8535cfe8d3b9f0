"""
Pydantic schemas for company users as they appear inside other resources.
"""

from uuid import UUID
from app.models.user import UserRole
from app.schemas.base import CamelModel


class UserSummary(CamelModel):
    """User reference (panel members, movers). No sensitive data."""
    id: UUID
    name: str
    email: str
    role: UserRole
