"""
Pydantic schemas for in-app notifications.
"""

from typing import List, Optional
from uuid import UUID
from app.models.notification import NotificationType
from app.schemas.base import CamelModel, UTCDateTime


class NotificationResponse(CamelModel):
    id: UUID
    user_id: UUID
    type: NotificationType
    title: str
    message: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    is_read: bool
    created_at: UTCDateTime


class NotificationListResponse(CamelModel):
    notifications: List[NotificationResponse]
    unread_count: int


class UnreadCountResponse(CamelModel):
    unread_count: int


class MarkAllReadResponse(CamelModel):
    updated_count: int
    unread_count: int
