import logging
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import ensure_same_user, get_current_user
from app.models.user import User
from app.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from app.services import notifications

router = APIRouter(prefix="/notifications", tags=["Notifications"])
logger = logging.getLogger(__name__)


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    user_id: Optional[UUID] = Query(None, alias="userId"),
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: Optional[int] = Query(None, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List the caller's notifications, newest first, with the unread count.

    `userId` is optional and must be the caller's own id.
    """
    user_id = ensure_same_user(current_user, user_id)
    items, unread_count = notifications.get_notifications(db, user_id, unread_only=unread_only, limit=limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in items],
        unread_count=unread_count,
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
def unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return UnreadCountResponse(unread_count=notifications.get_unread_count(db, current_user.id))


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_as_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark one of the caller's notifications as read."""
    return notifications.mark_as_read(db, notification_id, current_user.id)


@router.post("/read-all", response_model=MarkAllReadResponse)
def mark_all_as_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark every notification of the caller as read. Other users are untouched."""
    updated = notifications.mark_all_as_read(db, current_user.id)
    return MarkAllReadResponse(
        updated_count=updated,
        unread_count=notifications.get_unread_count(db, current_user.id),
    )


@router.delete("/{notification_id}", status_code=204)
def delete_notification(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notifications.delete_notification(db, notification_id, current_user.id)
    return None
