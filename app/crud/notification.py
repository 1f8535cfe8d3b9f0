"""
CRUD operations for notifications and their recipients.
"""

from typing import List, Optional, Sequence
from uuid import UUID
from sqlalchemy.orm import Session
from app.models.notification import Notification, NotificationType
from app.models.user import User, UserRole


def create(
    db: Session,
    user_id: UUID,
    type: NotificationType,
    title: str,
    message: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        entity_type=entity_type,
        entity_id=entity_id,
        is_read=False,
    )
    db.add(notification)
    db.flush()
    return notification


def get(db: Session, notification_id: UUID) -> Optional[Notification]:
    return db.query(Notification).filter(Notification.id == notification_id).first()


def get_multi(db: Session, user_id: UUID, unread_only: bool = False, limit: int = 50) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc()).limit(limit).all()


def count_unread(db: Session, user_id: UUID) -> int:
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False)
    ).count()


def mark_all_read(db: Session, user_id: UUID) -> int:
    """
    Returns:
        Number of notifications flipped to read
    """
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False)
    ).update({Notification.is_read: True}, synchronize_session="fetch")


def exists(
    db: Session,
    user_id: UUID,
    type: NotificationType,
    entity_type: str,
    entity_id: str,
    unread_only: bool = False
) -> bool:
    query = db.query(Notification.id).filter(
        Notification.user_id == user_id,
        Notification.type == type,
        Notification.entity_type == entity_type,
        Notification.entity_id == entity_id
    )
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.first() is not None


# -- Recipients --------------------------------------------------------------

def get_user(db: Session, user_id: UUID) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_active_users(
    db: Session,
    company_id: UUID,
    exclude_user_id: Optional[UUID] = None,
    roles: Optional[Sequence[UserRole]] = None
) -> List[User]:
    query = db.query(User).filter(
        User.company_id == company_id,
        User.is_active.is_(True)
    )
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    if roles:
        query = query.filter(User.role.in_(list(roles)))
    return query.order_by(User.created_at.asc()).all()
