"""
Notification Service

Best-effort creation of in-app notifications and the owner-facing
read/delete operations.
"""

import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, NotFoundError
from app.models.enums import NotificationType
from app.models.notification import Notification
from app.models.user import User


logger = logging.getLogger(__name__)


async def create_notification(
    db: AsyncSession,
    user_id: uuid.UUID,
    type: NotificationType,
    title: str,
    message: str,
    link: Optional[str] = None,
    related_course_id: Optional[int] = None,
) -> Optional[Notification]:
    """
    Create a notification for a user.

    Fire-and-forget: the row is committed on its own and any storage
    failure is logged and swallowed so the triggering operation, which
    has already been committed, is never failed by it.

    Returns:
        The created Notification, or None if it could not be stored.
    """
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        link=link,
        related_course_id=related_course_id,
    )
    try:
        db.add(notification)
        await db.commit()
    except SQLAlchemyError:
        logger.exception(
            "Failed to create %s notification for user %s", type.value, user_id
        )
        await db.rollback()
        return None

    return notification


async def get_unread_count(user_id: uuid.UUID, db: AsyncSession) -> int:
    """Count the user's unread notifications."""
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.read.is_(False),
        )
    )
    return result.scalar() or 0


async def list_notifications(
    user: User,
    db: AsyncSession,
    page: int = 1,
    limit: int = 20,
    unread_only: bool = False,
) -> Tuple[list[Notification], int, int]:
    """
    Get a page of the user's notifications, newest first.

    Returns:
        Tuple of (notifications, total matching, unread count).
    """
    base_query = select(Notification).where(Notification.user_id == user.id)
    if unread_only:
        base_query = base_query.where(Notification.read.is_(False))

    count_result = await db.execute(
        select(func.count()).select_from(base_query.subquery())
    )
    total = count_result.scalar() or 0

    result = await db.execute(
        base_query
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    notifications = list(result.scalars().all())

    unread_count = await get_unread_count(user.id, db)
    return notifications, total, unread_count


async def _get_owned_notification(
    notification_id: int,
    user: User,
    db: AsyncSession,
    action: str,
) -> Notification:
    result = await db.execute(
        select(Notification).where(Notification.id == notification_id)
    )
    notification = result.scalar_one_or_none()

    if not notification:
        raise NotFoundError("Notification not found")

    if notification.user_id != user.id:
        raise AuthorizationError(f"Not authorized to {action} this notification")

    return notification


async def mark_as_read(
    notification_id: int,
    user: User,
    db: AsyncSession,
) -> Notification:
    """Mark one of the user's notifications as read."""
    notification = await _get_owned_notification(notification_id, user, db, "update")
    notification.read = True
    await db.commit()
    return notification


async def mark_all_as_read(user: User, db: AsyncSession) -> int:
    """Mark every unread notification of the user as read."""
    result = await db.execute(
        update(Notification)
        .where(
            Notification.user_id == user.id,
            Notification.read.is_(False),
        )
        .values(read=True)
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()
    return result.rowcount or 0


async def delete_notification(
    notification_id: int,
    user: User,
    db: AsyncSession,
) -> None:
    """Delete one of the user's notifications."""
    notification = await _get_owned_notification(notification_id, user, db, "delete")
    await db.delete(notification)
    await db.commit()


async def clear_read(user: User, db: AsyncSession) -> int:
    """
    Delete all of the user's read notifications.

    Returns:
        Number of notifications deleted.
    """
    result = await db.execute(
        delete(Notification)
        .where(
            Notification.user_id == user.id,
            Notification.read.is_(True),
        )
        .execution_options(synchronize_session="fetch")
    )
    await db.commit()
    return result.rowcount or 0
