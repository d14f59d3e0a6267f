"""
Notification Routes

Endpoints for the current user's in-app notifications.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user
from app.core.config import settings
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.notification import (
    ClearReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from app.services import notification_service


router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get(
    "/",
    response_model=ApiResponse[NotificationListResponse],
    summary="List my notifications",
)
async def list_notifications(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1, description="Page number"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Items per page"),
    unread_only: bool = Query(False, alias="unreadOnly"),
) -> dict:
    """Get a page of the user's notifications, newest first."""
    limit = limit or settings.NOTIFICATIONS_PAGE_SIZE
    items, total, unread_count = await notification_service.list_notifications(
        current_user, db, page=page, limit=limit, unread_only=unread_only
    )

    pages = (total + limit - 1) // limit  # Ceiling division

    return ok(
        {
            "items": items,
            "total": total,
            "page": page,
            "limit": limit,
            "pages": pages,
            "unread_count": unread_count,
        },
        count=len(items),
    )


@router.get(
    "/unread-count",
    response_model=ApiResponse[UnreadCountResponse],
    summary="Count unread notifications",
)
async def get_unread_count(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    count = await notification_service.get_unread_count(current_user.id, db)
    return ok({"count": count})


@router.put(
    "/read-all",
    response_model=ApiResponse[None],
    summary="Mark all notifications as read",
)
async def mark_all_as_read(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    updated = await notification_service.mark_all_as_read(current_user, db)
    return ok(message=f"{updated} notifications marked as read")


@router.delete(
    "/clear-read",
    response_model=ApiResponse[ClearReadResponse],
    summary="Delete all read notifications",
)
async def clear_read(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    deleted = await notification_service.clear_read(current_user, db)
    return ok({"deleted_count": deleted}, message="Read notifications cleared")


@router.put(
    "/{notification_id}/read",
    response_model=ApiResponse[NotificationResponse],
    summary="Mark a notification as read",
)
async def mark_as_read(
    notification_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    notification = await notification_service.mark_as_read(notification_id, current_user, db)
    return ok(notification)


@router.delete(
    "/{notification_id}",
    response_model=ApiResponse[None],
    summary="Delete a notification",
)
async def delete_notification(
    notification_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    await notification_service.delete_notification(notification_id, current_user, db)
    return ok(message="Notification deleted")
