"""
Notification Schemas

Pydantic models for in-app notifications.
"""

from datetime import datetime
from typing import List, Optional
import uuid

from pydantic import BaseModel

from app.models.enums import NotificationType


class NotificationResponse(BaseModel):
    """Schema for notification response."""

    id: int
    user_id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    link: Optional[str] = None
    related_course_id: Optional[int] = None
    read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    """Schema for a page of notifications."""

    items: List[NotificationResponse]
    total: int
    page: int
    limit: int
    pages: int
    unread_count: int


class UnreadCountResponse(BaseModel):
    count: int


class ClearReadResponse(BaseModel):
    deleted_count: int
