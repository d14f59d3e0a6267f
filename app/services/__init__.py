"""
Edupress Backend - Services Module

Business logic layer.
"""

from app.services import notification_service
from app.services import discount_service
from app.services import enrollment_service
from app.services import progress_service
from app.services import review_service
from app.services import course_service
from app.services import lesson_service
from app.services import user_service
from app.services import admin_service

__all__ = [
    "notification_service",
    "discount_service",
    "enrollment_service",
    "progress_service",
    "review_service",
    "course_service",
    "lesson_service",
    "user_service",
    "admin_service",
]
