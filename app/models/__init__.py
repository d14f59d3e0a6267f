"""
Edupress Backend - Models Module

This module exports all SQLAlchemy models for the application.
Import Base for Alembic migrations.
"""

from app.core.database import Base

# Enums
from app.models.enums import (
    UserRole,
    UserStatus,
    CourseStatus,
    DiscountType,
    NotificationType,
    ResourceType,
)

# Models
from app.models.user import User
from app.models.course import Course
from app.models.lesson import Lesson
from app.models.enrollment import Enrollment
from app.models.lesson_progress import LessonProgress
from app.models.review import Review
from app.models.discount import Discount
from app.models.notification import Notification

__all__ = [
    # Base
    "Base",
    # Enums
    "UserRole",
    "UserStatus",
    "CourseStatus",
    "DiscountType",
    "NotificationType",
    "ResourceType",
    # Models
    "User",
    "Course",
    "Lesson",
    "Enrollment",
    "LessonProgress",
    "Review",
    "Discount",
    "Notification",
]
