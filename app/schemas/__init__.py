"""
Edupress Backend - Schemas Module

Pydantic models for request/response validation.
"""

from app.schemas.common import ApiResponse, ErrorResponse, ok
from app.schemas.user import (
    UserCreate,
    UserResponse,
    UserSummary,
    UserUpdate,
    AdminUserUpdate,
    AuthResponse,
)
from app.schemas.token import Token, TokenPayload
from app.schemas.course import (
    CourseCreate,
    CourseUpdate,
    CourseResponse,
    CourseDetailResponse,
    CourseSort,
    LessonCreate,
    LessonUpdate,
    LessonReorder,
    LessonResponse,
)
from app.schemas.progress import (
    EnrollRequest,
    EnrollmentResponse,
    EnrolledCourseResponse,
    ProgressResponse,
    CourseProgressResponse,
)
from app.schemas.review import ReviewCreate, ReviewUpdate, ReviewResponse
from app.schemas.discount import (
    DiscountCreate,
    DiscountUpdate,
    DiscountResponse,
    DiscountValidateRequest,
    DiscountPreview,
)
from app.schemas.notification import NotificationResponse, NotificationListResponse
from app.schemas.admin import SystemStats

__all__ = [
    # Envelope
    "ApiResponse",
    "ErrorResponse",
    "ok",
    # User
    "UserCreate",
    "UserResponse",
    "UserSummary",
    "UserUpdate",
    "AdminUserUpdate",
    "AuthResponse",
    # Token
    "Token",
    "TokenPayload",
    # Course
    "CourseCreate",
    "CourseUpdate",
    "CourseResponse",
    "CourseDetailResponse",
    "CourseSort",
    "LessonCreate",
    "LessonUpdate",
    "LessonReorder",
    "LessonResponse",
    # Progress
    "EnrollRequest",
    "EnrollmentResponse",
    "EnrolledCourseResponse",
    "ProgressResponse",
    "CourseProgressResponse",
    # Review
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    # Discount
    "DiscountCreate",
    "DiscountUpdate",
    "DiscountResponse",
    "DiscountValidateRequest",
    "DiscountPreview",
    # Notification
    "NotificationResponse",
    "NotificationListResponse",
    # Admin
    "SystemStats",
]
