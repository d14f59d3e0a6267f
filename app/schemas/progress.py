"""
Progress Schemas

Pydantic models for enrollment and lesson progress tracking.
"""

from datetime import datetime
from typing import List, Optional
import uuid

from pydantic import AliasChoices, BaseModel, Field

from app.models.enums import DiscountType
from app.schemas.course import CourseResponse, LessonResponse, LessonSummary


class EnrollRequest(BaseModel):
    """Schema for enrolling in a course."""

    discount_code: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("discount_code", "discountCode"),
        max_length=20,
        description="Optional discount code; an invalid code falls back to full price",
    )


class DiscountSnapshot(BaseModel):
    """Discount details frozen into an enrollment at checkout."""

    code: str
    type: DiscountType
    value: float
    original_price: float
    discounted_price: float


class EnrollmentResponse(BaseModel):
    """Schema for enrollment response."""

    id: int
    user_id: uuid.UUID
    course_id: int
    enrolled_at: datetime
    price_paid: float
    discount_applied: Optional[DiscountSnapshot] = None
    progress: int
    last_accessed_lesson_id: Optional[int] = None
    completed_at: Optional[datetime] = None
    certificate_issued: bool

    model_config = {"from_attributes": True}


class EnrolledCourseResponse(EnrollmentResponse):
    """Enrollment with its course, for the "my courses" page."""

    course: CourseResponse


class ProgressResponse(BaseModel):
    """Schema for a single lesson progress row."""

    id: int
    lesson_id: int
    course_id: int
    completed: bool
    completed_at: Optional[datetime] = None
    last_accessed_at: datetime
    lesson: Optional[LessonSummary] = None

    model_config = {"from_attributes": True}


class CourseProgressResponse(BaseModel):
    """Schema for a user's progress across a course."""

    progress: List[ProgressResponse]
    completion_percentage: int = Field(..., ge=0, le=100)


class LessonCompletionResponse(BaseModel):
    """Schema returned after completing a lesson."""

    progress: ProgressResponse
    completion_percentage: int = Field(..., ge=0, le=100)


class LessonProgressDetail(BaseModel):
    """Schema for a lesson together with the caller's progress on it."""

    lesson: LessonResponse
    progress: Optional[ProgressResponse] = None
