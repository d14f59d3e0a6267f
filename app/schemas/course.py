"""
Course Schemas

Pydantic models for course and lesson request/response validation.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
import uuid

from pydantic import AliasChoices, BaseModel, Field

from app.models.enums import CourseStatus, ResourceType
from app.schemas.user import UserSummary


# ============== Lesson Schemas ==============

class LessonResource(BaseModel):
    """Attachment listed under a lesson."""

    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1, max_length=500)
    type: ResourceType = ResourceType.OTHER


class LessonCreate(BaseModel):
    """Schema for adding a lesson to a course."""

    course_id: int = Field(
        ...,
        validation_alias=AliasChoices("course_id", "courseId"),
        description="Course the lesson belongs to",
    )
    title: str = Field(..., min_length=1, max_length=200)
    video_url: str = Field(..., min_length=1, max_length=500)
    duration: int = Field(default=0, ge=0, description="Duration in minutes")
    description: Optional[str] = Field(None, max_length=1000)
    content: Optional[str] = None
    resources: List[LessonResource] = []
    is_free: bool = False


class LessonUpdate(BaseModel):
    """Schema for editing a lesson. Only provided fields change."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    video_url: Optional[str] = Field(None, min_length=1, max_length=500)
    duration: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=1000)
    content: Optional[str] = None
    resources: Optional[List[LessonResource]] = None
    is_free: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)


class LessonOrder(BaseModel):
    """New position for one lesson."""

    lesson_id: int = Field(..., validation_alias=AliasChoices("lesson_id", "lessonId"))
    order: int = Field(..., ge=0)


class LessonReorder(BaseModel):
    """Schema for reordering the lessons of a course."""

    course_id: int = Field(..., validation_alias=AliasChoices("course_id", "courseId"))
    lesson_orders: List[LessonOrder] = Field(
        ..., validation_alias=AliasChoices("lesson_orders", "lessonOrders")
    )


class LessonResponse(BaseModel):
    """Schema for lesson response."""

    id: int
    course_id: int
    title: str
    video_url: str
    duration: int
    order: int
    description: Optional[str] = None
    content: Optional[str] = None
    resources: List[LessonResource] = []
    is_free: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class LessonSummary(BaseModel):
    """Lesson card embedded in progress responses."""

    id: int
    title: str
    order: int
    duration: int

    model_config = {"from_attributes": True}


# ============== Course Schemas ==============

class CourseSort(str, Enum):
    """Sort options for the public catalog."""
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    RATING = "rating"
    POPULAR = "popular"


class CourseCreate(BaseModel):
    """Schema for creating a new course."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    price: float = Field(default=0, ge=0)
    thumbnail_url: str = Field(..., min_length=1, max_length=500)
    category: str = Field(..., min_length=1, max_length=100)


class CourseUpdate(BaseModel):
    """Schema for editing a course. The provider can never be changed."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    price: Optional[float] = Field(None, ge=0)
    thumbnail_url: Optional[str] = Field(None, min_length=1, max_length=500)
    category: Optional[str] = Field(None, min_length=1, max_length=100)


class CourseResponse(BaseModel):
    """Schema for course response."""

    id: int
    title: str
    description: str
    price: float
    thumbnail_url: str
    category: str
    status: CourseStatus
    provider_id: uuid.UUID
    provider: Optional[UserSummary] = None
    enrollment_count: int
    average_rating: float
    total_reviews: int
    created_at: datetime

    model_config = {"from_attributes": True}


class CourseDetailResponse(CourseResponse):
    """Schema for course detail with its ordered lessons."""

    lessons: List[LessonResponse] = []
