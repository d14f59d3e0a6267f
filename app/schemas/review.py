"""
Review Schemas

Pydantic models for course reviews.
"""

from datetime import datetime
from typing import Optional
import uuid

from pydantic import AliasChoices, BaseModel, Field

from app.schemas.user import UserSummary


class ReviewCreate(BaseModel):
    """Schema for reviewing a course."""

    course_id: int = Field(..., validation_alias=AliasChoices("course_id", "courseId"))
    rating: int = Field(..., ge=1, le=5, description="Whole-star rating from 1 to 5")
    comment: str = Field(..., min_length=1, max_length=500)


class ReviewUpdate(BaseModel):
    """Schema for editing a review. Only provided fields change."""

    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, min_length=1, max_length=500)


class ReviewResponse(BaseModel):
    """Schema for review response."""

    id: int
    course_id: int
    user_id: uuid.UUID
    user: Optional[UserSummary] = None
    rating: int
    comment: str
    helpful_votes: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
