"""
Discount Schemas

Pydantic models for discount code management and checkout preview.
"""

from datetime import datetime
from typing import Optional
import uuid

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.models.enums import DiscountType


def _normalize_code(value: str) -> str:
    return value.strip().upper()


class DiscountCreate(BaseModel):
    """
    Schema for creating a discount code.

    Cross-field rules (end after start, percentage at most 100) are checked
    by the discount service so every violation is reported together.
    """

    code: str = Field(..., min_length=3, max_length=20)
    course_id: int = Field(..., validation_alias=AliasChoices("course_id", "courseId"))
    type: DiscountType
    value: float = Field(..., ge=0)
    max_uses: Optional[int] = Field(None, ge=1, description="Omit for unlimited uses")
    start_date: datetime
    end_date: datetime
    description: Optional[str] = Field(None, max_length=200)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        value = _normalize_code(value)
        if len(value) < 3:
            raise ValueError("Code must be at least 3 characters")
        return value


class DiscountUpdate(BaseModel):
    """Schema for editing a discount. Code, course and type are fixed."""

    value: Optional[float] = Field(None, ge=0)
    max_uses: Optional[int] = Field(None, ge=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: Optional[str] = Field(None, max_length=200)
    active: Optional[bool] = None


class DiscountCourse(BaseModel):
    """Course card embedded in discount responses."""

    id: int
    title: str
    price: float

    model_config = {"from_attributes": True}


class DiscountResponse(BaseModel):
    """Schema for discount response."""

    id: int
    code: str
    course_id: int
    course: Optional[DiscountCourse] = None
    provider_id: uuid.UUID
    type: DiscountType
    value: float
    max_uses: Optional[int] = None
    used_count: int
    start_date: datetime
    end_date: datetime
    active: bool
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class DiscountValidateRequest(BaseModel):
    """Schema for the public checkout preview."""

    code: str = Field(..., min_length=1, max_length=20)
    course_id: int = Field(..., validation_alias=AliasChoices("course_id", "courseId"))


class DiscountPreview(BaseModel):
    """Price breakdown for a valid code."""

    valid: bool = True
    code: str
    type: DiscountType
    value: float
    original_price: float
    discounted_price: float
    savings: float
