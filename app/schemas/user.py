"""
User Schemas

Pydantic models for user request/response validation.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.models.enums import UserRole, UserStatus


class UserCreate(BaseModel):
    """Schema for registering a new customer account."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    full_name: str = Field(..., min_length=1, max_length=255, description="User's full name")


class UserResponse(BaseModel):
    """Schema for user response (excludes password)."""

    id: uuid.UUID
    email: str
    full_name: str
    role: UserRole
    status: UserStatus
    avatar_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Public author/provider card embedded in other resources."""

    id: uuid.UUID
    full_name: str
    avatar_url: Optional[str] = None

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Schema for updating the current user's profile."""

    email: Optional[EmailStr] = Field(None, description="New email address")
    full_name: Optional[str] = Field(None, min_length=1, max_length=255, description="New full name")
    avatar_url: Optional[str] = Field(None, max_length=512, description="New avatar URL")
    password: Optional[str] = Field(None, min_length=6, description="New password")


class AdminUserUpdate(BaseModel):
    """Schema for admin edits to any account."""

    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    avatar_url: Optional[str] = Field(None, max_length=512)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None


class AuthResponse(UserResponse):
    """User profile plus a freshly issued access token."""

    token: str
