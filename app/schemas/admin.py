"""
Admin Schemas

Pydantic models for the administration dashboard.
"""

from pydantic import BaseModel, Field


class UserStats(BaseModel):
    total: int
    customers: int
    providers: int
    pending_providers: int


class CourseStats(BaseModel):
    total: int
    approved: int
    pending: int
    rejected: int


class SystemStats(BaseModel):
    """Aggregate platform counters."""

    users: UserStats
    courses: CourseStats
    enrollments: int
    revenue: float = Field(
        ...,
        description="Sum of the current list price of each enrolled course",
    )
    revenue_paid: float = Field(
        ...,
        description="Sum of the price actually paid on each enrollment",
    )
