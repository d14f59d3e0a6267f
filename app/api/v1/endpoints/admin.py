"""
Admin Routes

Moderation of users, provider requests and courses, plus platform
statistics. Every route requires the ADMIN role.
"""

import uuid
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_roles
from app.core.database import get_db
from app.models.enums import CourseStatus, UserRole, UserStatus
from app.models.user import User
from app.schemas.admin import SystemStats
from app.schemas.common import ApiResponse, ok
from app.schemas.course import CourseResponse
from app.schemas.user import AdminUserUpdate, UserResponse
from app.services import admin_service


admin_only = require_roles(UserRole.ADMIN)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(admin_only)],
)

AdminUser = Annotated[User, Depends(admin_only)]


# ============== Users ==============

@router.get(
    "/users",
    response_model=ApiResponse[List[UserResponse]],
    summary="List users",
)
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    role: Optional[UserRole] = Query(None),
    user_status: Optional[UserStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Search name or email"),
) -> dict:
    users = await admin_service.list_users(db, role=role, status=user_status, search=search)
    return ok(users)


@router.put(
    "/users/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Update a user",
)
async def update_user(
    user_id: uuid.UUID,
    user_data: AdminUserUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    user = await admin_service.update_user(user_id, user_data, db)
    return ok(user, message="User updated successfully")


@router.put(
    "/users/{user_id}/toggle-status",
    response_model=ApiResponse[UserResponse],
    summary="Activate or deactivate a user",
)
async def toggle_user_status(
    user_id: uuid.UUID,
    current_user: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Switch an account between active and inactive. Not allowed on yourself."""
    user = await admin_service.toggle_user_status(user_id, current_user, db)
    state = "activated" if user.status == UserStatus.ACTIVE else "deactivated"
    return ok(user, message=f"User {state} successfully")


@router.get(
    "/pending-providers",
    response_model=ApiResponse[List[UserResponse]],
    summary="List pending provider requests",
)
async def list_pending_providers(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    users = await admin_service.list_pending_providers(db)
    return ok(users)


@router.put(
    "/approve-provider/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Approve a provider request",
)
async def approve_provider(
    user_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Make the user a provider and notify them."""
    user = await admin_service.approve_provider(user_id, db)
    return ok(user, message="Provider request approved")


@router.put(
    "/reject-provider/{user_id}",
    response_model=ApiResponse[UserResponse],
    summary="Reject a provider request",
)
async def reject_provider(
    user_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Keep the user a customer and notify them."""
    user = await admin_service.reject_provider(user_id, db)
    return ok(user, message="Provider request rejected")


# ============== Courses ==============

@router.get(
    "/courses",
    response_model=ApiResponse[List[CourseResponse]],
    summary="List courses in any status",
)
async def list_courses(
    db: Annotated[AsyncSession, Depends(get_db)],
    course_status: Optional[CourseStatus] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
) -> dict:
    courses = await admin_service.list_courses(
        db, status=course_status, category=category, search=search
    )
    return ok(courses)


@router.get(
    "/pending-courses",
    response_model=ApiResponse[List[CourseResponse]],
    summary="List courses awaiting approval",
)
async def list_pending_courses(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    courses = await admin_service.list_pending_courses(db)
    return ok(courses)


@router.put(
    "/approve-course/{course_id}",
    response_model=ApiResponse[CourseResponse],
    summary="Approve a course",
)
async def approve_course(
    course_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Publish a course in the catalog and notify its provider."""
    course = await admin_service.approve_course(course_id, db)
    return ok(course, message="Course approved successfully")


@router.put(
    "/reject-course/{course_id}",
    response_model=ApiResponse[CourseResponse],
    summary="Reject a course",
)
async def reject_course(
    course_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Reject a course and notify its provider."""
    course = await admin_service.reject_course(course_id, db)
    return ok(course, message="Course rejected")


# ============== Statistics ==============

@router.get(
    "/stats",
    response_model=ApiResponse[SystemStats],
    summary="Platform statistics",
)
async def get_system_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Get user, course and enrollment counters plus revenue.

    ``revenue`` sums the current price of each enrolled course;
    ``revenue_paid`` sums what students actually paid.
    """
    stats = await admin_service.get_system_stats(db)
    return ok(stats)
