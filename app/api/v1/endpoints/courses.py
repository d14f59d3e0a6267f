"""
Course Routes

Endpoints for the public catalog, provider course management and
enrollment.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_optional, require_roles
from app.core.database import get_db
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.course import (
    CourseCreate,
    CourseDetailResponse,
    CourseResponse,
    CourseSort,
    CourseUpdate,
)
from app.schemas.progress import EnrolledCourseResponse, EnrollmentResponse, EnrollRequest
from app.services import course_service, enrollment_service


router = APIRouter(prefix="/courses", tags=["Courses"])


@router.get(
    "/provider/my-courses",
    response_model=ApiResponse[List[CourseResponse]],
    summary="List courses created by the current provider",
)
async def list_my_courses(
    current_user: Annotated[User, Depends(require_roles(UserRole.PROVIDER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Get every course of the authenticated provider in any status,
    newest first.
    """
    courses = await course_service.list_provider_courses(current_user, db)
    return ok(courses)


@router.get(
    "/customer/enrolled",
    response_model=ApiResponse[List[EnrolledCourseResponse]],
    summary="List courses the current customer is enrolled in",
)
async def list_enrolled_courses(
    current_user: Annotated[User, Depends(require_roles(UserRole.CUSTOMER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Get the customer's enrollments with their courses, newest first."""
    enrollments = await enrollment_service.list_enrolled_courses(current_user, db)
    return ok(enrollments)


@router.get(
    "/",
    response_model=ApiResponse[List[CourseResponse]],
    summary="List approved courses",
)
async def list_courses(
    db: Annotated[AsyncSession, Depends(get_db)],
    search: Optional[str] = Query(None, description="Search title, description or category"),
    category: Optional[str] = Query(None, description="Exact category"),
    min_price: Optional[float] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[float] = Query(None, ge=0, alias="maxPrice"),
    sort: CourseSort = Query(CourseSort.NEWEST, description="Sort order"),
) -> dict:
    """
    Get the public course catalog.

    This endpoint is public (no authentication required).
    Only approved courses are returned.
    """
    courses = await course_service.list_approved_courses(
        db=db,
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
    )
    return ok(courses)


@router.get(
    "/{course_id}",
    response_model=ApiResponse[CourseDetailResponse],
    summary="Get course details",
)
async def get_course(
    course_id: int,
    current_user: Annotated[Optional[User], Depends(get_current_user_optional)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Get a course with its ordered lessons.

    Courses that are not approved yet are only shown to their provider
    and to admins.
    """
    course = await course_service.get_course(course_id, db, viewer=current_user)
    return ok(course)


@router.post(
    "/",
    response_model=ApiResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a new course",
)
async def create_course(
    course_data: CourseCreate,
    current_user: Annotated[User, Depends(require_roles(UserRole.PROVIDER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Create a new course.

    **Requirements:**
    - User must have PROVIDER role
    - Title must not be used by another course

    The course starts as pending and is published once an admin
    approves it.
    """
    course = await course_service.create_course(course_data, current_user, db)
    return ok(course, message="Course created successfully. Waiting for admin approval.")


@router.put(
    "/{course_id}",
    response_model=ApiResponse[CourseResponse],
    summary="Update a course",
)
async def update_course(
    course_id: int,
    course_data: CourseUpdate,
    current_user: Annotated[User, Depends(require_roles(UserRole.PROVIDER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Edit one of the provider's courses.

    Editing a rejected course sends it back to the moderation queue.
    """
    course = await course_service.update_course(course_id, course_data, current_user, db)
    return ok(course)


@router.delete(
    "/{course_id}",
    response_model=ApiResponse[None],
    summary="Delete a course",
)
async def delete_course(
    course_id: int,
    current_user: Annotated[User, Depends(require_roles(UserRole.PROVIDER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Delete one of the provider's courses together with its lessons."""
    await course_service.delete_course(course_id, current_user, db)
    return ok(message="Course deleted successfully")


@router.post(
    "/{course_id}/enroll",
    response_model=ApiResponse[EnrollmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in a course",
)
async def enroll(
    course_id: int,
    current_user: Annotated[User, Depends(require_roles(UserRole.CUSTOMER))],
    db: Annotated[AsyncSession, Depends(get_db)],
    enroll_data: Annotated[Optional[EnrollRequest], Body()] = None,
) -> dict:
    """
    Enroll the current customer in an approved course.

    **Flow:**
    1. Check the course is approved and the user is not enrolled yet
    2. Apply the discount code if it is valid (an invalid code is
       ignored and the full price is charged)
    3. Record the enrollment and bump the course's enrollment count
    4. Notify the student and the provider
    """
    discount_code = enroll_data.discount_code if enroll_data else None
    enrollment = await enrollment_service.enroll(
        current_user, course_id, db, discount_code=discount_code
    )
    return ok(enrollment, message="Successfully enrolled in course")
