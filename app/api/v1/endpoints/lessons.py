"""
Lesson Routes

Endpoints for browsing and managing the lessons of a course.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_roles
from app.core.database import get_db
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.course import LessonCreate, LessonReorder, LessonResponse, LessonUpdate
from app.services import lesson_service


router = APIRouter(prefix="/lessons", tags=["Lessons"])


@router.get(
    "/course/{course_id}",
    response_model=ApiResponse[List[LessonResponse]],
    summary="List the lessons of a course",
)
async def list_course_lessons(
    course_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Get a course's lessons in display order. Public."""
    lessons = await lesson_service.list_course_lessons(course_id, db)
    return ok(lessons)


@router.post(
    "/",
    response_model=ApiResponse[LessonResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add a lesson to a course",
)
async def create_lesson(
    lesson_data: LessonCreate,
    current_user: Annotated[User, Depends(require_roles(UserRole.PROVIDER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Append a lesson to one of the provider's courses.

    The lesson is placed after the current last lesson.
    """
    lesson = await lesson_service.create_lesson(lesson_data, current_user, db)
    return ok(lesson, message="Lesson created successfully")


@router.put(
    "/reorder",
    response_model=ApiResponse[List[LessonResponse]],
    summary="Reorder the lessons of a course",
)
async def reorder_lessons(
    reorder_data: LessonReorder,
    current_user: Annotated[User, Depends(require_roles(UserRole.PROVIDER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Set new positions for lessons of one of the provider's courses."""
    lessons = await lesson_service.reorder_lessons(
        reorder_data.course_id,
        reorder_data.lesson_orders,
        current_user,
        db,
    )
    return ok(lessons, message="Lessons reordered successfully")


@router.get(
    "/{lesson_id}",
    response_model=ApiResponse[LessonResponse],
    summary="Get a lesson",
)
async def get_lesson(
    lesson_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Get a single lesson. Public."""
    lesson = await lesson_service.get_lesson(lesson_id, db)
    return ok(lesson)


@router.put(
    "/{lesson_id}",
    response_model=ApiResponse[LessonResponse],
    summary="Update a lesson",
)
async def update_lesson(
    lesson_id: int,
    lesson_data: LessonUpdate,
    current_user: Annotated[User, Depends(require_roles(UserRole.PROVIDER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Edit a lesson of one of the provider's courses."""
    lesson = await lesson_service.update_lesson(lesson_id, lesson_data, current_user, db)
    return ok(lesson)


@router.delete(
    "/{lesson_id}",
    response_model=ApiResponse[None],
    summary="Delete a lesson",
)
async def delete_lesson(
    lesson_id: int,
    current_user: Annotated[User, Depends(require_roles(UserRole.PROVIDER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Remove a lesson from one of the provider's courses."""
    await lesson_service.delete_lesson(lesson_id, current_user, db)
    return ok(message="Lesson deleted successfully")
