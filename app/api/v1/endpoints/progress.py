"""
Progress Routes

Endpoints for lesson access/completion tracking of enrolled students.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.progress import (
    CourseProgressResponse,
    LessonCompletionResponse,
    LessonProgressDetail,
    ProgressResponse,
)
from app.services import progress_service


router = APIRouter(prefix="/progress", tags=["Progress"])


@router.get(
    "/course/{course_id}",
    response_model=ApiResponse[CourseProgressResponse],
    summary="Get progress for a course",
)
async def get_course_progress(
    course_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Get the user's per-lesson progress and completion percentage.

    **Requirements:**
    - User must be enrolled in the course (403 otherwise)
    """
    progress, percentage = await progress_service.get_course_progress(
        user=current_user,
        course_id=course_id,
        db=db,
    )
    return ok({"progress": progress, "completion_percentage": percentage})


@router.get(
    "/lesson/{lesson_id}",
    response_model=ApiResponse[LessonProgressDetail],
    summary="Get progress for a lesson",
)
async def get_lesson_progress(
    lesson_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Get a lesson together with the user's progress on it, if any."""
    lesson, progress = await progress_service.get_lesson_progress(
        user=current_user,
        lesson_id=lesson_id,
        db=db,
    )
    return ok({"lesson": lesson, "progress": progress})


@router.post(
    "/lesson/{lesson_id}/access",
    response_model=ApiResponse[ProgressResponse],
    summary="Record a lesson visit",
)
async def mark_lesson_accessed(
    lesson_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Record that the user opened a lesson.

    Called when the lesson page loads. Creates the progress row on the
    first visit.
    """
    progress = await progress_service.mark_accessed(
        user=current_user,
        lesson_id=lesson_id,
        db=db,
    )
    return ok(progress)


@router.post(
    "/lesson/{lesson_id}/complete",
    response_model=ApiResponse[LessonCompletionResponse],
    summary="Mark a lesson as completed",
)
async def mark_lesson_completed(
    lesson_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Mark a lesson as completed and return the new course percentage.

    Completing a lesson twice is harmless; the first completion time
    is kept.
    """
    progress, percentage = await progress_service.mark_completed(
        user=current_user,
        lesson_id=lesson_id,
        db=db,
    )
    return ok(
        {"progress": progress, "completion_percentage": percentage},
        message="Lesson marked as completed",
    )
