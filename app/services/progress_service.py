"""
Progress Service

Business logic for lesson access/completion tracking and course
completion percentage.
"""

import logging
import math
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import utcnow
from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.models.enrollment import Enrollment
from app.models.lesson import Lesson
from app.models.lesson_progress import LessonProgress
from app.models.user import User
from app.services.enrollment_service import get_enrollment


logger = logging.getLogger(__name__)


async def get_lesson(lesson_id: int, db: AsyncSession) -> Lesson:
    """
    Get a lesson by ID.

    Raises:
        NotFoundError: If the lesson does not exist.
    """
    result = await db.execute(select(Lesson).where(Lesson.id == lesson_id))
    lesson = result.scalar_one_or_none()

    if not lesson:
        raise NotFoundError(f"Lesson with ID {lesson_id} not found")

    return lesson


async def require_enrollment(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> Enrollment:
    """
    Get the user's enrollment in a course.

    Raises:
        AuthorizationError: If the user is not enrolled.
    """
    enrollment = await get_enrollment(user.id, course_id, db)
    if not enrollment:
        raise AuthorizationError("You must be enrolled in this course")
    return enrollment


async def _find_progress(
    user: User,
    lesson_id: int,
    db: AsyncSession,
) -> Optional[LessonProgress]:
    result = await db.execute(
        select(LessonProgress).where(
            LessonProgress.user_id == user.id,
            LessonProgress.lesson_id == lesson_id,
        )
    )
    return result.scalar_one_or_none()


async def _load_progress(progress_id: int, db: AsyncSession) -> LessonProgress:
    result = await db.execute(
        select(LessonProgress)
        .where(LessonProgress.id == progress_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def get_or_create_progress(
    user: User,
    lesson: Lesson,
    db: AsyncSession,
) -> LessonProgress:
    """
    Get the user's progress row for a lesson, creating it on first touch.

    Raises:
        ConflictError: If a concurrent request created the row first.
    """
    progress = await _find_progress(user, lesson.id, db)
    if progress:
        return progress

    progress = LessonProgress(
        user_id=user.id,
        course_id=lesson.course_id,
        lesson_id=lesson.id,
        completed=False,
        last_accessed_at=utcnow(),
    )
    db.add(progress)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Progress for this lesson is already being recorded")

    return progress


async def get_completion_percentage(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> int:
    """
    Compute how much of a course the user has completed.

    Only completed rows whose lesson still belongs to the course are
    counted, so the result stays within 0..100. A course with no
    lessons is 0% complete.

    Returns:
        Whole percentage, rounded half up.
    """
    total_result = await db.execute(
        select(func.count(Lesson.id)).where(Lesson.course_id == course_id)
    )
    total = total_result.scalar() or 0

    if total == 0:
        return 0

    completed_result = await db.execute(
        select(func.count(LessonProgress.id))
        .join(Lesson, Lesson.id == LessonProgress.lesson_id)
        .where(
            LessonProgress.user_id == user.id,
            LessonProgress.completed.is_(True),
            Lesson.course_id == course_id,
        )
    )
    completed = completed_result.scalar() or 0

    return math.floor(100 * completed / total + 0.5)


def _record_on_enrollment(
    enrollment: Enrollment,
    lesson_id: int,
    percentage: Optional[int] = None,
) -> None:
    enrollment.last_accessed_lesson_id = lesson_id

    if percentage is None:
        return

    enrollment.progress = percentage
    if percentage >= 100 and enrollment.completed_at is None:
        enrollment.completed_at = utcnow()


async def mark_accessed(
    user: User,
    lesson_id: int,
    db: AsyncSession,
) -> LessonProgress:
    """
    Record that the user opened a lesson.

    Creates the progress row on first access, otherwise bumps
    ``last_accessed_at``.

    Raises:
        NotFoundError: Lesson does not exist.
        AuthorizationError: User is not enrolled in the lesson's course.
    """
    lesson = await get_lesson(lesson_id, db)
    enrollment = await require_enrollment(user, lesson.course_id, db)

    progress = await get_or_create_progress(user, lesson, db)
    progress.last_accessed_at = utcnow()
    _record_on_enrollment(enrollment, lesson.id)

    await db.commit()
    return await _load_progress(progress.id, db)


async def mark_completed(
    user: User,
    lesson_id: int,
    db: AsyncSession,
) -> Tuple[LessonProgress, int]:
    """
    Mark a lesson as completed.

    Idempotent: completing an already completed lesson changes nothing,
    including ``completed_at``.

    Returns:
        Tuple of (progress row, course completion percentage).

    Raises:
        NotFoundError: Lesson does not exist.
        AuthorizationError: User is not enrolled in the lesson's course.
    """
    lesson = await get_lesson(lesson_id, db)
    enrollment = await require_enrollment(user, lesson.course_id, db)
    course_id = lesson.course_id

    progress = await get_or_create_progress(user, lesson, db)

    if progress.completed:
        percentage = await get_completion_percentage(user, course_id, db)
        return progress, percentage

    now = utcnow()
    progress.completed = True
    progress.completed_at = now
    progress.last_accessed_at = now
    await db.flush()

    percentage = await get_completion_percentage(user, course_id, db)
    _record_on_enrollment(enrollment, lesson.id, percentage)

    await db.commit()
    logger.info(
        "User %s completed lesson %s (course %s at %d%%)",
        user.id, lesson.id, course_id, percentage,
    )

    return await _load_progress(progress.id, db), percentage


async def get_course_progress(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> Tuple[List[LessonProgress], int]:
    """
    Get every progress row of the user for a course with its lesson.

    Returns:
        Tuple of (progress rows in lesson order, completion percentage).

    Raises:
        AuthorizationError: User is not enrolled in the course.
    """
    await require_enrollment(user, course_id, db)

    result = await db.execute(
        select(LessonProgress)
        .join(Lesson, Lesson.id == LessonProgress.lesson_id)
        .where(
            LessonProgress.user_id == user.id,
            LessonProgress.course_id == course_id,
        )
        .order_by(Lesson.order, LessonProgress.id)
    )
    progress = list(result.scalars().all())

    percentage = await get_completion_percentage(user, course_id, db)
    return progress, percentage


async def get_lesson_progress(
    user: User,
    lesson_id: int,
    db: AsyncSession,
) -> Tuple[Lesson, Optional[LessonProgress]]:
    """
    Get a lesson together with the user's progress on it.

    Raises:
        NotFoundError: Lesson does not exist.
        AuthorizationError: User is not enrolled in the lesson's course.
    """
    lesson = await get_lesson(lesson_id, db)
    await require_enrollment(user, lesson.course_id, db)

    progress = await _find_progress(user, lesson.id, db)
    return lesson, progress
