"""
Lesson Service

Business logic for the ordered lessons of a course.
"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.lesson import Lesson
from app.models.user import User
from app.schemas.course import LessonCreate, LessonOrder, LessonUpdate
from app.services.course_service import get_course_by_id, get_owned_course


logger = logging.getLogger(__name__)


async def list_course_lessons(course_id: int, db: AsyncSession) -> List[Lesson]:
    """Get the lessons of a course in display order."""
    await get_course_by_id(course_id, db)

    result = await db.execute(
        select(Lesson)
        .where(Lesson.course_id == course_id)
        .order_by(Lesson.order, Lesson.id)
    )
    return list(result.scalars().all())


async def get_lesson(lesson_id: int, db: AsyncSession) -> Lesson:
    """
    Get a lesson by ID.

    Raises:
        NotFoundError: If lesson not found.
    """
    result = await db.execute(select(Lesson).where(Lesson.id == lesson_id))
    lesson = result.scalar_one_or_none()

    if not lesson:
        raise NotFoundError("Lesson not found")

    return lesson


async def _get_owned_lesson(
    lesson_id: int,
    user: User,
    db: AsyncSession,
    action: str,
) -> Lesson:
    lesson = await get_lesson(lesson_id, db)
    await get_owned_course(lesson.course_id, user, db, action)
    return lesson


async def create_lesson(
    data: LessonCreate,
    user: User,
    db: AsyncSession,
) -> Lesson:
    """
    Append a lesson to one of the provider's courses.

    The lesson goes after the current last lesson; the first lesson of a
    course gets order 1.

    Args:
        data: Lesson fields including the course ID.
        user: Current provider.
        db: Database session.

    Returns:
        Created Lesson.

    Raises:
        NotFoundError: If the course does not exist.
        AuthorizationError: If the user is not the course's provider.
    """
    course = await get_owned_course(data.course_id, user, db, "add lessons to")

    result = await db.execute(
        select(func.max(Lesson.order)).where(Lesson.course_id == course.id)
    )
    last_order = result.scalar()

    lesson = Lesson(
        course_id=course.id,
        title=data.title,
        video_url=data.video_url,
        duration=data.duration,
        order=(last_order or 0) + 1,
        description=data.description,
        content=data.content,
        resources=[resource.model_dump(mode="json") for resource in data.resources],
        is_free=data.is_free,
    )
    db.add(lesson)
    await db.commit()
    await db.refresh(lesson)

    logger.info("Lesson %s added to course %s at position %d", lesson.id, course.id, lesson.order)
    return lesson


async def update_lesson(
    lesson_id: int,
    data: LessonUpdate,
    user: User,
    db: AsyncSession,
) -> Lesson:
    """Edit a lesson of one of the provider's courses."""
    lesson = await _get_owned_lesson(lesson_id, user, db, "update lessons of")
    changes = data.model_dump(exclude_unset=True, exclude_none=True, mode="json")

    for field, value in changes.items():
        setattr(lesson, field, value)

    await db.commit()
    await db.refresh(lesson)
    return lesson


async def delete_lesson(lesson_id: int, user: User, db: AsyncSession) -> None:
    """Remove a lesson from one of the provider's courses."""
    lesson = await _get_owned_lesson(lesson_id, user, db, "delete lessons of")
    await db.delete(lesson)
    await db.commit()


async def reorder_lessons(
    course_id: int,
    lesson_orders: List[LessonOrder],
    user: User,
    db: AsyncSession,
) -> List[Lesson]:
    """
    Reposition lessons within a course.

    Entries naming lessons of other courses are ignored.

    Returns:
        The course's lessons in their new order.
    """
    await get_owned_course(course_id, user, db, "reorder lessons of")

    result = await db.execute(
        select(Lesson).where(
            Lesson.course_id == course_id,
            Lesson.id.in_([item.lesson_id for item in lesson_orders]),
        )
    )
    lessons = {lesson.id: lesson for lesson in result.scalars().all()}

    for item in lesson_orders:
        lesson = lessons.get(item.lesson_id)
        if lesson is not None:
            lesson.order = item.order

    await db.commit()
    return await list_course_lessons(course_id, db)
