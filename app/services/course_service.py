"""
Course Service

Business logic for the course catalog and provider course management.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.models.course import Course
from app.models.enums import CourseStatus, UserRole
from app.models.user import User
from app.schemas.course import CourseCreate, CourseSort, CourseUpdate


logger = logging.getLogger(__name__)


SORT_ORDERS = {
    CourseSort.NEWEST: (Course.created_at.desc(),),
    CourseSort.PRICE_ASC: (Course.price.asc(),),
    CourseSort.PRICE_DESC: (Course.price.desc(),),
    CourseSort.RATING: (Course.average_rating.desc(), Course.total_reviews.desc()),
    CourseSort.POPULAR: (Course.enrollment_count.desc(),),
}


def search_filter(search: str):
    """Case-insensitive match on title, description or category."""
    term = f"%{search.lower()}%"
    return or_(
        func.lower(Course.title).like(term),
        func.lower(Course.description).like(term),
        func.lower(Course.category).like(term),
    )


async def _title_taken(
    title: str,
    db: AsyncSession,
    exclude_id: Optional[int] = None,
) -> bool:
    query = select(Course.id).where(Course.title == title)
    if exclude_id is not None:
        query = query.where(Course.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def get_course_by_id(
    course_id: int,
    db: AsyncSession,
) -> Course:
    """
    Get a specific course by ID with provider and lessons loaded.

    Args:
        course_id: Course ID.
        db: Database session.

    Returns:
        Course object.

    Raises:
        NotFoundError: If course not found.
    """
    result = await db.execute(
        select(Course)
        .where(Course.id == course_id)
        .execution_options(populate_existing=True)
    )
    course = result.scalar_one_or_none()

    if not course:
        raise NotFoundError("Course not found")

    return course


async def get_owned_course(
    course_id: int,
    user: User,
    db: AsyncSession,
    action: str = "modify",
) -> Course:
    """
    Get a course the user owns.

    Raises:
        NotFoundError: If course not found.
        AuthorizationError: If the user is not the course's provider.
    """
    course = await get_course_by_id(course_id, db)

    if course.provider_id != user.id:
        raise AuthorizationError(f"Not authorized to {action} this course")

    return course


async def create_course(
    data: CourseCreate,
    user: User,
    db: AsyncSession,
) -> Course:
    """
    Create a new course for review by an admin.

    The course starts in PENDING status and is invisible in the
    public catalog until approved.

    Args:
        data: Course fields.
        user: Current provider.
        db: Database session.

    Returns:
        Created Course.

    Raises:
        ConflictError: If the title is already used by another course.
    """
    if await _title_taken(data.title, db):
        raise ConflictError("Course with this title already exists")

    course = Course(
        provider_id=user.id,
        title=data.title,
        description=data.description,
        price=data.price,
        thumbnail_url=data.thumbnail_url,
        category=data.category,
        status=CourseStatus.PENDING,
    )
    db.add(course)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Course with this title already exists")

    logger.info("Course %s created by provider %s", course.id, user.id)
    return await get_course_by_id(course.id, db)


async def list_approved_courses(
    db: AsyncSession,
    search: Optional[str] = None,
    category: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    sort: CourseSort = CourseSort.NEWEST,
) -> List[Course]:
    """
    Get the public catalog of approved courses.

    Args:
        db: Database session.
        search: Optional search term for title, description or category.
        category: Optional exact category.
        min_price: Optional lower price bound.
        max_price: Optional upper price bound.
        sort: Sort order, newest first by default.

    Returns:
        List of approved courses.
    """
    query = select(Course).where(Course.status == CourseStatus.APPROVED)

    if search:
        query = query.where(search_filter(search))
    if category:
        query = query.where(Course.category == category)
    if min_price is not None:
        query = query.where(Course.price >= min_price)
    if max_price is not None:
        query = query.where(Course.price <= max_price)

    result = await db.execute(
        query.order_by(*SORT_ORDERS[sort], Course.id.desc())
    )
    return list(result.scalars().all())


async def get_course(
    course_id: int,
    db: AsyncSession,
    viewer: Optional[User] = None,
) -> Course:
    """
    Get a course for display.

    Courses that are not approved are only visible to their provider
    and to admins.

    Raises:
        NotFoundError: If course not found.
        AuthorizationError: If the course is not visible to the viewer.
    """
    course = await get_course_by_id(course_id, db)

    if course.status != CourseStatus.APPROVED:
        is_owner = viewer is not None and viewer.id == course.provider_id
        is_admin = viewer is not None and viewer.role == UserRole.ADMIN
        if not (is_owner or is_admin):
            raise AuthorizationError("Course is not available")

    return course


async def update_course(
    course_id: int,
    data: CourseUpdate,
    user: User,
    db: AsyncSession,
) -> Course:
    """
    Edit a course.

    Editing a rejected course puts it back into the moderation queue.

    Raises:
        NotFoundError: If course not found.
        AuthorizationError: If the user is not the provider.
        ConflictError: If the new title is already used.
    """
    course = await get_owned_course(course_id, user, db, "update")
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if "title" in changes and await _title_taken(changes["title"], db, course.id):
        raise ConflictError("Course with this title already exists")

    for field, value in changes.items():
        setattr(course, field, value)

    if course.status == CourseStatus.REJECTED:
        course.status = CourseStatus.PENDING
        logger.info("Rejected course %s resubmitted for review", course.id)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Course with this title already exists")

    return await get_course_by_id(course_id, db)


async def delete_course(course_id: int, user: User, db: AsyncSession) -> None:
    """
    Delete a course and its lessons.

    Raises:
        NotFoundError: If course not found.
        AuthorizationError: If the user is not the provider.
    """
    course = await get_owned_course(course_id, user, db, "delete")
    await db.delete(course)
    await db.commit()
    logger.info("Course %s deleted by provider %s", course_id, user.id)


async def list_provider_courses(user: User, db: AsyncSession) -> List[Course]:
    """
    Get all courses created by a provider, newest first.

    Args:
        user: Provider user.
        db: Database session.

    Returns:
        List of the provider's courses in any status.
    """
    result = await db.execute(
        select(Course)
        .where(Course.provider_id == user.id)
        .order_by(Course.created_at.desc(), Course.id.desc())
    )
    return list(result.scalars().all())
