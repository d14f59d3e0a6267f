"""
Review Service

Course reviews and the denormalized course rating they feed.
"""

import logging
import math
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.models.course import Course
from app.models.enums import NotificationType, UserRole
from app.models.review import Review
from app.models.user import User
from app.schemas.review import ReviewCreate, ReviewUpdate
from app.services import notification_service
from app.services.enrollment_service import get_enrollment


logger = logging.getLogger(__name__)


async def _get_course(course_id: int, db: AsyncSession) -> Course:
    result = await db.execute(select(Course).where(Course.id == course_id))
    course = result.scalar_one_or_none()

    if not course:
        raise NotFoundError("Course not found")

    return course


async def _load_review(review_id: int, db: AsyncSession) -> Review:
    result = await db.execute(
        select(Review)
        .where(Review.id == review_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _get_review(review_id: int, db: AsyncSession) -> Review:
    result = await db.execute(select(Review).where(Review.id == review_id))
    review = result.scalar_one_or_none()

    if not review:
        raise NotFoundError("Review not found")

    return review


async def recompute_rating(course_id: int, db: AsyncSession) -> None:
    """
    Recalculate a course's average rating and review count.

    The average is rounded half up to one decimal. With no reviews left
    both values reset to 0.
    """
    result = await db.execute(
        select(func.avg(Review.rating), func.count(Review.id)).where(
            Review.course_id == course_id
        )
    )
    average, count = result.one()

    course = await _get_course(course_id, db)

    if not count:
        course.average_rating = 0.0
        course.total_reviews = 0
    else:
        course.average_rating = math.floor(float(average) * 10 + 0.5) / 10
        course.total_reviews = count

    await db.commit()


async def create_review(
    user: User,
    data: ReviewCreate,
    db: AsyncSession,
) -> Review:
    """
    Review a course the user is enrolled in.

    Recomputes the course rating and notifies the provider.

    Raises:
        NotFoundError: Course does not exist.
        AuthorizationError: User is not enrolled.
        ConflictError: User already reviewed this course.
    """
    course = await _get_course(data.course_id, db)

    if not await get_enrollment(user.id, course.id, db):
        raise AuthorizationError("You must be enrolled in this course to leave a review")

    existing = await db.execute(
        select(Review.id).where(
            Review.course_id == course.id,
            Review.user_id == user.id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("You have already reviewed this course")

    review = Review(
        course_id=course.id,
        user_id=user.id,
        rating=data.rating,
        comment=data.comment,
    )
    db.add(review)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("You have already reviewed this course")

    review_id = review.id
    course_id, title, provider_id = course.id, course.title, course.provider_id
    author = user.full_name or "A student"

    await recompute_rating(course_id, db)
    logger.info("User %s reviewed course %s with %d stars", user.id, course_id, data.rating)

    await notification_service.create_notification(
        db,
        user_id=provider_id,
        type=NotificationType.REVIEW,
        title="New Review Received! ⭐",
        message=(
            f'{author} left a {data.rating}-star review on your course "{title}".'
        ),
        link=f"/courses/{course_id}/review",
        related_course_id=course_id,
    )

    return await _load_review(review_id, db)


async def update_review(
    user: User,
    review_id: int,
    data: ReviewUpdate,
    db: AsyncSession,
) -> Review:
    """
    Edit the user's own review and recompute the course rating.

    Raises:
        NotFoundError: Review does not exist.
        AuthorizationError: Review belongs to someone else.
    """
    review = await _get_review(review_id, db)

    if review.user_id != user.id:
        raise AuthorizationError("Not authorized to update this review")

    if data.rating is not None:
        review.rating = data.rating
    if data.comment is not None:
        review.comment = data.comment

    await db.commit()
    await recompute_rating(review.course_id, db)

    return await _load_review(review.id, db)


async def delete_review(user: User, review_id: int, db: AsyncSession) -> None:
    """
    Delete a review. Allowed for its author and for admins.

    Raises:
        NotFoundError: Review does not exist.
        AuthorizationError: Caller is neither author nor admin.
    """
    review = await _get_review(review_id, db)

    if review.user_id != user.id and user.role != UserRole.ADMIN:
        raise AuthorizationError("Not authorized to delete this review")

    course_id = review.course_id
    await db.delete(review)
    await db.commit()

    await recompute_rating(course_id, db)


async def list_course_reviews(course_id: int, db: AsyncSession) -> List[Review]:
    """Get a course's reviews, newest first, with their authors."""
    await _get_course(course_id, db)

    result = await db.execute(
        select(Review)
        .where(Review.course_id == course_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(result.scalars().all())


async def get_my_review(
    user: User,
    course_id: int,
    db: AsyncSession,
) -> Optional[Review]:
    """Get the user's review of a course, if they wrote one."""
    result = await db.execute(
        select(Review).where(
            Review.course_id == course_id,
            Review.user_id == user.id,
        )
    )
    return result.scalar_one_or_none()
