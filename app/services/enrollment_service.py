"""
Enrollment Service

Course enrollment with optional discount codes.

An enrollment is written as a sequence of separate commits: the
enrollment row, discount usage, the course counter and finally the two
notifications. A failure part-way leaves the earlier steps in place, and
a code is only used up once its enrollment row is stored.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, DomainRuleError, NotFoundError
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.enums import CourseStatus, NotificationType
from app.models.user import User
from app.services import discount_service, notification_service


logger = logging.getLogger(__name__)


async def get_enrollment(
    user_id,
    course_id: int,
    db: AsyncSession,
) -> Optional[Enrollment]:
    """Get the enrollment of a user in a course, if any."""
    result = await db.execute(
        select(Enrollment).where(
            Enrollment.user_id == user_id,
            Enrollment.course_id == course_id,
        )
    )
    return result.scalar_one_or_none()


async def enroll(
    user: User,
    course_id: int,
    db: AsyncSession,
    discount_code: Optional[str] = None,
) -> Enrollment:
    """
    Enroll a user in an approved course.

    A discount code that is unknown, expired or used up is ignored and
    the full price is charged.

    Args:
        user: Enrolling user.
        course_id: Course to enroll in.
        db: Database session.
        discount_code: Optional discount code.

    Returns:
        The new Enrollment.

    Raises:
        NotFoundError: Course does not exist.
        DomainRuleError: Course is not approved.
        ConflictError: User is already enrolled.
    """
    result = await db.execute(select(Course).where(Course.id == course_id))
    course = result.scalar_one_or_none()

    if not course:
        raise NotFoundError("Course not found")

    if course.status != CourseStatus.APPROVED:
        raise DomainRuleError("This course is not available for enrollment")

    if await get_enrollment(user.id, course.id, db):
        raise ConflictError("You are already enrolled in this course")

    price_paid = course.price
    snapshot = None
    discount = None

    if discount_code:
        discount = await discount_service.find_valid_discount(discount_code, course.id, db)
        if discount:
            price_paid = discount_service.calculate_discounted_price(discount, course.price)
            snapshot = {
                "code": discount.code,
                "type": discount.type.value,
                "value": discount.value,
                "original_price": course.price,
                "discounted_price": price_paid,
            }
        else:
            logger.info(
                "Discount code %r not valid for course %s, charging full price",
                discount_code, course.id,
            )

    enrollment = Enrollment(
        user_id=user.id,
        course_id=course.id,
        price_paid=price_paid,
        discount_applied=snapshot,
    )
    db.add(enrollment)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("You are already enrolled in this course")

    if discount:
        await discount_service.increment_usage(discount, db)

    course.enrollment_count += 1
    await db.commit()

    logger.info(
        "User %s enrolled in course %s (paid %.2f)", user.id, course.id, price_paid
    )

    # A failed notification rolls the session back and expires every
    # loaded object, so read what the messages need up front.
    user_id, user_name = user.id, user.full_name
    title, provider_id = course.title, course.provider_id

    await notification_service.create_notification(
        db,
        user_id=user_id,
        type=NotificationType.ENROLLMENT,
        title="Enrollment Successful!",
        message=(
            f'You have successfully enrolled in "{title}". '
            "Start learning now!"
        ),
        link=f"/courses/{course_id}/lessons",
        related_course_id=course_id,
    )
    await notification_service.create_notification(
        db,
        user_id=provider_id,
        type=NotificationType.ENROLLMENT,
        title="New Student Enrolled!",
        message=f'{user_name} has enrolled in your course "{title}".',
        link=f"/course/{course_id}",
        related_course_id=course_id,
    )

    await db.refresh(enrollment)
    return enrollment


async def list_enrolled_courses(user: User, db: AsyncSession) -> List[Enrollment]:
    """
    Get the user's enrollments, newest first, with course and provider.
    """
    result = await db.execute(
        select(Enrollment)
        .where(Enrollment.user_id == user.id)
        .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
    )
    return list(result.scalars().all())
