"""
Admin Service

User and course moderation plus platform statistics.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainRuleError,
    NotFoundError,
)
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.enums import CourseStatus, NotificationType, UserRole, UserStatus
from app.models.user import User
from app.schemas.user import AdminUserUpdate
from app.services import notification_service
from app.services.course_service import get_course_by_id, search_filter


logger = logging.getLogger(__name__)


# ============== Users ==============

async def get_user(user_id: uuid.UUID, db: AsyncSession) -> User:
    """
    Get any user by ID.

    Raises:
        NotFoundError: If user not found.
    """
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()

    if not user:
        raise NotFoundError("User not found")

    return user


async def list_users(
    db: AsyncSession,
    role: Optional[UserRole] = None,
    status: Optional[UserStatus] = None,
    search: Optional[str] = None,
) -> List[User]:
    """Get users, newest first, filtered by role, status or name/email."""
    query = select(User)

    if role is not None:
        query = query.where(User.role == role)
    if status is not None:
        query = query.where(User.status == status)
    if search:
        term = f"%{search.lower()}%"
        query = query.where(
            or_(
                func.lower(User.full_name).like(term),
                func.lower(User.email).like(term),
            )
        )

    result = await db.execute(query.order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def update_user(
    user_id: uuid.UUID,
    data: AdminUserUpdate,
    db: AsyncSession,
) -> User:
    """
    Edit any account's profile, role or status.

    Raises:
        NotFoundError: If user not found.
        ConflictError: If the new email belongs to another account.
    """
    user = await get_user(user_id, db)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in changes:
        changes["email"] = changes["email"].lower()
        result = await db.execute(
            select(User.id).where(User.email == changes["email"], User.id != user.id)
        )
        if result.first() is not None:
            raise ConflictError("Email already in use")

    for field, value in changes.items():
        setattr(user, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already in use")

    await db.refresh(user)
    return user


async def toggle_user_status(
    user_id: uuid.UUID,
    admin: User,
    db: AsyncSession,
) -> User:
    """
    Switch an account between active and inactive.

    Raises:
        NotFoundError: If user not found.
        DomainRuleError: If the admin targets their own account.
    """
    if user_id == admin.id:
        raise DomainRuleError("You cannot deactivate your own account")

    user = await get_user(user_id, db)
    user.status = (
        UserStatus.ACTIVE if user.status == UserStatus.INACTIVE else UserStatus.INACTIVE
    )
    await db.commit()
    await db.refresh(user)

    logger.info("Admin %s set user %s to %s", admin.id, user.id, user.status.value)
    return user


async def list_pending_providers(db: AsyncSession) -> List[User]:
    """Get users waiting for a provider decision, oldest request first."""
    result = await db.execute(
        select(User)
        .where(User.status == UserStatus.PENDING_PROVIDER)
        .order_by(User.updated_at.asc())
    )
    return list(result.scalars().all())


async def _get_pending_provider(user_id: uuid.UUID, db: AsyncSession) -> User:
    user = await get_user(user_id, db)

    if user.status != UserStatus.PENDING_PROVIDER:
        raise DomainRuleError("No pending provider request for this user")

    return user


async def approve_provider(user_id: uuid.UUID, db: AsyncSession) -> User:
    """
    Grant a pending provider request and notify the user.

    Raises:
        NotFoundError: If user not found.
        DomainRuleError: If the user has no pending request.
    """
    user = await _get_pending_provider(user_id, db)
    user.role = UserRole.PROVIDER
    user.status = UserStatus.ACTIVE
    await db.commit()

    logger.info("Provider request of user %s approved", user_id)

    await notification_service.create_notification(
        db,
        user_id=user_id,
        type=NotificationType.PROVIDER_APPROVED,
        title="Provider Request Approved! 🎉",
        message=(
            "Congratulations! Your provider request has been approved. "
            "You can now create and manage courses."
        ),
        link="/course/create",
    )

    return await get_user(user_id, db)


async def reject_provider(user_id: uuid.UUID, db: AsyncSession) -> User:
    """
    Decline a pending provider request and notify the user.

    The user stays a customer.

    Raises:
        NotFoundError: If user not found.
        DomainRuleError: If the user has no pending request.
    """
    user = await _get_pending_provider(user_id, db)
    user.status = UserStatus.ACTIVE
    await db.commit()

    logger.info("Provider request of user %s rejected", user_id)

    await notification_service.create_notification(
        db,
        user_id=user_id,
        type=NotificationType.PROVIDER_REJECTED,
        title="Provider Request Not Approved",
        message=(
            "Unfortunately, your provider request was not approved at this time. "
            "Please contact support for more information."
        ),
        link="/profile",
    )

    return await get_user(user_id, db)


# ============== Courses ==============

async def list_courses(
    db: AsyncSession,
    status: Optional[CourseStatus] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Course]:
    """Get courses in any status, newest first."""
    query = select(Course)

    if status is not None:
        query = query.where(Course.status == status)
    if category:
        query = query.where(Course.category == category)
    if search:
        query = query.where(search_filter(search))

    result = await db.execute(
        query.order_by(Course.created_at.desc(), Course.id.desc())
    )
    return list(result.scalars().all())


async def list_pending_courses(db: AsyncSession) -> List[Course]:
    """Get the moderation queue, oldest first."""
    result = await db.execute(
        select(Course)
        .where(Course.status == CourseStatus.PENDING)
        .order_by(Course.created_at.asc(), Course.id.asc())
    )
    return list(result.scalars().all())


async def approve_course(course_id: int, db: AsyncSession) -> Course:
    """
    Publish a course and notify its provider.

    Raises:
        NotFoundError: If course not found.
        DomainRuleError: If the course is already approved.
    """
    course = await get_course_by_id(course_id, db)

    if course.status == CourseStatus.APPROVED:
        raise DomainRuleError("Course is already approved")

    course.status = CourseStatus.APPROVED
    await db.commit()

    title, provider_id = course.title, course.provider_id
    logger.info("Course %s approved", course_id)

    await notification_service.create_notification(
        db,
        user_id=provider_id,
        type=NotificationType.COURSE_APPROVED,
        title="Course Approved! ✅",
        message=(
            f'Your course "{title}" has been approved and is now live on the platform!'
        ),
        link=f"/course/{course_id}",
        related_course_id=course_id,
    )

    return await get_course_by_id(course_id, db)


async def reject_course(course_id: int, db: AsyncSession) -> Course:
    """
    Reject a course and notify its provider.

    Raises:
        NotFoundError: If course not found.
    """
    course = await get_course_by_id(course_id, db)
    course.status = CourseStatus.REJECTED
    await db.commit()

    title, provider_id = course.title, course.provider_id
    logger.info("Course %s rejected", course_id)

    await notification_service.create_notification(
        db,
        user_id=provider_id,
        type=NotificationType.COURSE_REJECTED,
        title="Course Not Approved",
        message=(
            f'Your course "{title}" was not approved. Please review our course '
            "guidelines and resubmit after making necessary changes."
        ),
        link=f"/course/{course_id}/edit",
        related_course_id=course_id,
    )

    return await get_course_by_id(course_id, db)


# ============== Statistics ==============

async def _count(db: AsyncSession, column, *criteria) -> int:
    result = await db.execute(select(func.count(column)).where(*criteria))
    return result.scalar() or 0


async def get_system_stats(db: AsyncSession) -> dict:
    """
    Aggregate platform counters for the admin dashboard.

    ``revenue`` sums the current list price of the course behind each
    enrollment, so discounts and later price changes are not reflected.
    ``revenue_paid`` sums what each enrollment actually paid.
    """
    users = {
        "total": await _count(db, User.id),
        "customers": await _count(db, User.id, User.role == UserRole.CUSTOMER),
        "providers": await _count(db, User.id, User.role == UserRole.PROVIDER),
        "pending_providers": await _count(
            db, User.id, User.status == UserStatus.PENDING_PROVIDER
        ),
    }
    courses = {
        "total": await _count(db, Course.id),
        "approved": await _count(db, Course.id, Course.status == CourseStatus.APPROVED),
        "pending": await _count(db, Course.id, Course.status == CourseStatus.PENDING),
        "rejected": await _count(db, Course.id, Course.status == CourseStatus.REJECTED),
    }

    revenue_result = await db.execute(
        select(func.coalesce(func.sum(Course.price), 0.0))
        .select_from(Enrollment)
        .join(Course, Course.id == Enrollment.course_id)
    )
    paid_result = await db.execute(
        select(func.coalesce(func.sum(Enrollment.price_paid), 0.0))
    )

    return {
        "users": users,
        "courses": courses,
        "enrollments": await _count(db, Enrollment.id),
        "revenue": float(revenue_result.scalar() or 0),
        "revenue_paid": float(paid_result.scalar() or 0),
    }
