"""
Discount Service

Discount code validity, pricing and provider-side management.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainRuleError,
    NotFoundError,
)
from app.models.course import Course
from app.models.discount import Discount
from app.models.enums import DiscountType
from app.models.user import User
from app.schemas.discount import DiscountCreate, DiscountUpdate


logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored and incoming values compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ============== Validity & Pricing ==============

def is_discount_valid(discount: Discount, now: Optional[datetime] = None) -> bool:
    """
    Check whether a discount can be applied right now.

    Valid means active, inside [start_date, end_date] and, when a cap
    is set, used fewer than max_uses times.
    """
    now = as_utc(now) if now else datetime.now(timezone.utc)

    if not discount.active:
        return False

    if now < as_utc(discount.start_date) or now > as_utc(discount.end_date):
        return False

    if discount.max_uses is not None and discount.used_count >= discount.max_uses:
        return False

    return True


def calculate_discounted_price(
    discount: Discount,
    original_price: float,
    now: Optional[datetime] = None,
) -> float:
    """
    Apply a discount to a price.

    An invalid discount returns the original price unchanged. The
    result is never negative.
    """
    if not is_discount_valid(discount, now):
        return original_price

    if discount.type == DiscountType.PERCENTAGE:
        reduction = original_price * discount.value / 100
    else:
        reduction = discount.value

    return max(0.0, original_price - reduction)


def validate_discount_terms(
    type: DiscountType,
    value: float,
    start_date: datetime,
    end_date: datetime,
) -> None:
    """
    Check the cross-field discount rules, reporting every violation at once.

    Raises:
        DomainRuleError: If the window is empty or a percentage exceeds 100.
    """
    errors = []
    if as_utc(end_date) <= as_utc(start_date):
        errors.append("End date must be after start date")
    if type == DiscountType.PERCENTAGE and value > 100:
        errors.append("Percentage discount cannot exceed 100%")
    if value < 0:
        errors.append("Discount value cannot be negative")

    if errors:
        raise DomainRuleError("; ".join(errors))


async def find_valid_discount(
    code: str,
    course_id: int,
    db: AsyncSession,
) -> Optional[Discount]:
    """
    Find an active, currently valid discount by code for a course.

    Codes match case-insensitively.

    Returns:
        The Discount, or None if no valid code matches.
    """
    result = await db.execute(
        select(Discount).where(
            Discount.code == code.strip().upper(),
            Discount.course_id == course_id,
            Discount.active.is_(True),
        )
    )
    discount = result.scalar_one_or_none()

    if not discount or not is_discount_valid(discount):
        return None

    return discount


async def increment_usage(discount: Discount, db: AsyncSession) -> Discount:
    """
    Record one use of a discount.

    Deactivates the discount when the usage cap is reached. Not guarded
    against concurrent use of the last remaining slot.
    """
    discount.used_count += 1

    if discount.max_uses is not None and discount.used_count >= discount.max_uses:
        discount.active = False
        logger.info("Discount %s reached its usage cap and was deactivated", discount.code)

    await db.commit()
    return discount


# ============== Provider Management ==============

async def _get_owned_discount(
    discount_id: int,
    user: User,
    db: AsyncSession,
) -> Discount:
    result = await db.execute(
        select(Discount).where(Discount.id == discount_id)
    )
    discount = result.scalar_one_or_none()

    if not discount:
        raise NotFoundError("Discount not found")

    if discount.provider_id != user.id:
        raise AuthorizationError("Not authorized")

    return discount


async def create_discount(
    data: DiscountCreate,
    user: User,
    db: AsyncSession,
) -> Discount:
    """
    Create a discount code for one of the provider's courses.

    Raises:
        NotFoundError: Course does not exist.
        AuthorizationError: Course belongs to another provider.
        ConflictError: The code already exists for this course.
        DomainRuleError: Dates or percentage are invalid.
    """
    result = await db.execute(select(Course).where(Course.id == data.course_id))
    course = result.scalar_one_or_none()

    if not course:
        raise NotFoundError("Course not found")

    if course.provider_id != user.id:
        raise AuthorizationError("Not authorized to create discount for this course")

    validate_discount_terms(data.type, data.value, data.start_date, data.end_date)

    code = data.code.strip().upper()
    existing = await db.execute(
        select(Discount.id).where(
            Discount.code == code,
            Discount.course_id == course.id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Discount code already exists for this course")

    discount = Discount(
        code=code,
        course_id=course.id,
        provider_id=user.id,
        type=data.type,
        value=data.value,
        max_uses=data.max_uses,
        start_date=as_utc(data.start_date),
        end_date=as_utc(data.end_date),
        description=data.description,
    )
    db.add(discount)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Discount code already exists for this course")

    logger.info("Discount %s created for course %s", discount.code, course.id)

    result = await db.execute(
        select(Discount)
        .where(Discount.id == discount.id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def list_my_discounts(
    user: User,
    db: AsyncSession,
    course_id: Optional[int] = None,
    active: Optional[bool] = None,
) -> List[Discount]:
    """Get the provider's discounts, newest first."""
    query = select(Discount).where(Discount.provider_id == user.id)

    if course_id is not None:
        query = query.where(Discount.course_id == course_id)
    if active is not None:
        query = query.where(Discount.active.is_(active))

    result = await db.execute(
        query.order_by(Discount.created_at.desc(), Discount.id.desc())
    )
    return list(result.scalars().all())


async def get_discount(discount_id: int, user: User, db: AsyncSession) -> Discount:
    """Get one of the provider's discounts."""
    return await _get_owned_discount(discount_id, user, db)


async def update_discount(
    discount_id: int,
    data: DiscountUpdate,
    user: User,
    db: AsyncSession,
) -> Discount:
    """
    Update a discount's value, cap, window, description or active flag.

    The resulting terms are revalidated as a whole. An explicit null
    leaves value, dates and active unchanged; for ``max_uses`` it means
    unlimited and for ``description`` it clears the note.
    """
    discount = await _get_owned_discount(discount_id, user, db)
    changes = data.model_dump(exclude_unset=True)

    value = changes.get("value")
    if value is None:
        value = discount.value
    start_date = changes.get("start_date") or discount.start_date
    end_date = changes.get("end_date") or discount.end_date
    validate_discount_terms(discount.type, value, start_date, end_date)

    discount.value = value
    discount.start_date = as_utc(start_date)
    discount.end_date = as_utc(end_date)
    if "max_uses" in changes:
        discount.max_uses = changes["max_uses"]
    if "description" in changes:
        discount.description = changes["description"]
    if changes.get("active") is not None:
        discount.active = changes["active"]

    await db.commit()
    await db.refresh(discount)
    return discount


async def delete_discount(discount_id: int, user: User, db: AsyncSession) -> None:
    """Delete one of the provider's discounts."""
    discount = await _get_owned_discount(discount_id, user, db)
    await db.delete(discount)
    await db.commit()


async def toggle_discount(discount_id: int, user: User, db: AsyncSession) -> Discount:
    """Flip a discount's active flag."""
    discount = await _get_owned_discount(discount_id, user, db)
    discount.active = not discount.active
    await db.commit()
    await db.refresh(discount)
    return discount


async def preview_discount(
    code: str,
    course_id: int,
    db: AsyncSession,
) -> dict:
    """
    Price a course with a discount code without using it.

    Raises:
        NotFoundError: Course missing, or the code is invalid or expired.
    """
    result = await db.execute(select(Course).where(Course.id == course_id))
    course = result.scalar_one_or_none()

    if not course:
        raise NotFoundError("Course not found")

    discount = await find_valid_discount(code, course_id, db)
    if not discount:
        raise NotFoundError("Invalid or expired discount code")

    discounted_price = calculate_discounted_price(discount, course.price)

    return {
        "valid": True,
        "code": discount.code,
        "type": discount.type,
        "value": discount.value,
        "original_price": course.price,
        "discounted_price": discounted_price,
        "savings": course.price - discounted_price,
    }
