"""
Discount Routes

Public checkout preview and provider discount code management.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_roles
from app.core.database import get_db
from app.middleware.rate_limit import discount_validate_limiter
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.discount import (
    DiscountCreate,
    DiscountPreview,
    DiscountResponse,
    DiscountUpdate,
    DiscountValidateRequest,
)
from app.services import discount_service


router = APIRouter(prefix="/discounts", tags=["Discounts"])

discount_manager = require_roles(UserRole.PROVIDER, UserRole.ADMIN)


@router.post(
    "/validate",
    response_model=ApiResponse[DiscountPreview],
    summary="Check a discount code",
    dependencies=[Depends(discount_validate_limiter)],
)
async def validate_discount(
    validate_data: DiscountValidateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Price a course with a discount code before checkout.

    This endpoint is public and rate limited per client. The code is
    not consumed.

    Raises:
        NotFoundError: 404 if the course is missing or the code is invalid.
    """
    preview = await discount_service.preview_discount(
        validate_data.code, validate_data.course_id, db
    )
    return ok(preview)


@router.post(
    "/",
    response_model=ApiResponse[DiscountResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a discount code",
)
async def create_discount(
    discount_data: DiscountCreate,
    current_user: Annotated[User, Depends(discount_manager)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Create a discount code for one of the provider's courses.

    **Rules:**
    - Code is 3-20 characters and unique per course (case-insensitive)
    - End date must be after start date
    - Percentage discounts cannot exceed 100
    """
    discount = await discount_service.create_discount(discount_data, current_user, db)
    return ok(discount, message="Discount created successfully")


@router.get(
    "/",
    response_model=ApiResponse[List[DiscountResponse]],
    summary="List my discount codes",
)
async def list_discounts(
    current_user: Annotated[User, Depends(discount_manager)],
    db: Annotated[AsyncSession, Depends(get_db)],
    course_id: Optional[int] = Query(None, alias="courseId"),
    active: Optional[bool] = Query(None),
) -> dict:
    """Get the provider's discount codes, newest first."""
    discounts = await discount_service.list_my_discounts(
        current_user, db, course_id=course_id, active=active
    )
    return ok(discounts)


@router.get(
    "/{discount_id}",
    response_model=ApiResponse[DiscountResponse],
    summary="Get a discount code",
)
async def get_discount(
    discount_id: int,
    current_user: Annotated[User, Depends(discount_manager)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    discount = await discount_service.get_discount(discount_id, current_user, db)
    return ok(discount)


@router.put(
    "/{discount_id}",
    response_model=ApiResponse[DiscountResponse],
    summary="Update a discount code",
)
async def update_discount(
    discount_id: int,
    discount_data: DiscountUpdate,
    current_user: Annotated[User, Depends(discount_manager)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Edit a discount. Code, course and type cannot change."""
    discount = await discount_service.update_discount(
        discount_id, discount_data, current_user, db
    )
    return ok(discount, message="Discount updated successfully")


@router.delete(
    "/{discount_id}",
    response_model=ApiResponse[None],
    summary="Delete a discount code",
)
async def delete_discount(
    discount_id: int,
    current_user: Annotated[User, Depends(discount_manager)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    await discount_service.delete_discount(discount_id, current_user, db)
    return ok(message="Discount deleted successfully")


@router.patch(
    "/{discount_id}/toggle",
    response_model=ApiResponse[DiscountResponse],
    summary="Activate or deactivate a discount code",
)
async def toggle_discount(
    discount_id: int,
    current_user: Annotated[User, Depends(discount_manager)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    discount = await discount_service.toggle_discount(discount_id, current_user, db)
    state = "activated" if discount.active else "deactivated"
    return ok(discount, message=f"Discount {state} successfully")
