"""
Review Routes

Endpoints for course reviews.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, require_roles
from app.core.database import get_db
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from app.services import review_service


router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.get(
    "/course/{course_id}",
    response_model=ApiResponse[List[ReviewResponse]],
    summary="List reviews of a course",
)
async def list_course_reviews(
    course_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Get a course's reviews, newest first. Public."""
    reviews = await review_service.list_course_reviews(course_id, db)
    return ok(reviews)


@router.post(
    "/",
    response_model=ApiResponse[ReviewResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Review a course",
)
async def create_review(
    review_data: ReviewCreate,
    current_user: Annotated[User, Depends(require_roles(UserRole.CUSTOMER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Leave a review on a course the customer is enrolled in.

    **Requirements:**
    - User must be enrolled in the course
    - One review per user and course

    The course rating is recalculated before the response is sent.
    """
    review = await review_service.create_review(current_user, review_data, db)
    return ok(review, message="Review submitted successfully")


@router.get(
    "/my-review/{course_id}",
    response_model=ApiResponse[Optional[ReviewResponse]],
    summary="Get my review of a course",
)
async def get_my_review(
    course_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Get the current user's review of a course; ``data`` is null if none."""
    review = await review_service.get_my_review(current_user, course_id, db)
    return ok(review)


@router.put(
    "/{review_id}",
    response_model=ApiResponse[ReviewResponse],
    summary="Update a review",
)
async def update_review(
    review_id: int,
    review_data: ReviewUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Edit the current user's review. The course rating is recalculated."""
    review = await review_service.update_review(current_user, review_id, review_data, db)
    return ok(review, message="Review updated successfully")


@router.delete(
    "/{review_id}",
    response_model=ApiResponse[None],
    summary="Delete a review",
)
async def delete_review(
    review_id: int,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Delete a review. Authors can delete their own; admins any."""
    await review_service.delete_review(current_user, review_id, db)
    return ok(message="Review deleted successfully")
