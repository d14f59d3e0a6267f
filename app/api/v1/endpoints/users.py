"""
User Routes

Endpoints for the current user's account.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.user import UserResponse
from app.services import user_service


router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "/request-provider",
    response_model=ApiResponse[UserResponse],
    summary="Request provider access",
)
async def request_provider(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Ask an admin to let this customer create courses.

    The account moves to ``pending_provider`` until an admin decides.
    """
    user = await user_service.request_provider(current_user, db)
    return ok(user, message="Provider request submitted. Waiting for admin approval.")


@router.delete(
    "/account",
    response_model=ApiResponse[None],
    summary="Deactivate current account",
)
async def delete_account(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Deactivate the current account. The data is kept but login is refused.

    Admin accounts cannot be deactivated here.
    """
    await user_service.deactivate_account(current_user, db)
    return ok(message="Account deactivated successfully")
