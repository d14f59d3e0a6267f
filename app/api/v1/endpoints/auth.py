"""
Authentication Routes

Handles registration, password login and the current-user lookup.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user
from app.core.database import get_db
from app.core.security import create_access_token
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.token import Token
from app.schemas.user import AuthResponse, UserCreate, UserResponse, UserUpdate
from app.services import user_service


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_token(user: User) -> str:
    return create_access_token(subject=user.id, role=user.role.value)


@router.post(
    "/register",
    response_model=ApiResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a new customer account",
)
async def register(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Create a new customer account and sign it in.

    **Flow:**
    1. Check the email is not registered yet
    2. Hash the password using bcrypt
    3. Create an active customer
    4. Return the profile together with a JWT access token

    Raises:
        ConflictError: 400 if the email already exists.
    """
    user = await user_service.register(user_data, db)
    profile = UserResponse.model_validate(user).model_dump()
    return ok(AuthResponse(**profile, token=_issue_token(user)))


@router.post(
    "/login",
    response_model=Token,
    summary="Login with email and password",
)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Token:
    """
    Authenticate with the OAuth2 password form and get a bearer token.

    The ``username`` form field carries the email address.

    Raises:
        AuthenticationError: 401 on wrong email or password.
        AuthorizationError: 403 if the account is deactivated.
    """
    user = await user_service.authenticate(form_data.username, form_data.password, db)
    return Token(access_token=_issue_token(user))


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Get current user",
)
async def get_me(
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> dict:
    """Get the currently logged-in user's profile."""
    return ok(current_user)


@router.put(
    "/profile",
    response_model=ApiResponse[UserResponse],
    summary="Update current user profile",
)
async def update_profile(
    user_update: UserUpdate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Update the current user's profile. Only provided fields change.

    Raises:
        ConflictError: 400 if the new email is already in use.
    """
    user = await user_service.update_profile(current_user, user_update, db)
    return ok(user, message="Profile updated")
