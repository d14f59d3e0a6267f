"""
API Dependencies

Reusable dependencies for API routes including authentication and
role gates. The resolved user is passed explicitly to services.
"""

from typing import Annotated, Callable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import decode_access_token
from app.models.enums import UserRole, UserStatus
from app.models.user import User


# OAuth2 scheme for token extraction from Authorization header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Same scheme without the automatic 401 for public routes
oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def _user_from_token(token: str, db: AsyncSession) -> User | None:
    payload = decode_access_token(token)
    if payload is None:
        return None

    result = await db.execute(
        select(User).where(User.id == payload.sub)
    )
    return result.scalar_one_or_none()


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Dependency to get the current authenticated user.

    This dependency:
    1. Extracts the JWT token from the Authorization header
    2. Decodes and validates the token
    3. Fetches the user from the database

    Raises:
        AuthenticationError: 401 if the token is invalid or the user is gone.
    """
    user = await _user_from_token(token, db)

    if user is None:
        raise AuthenticationError()

    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Dependency to get the current user, rejecting deactivated accounts.

    Raises:
        AuthorizationError: 403 if the account is inactive.
    """
    if current_user.status == UserStatus.INACTIVE:
        raise AuthorizationError("Account is inactive. Please contact support.")

    return current_user


async def get_current_user_optional(
    token: Annotated[str | None, Depends(oauth2_scheme_optional)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """
    Dependency to optionally get the current authenticated user.

    Returns None instead of raising when no valid token is provided.
    """
    if not token:
        return None

    return await _user_from_token(token, db)


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency that only lets the given roles through.

    Usage:
        @router.post("/", dependencies=[Depends(require_roles(UserRole.PROVIDER))])
    """

    async def role_checker(
        current_user: Annotated[User, Depends(get_current_active_user)],
    ) -> User:
        if current_user.role not in roles:
            raise AuthorizationError(
                f"User role '{current_user.role.value}' is not authorized to access this route"
            )
        return current_user

    return role_checker

