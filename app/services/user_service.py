"""
User Service

Account registration, login and self-service profile changes.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainRuleError,
)
from app.core.security import hash_password, verify_password
from app.models.enums import UserRole, UserStatus
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate


logger = logging.getLogger(__name__)


async def get_user_by_email(email: str, db: AsyncSession) -> User | None:
    """Look up a user by email, case-insensitively."""
    result = await db.execute(
        select(User).where(User.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def register(data: UserCreate, db: AsyncSession) -> User:
    """
    Create a new active customer account.

    Args:
        data: Registration data (email, password, full_name).
        db: Database session.

    Returns:
        The created User.

    Raises:
        ConflictError: If the email is already registered.
    """
    if await get_user_by_email(data.email, db):
        raise ConflictError("Email already registered")

    user = User(
        email=data.email.lower(),
        password_hash=hash_password(data.password),
        full_name=data.full_name,
        role=UserRole.CUSTOMER,
        status=UserStatus.ACTIVE,
    )
    db.add(user)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already registered")

    await db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


async def authenticate(email: str, password: str, db: AsyncSession) -> User:
    """
    Check credentials for login.

    Raises:
        AuthenticationError: If email or password is wrong.
        AuthorizationError: If the account has been deactivated.
    """
    user = await get_user_by_email(email, db)

    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError("Incorrect email or password")

    if user.status == UserStatus.INACTIVE:
        raise AuthorizationError("Account is inactive. Please contact support.")

    return user


async def update_profile(user: User, data: UserUpdate, db: AsyncSession) -> User:
    """
    Update the current user's own profile.

    Raises:
        ConflictError: If the new email belongs to another account.
    """
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if "email" in changes:
        email = changes["email"].lower()
        if email != user.email:
            existing = await get_user_by_email(email, db)
            if existing and existing.id != user.id:
                raise ConflictError("Email already in use")
            user.email = email

    if "full_name" in changes:
        user.full_name = changes["full_name"]
    if "avatar_url" in changes:
        user.avatar_url = changes["avatar_url"]
    if "password" in changes:
        user.password_hash = hash_password(changes["password"])

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already in use")

    await db.refresh(user)
    return user


async def request_provider(user: User, db: AsyncSession) -> User:
    """
    Ask an admin to upgrade a customer account to provider.

    Raises:
        DomainRuleError: If the user is not a customer or already asked.
    """
    if user.role == UserRole.PROVIDER:
        raise DomainRuleError("You are already a course provider")
    if user.role == UserRole.ADMIN:
        raise DomainRuleError("Admin cannot become a provider")
    if user.status == UserStatus.PENDING_PROVIDER:
        raise DomainRuleError("Your request is already pending approval")

    user.status = UserStatus.PENDING_PROVIDER
    await db.commit()
    await db.refresh(user)

    logger.info("User %s requested provider access", user.id)
    return user


async def deactivate_account(user: User, db: AsyncSession) -> None:
    """
    Soft-delete the current user's account.

    Raises:
        AuthorizationError: For admin accounts.
    """
    if user.role == UserRole.ADMIN:
        raise AuthorizationError("Admin accounts cannot be deleted through this endpoint")

    user.status = UserStatus.INACTIVE
    await db.commit()
    logger.info("User %s deactivated their account", user.id)
