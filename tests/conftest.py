"""
Pytest Configuration and Fixtures

Provides reusable async fixtures for testing the Edupress Backend.
"""

import os

# Settings are read at import time, so the environment must be ready
# before anything under ``app`` is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_access_token, hash_password
from app.models import (
    Course,
    CourseStatus,
    Discount,
    DiscountType,
    Lesson,
    User,
    UserRole,
    UserStatus,
)


# ==================== Database Fixtures ====================

@pytest.fixture
def mock_async_session() -> AsyncMock:
    """
    Create a mock async database session.

    Returns:
        AsyncMock configured to behave like AsyncSession.
    """
    session = AsyncMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.scalars = AsyncMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session configured like the application's."""
    session_maker = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session


# ==================== Factories ====================

@pytest.fixture
def make_user(db_session):
    """
    Factory fixture to create users.

    Usage:
        customer = await make_user()
        provider = await make_user(role=UserRole.PROVIDER)
    """
    counter = {"n": 0}

    async def _create(
        role: UserRole = UserRole.CUSTOMER,
        status: UserStatus = UserStatus.ACTIVE,
        full_name: str | None = None,
        password: str = "secret123",
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=f"{role.value}{n}@example.com",
            password_hash=hash_password(password),
            full_name=full_name or f"{role.value.title()} {n}",
            role=role,
            status=status,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _create


@pytest.fixture
def make_course(db_session):
    """Factory fixture to create courses, approved by default."""
    counter = {"n": 0}

    async def _create(
        provider: User,
        status: CourseStatus = CourseStatus.APPROVED,
        price: float = 100000,
        title: str | None = None,
        category: str = "Programming",
    ) -> Course:
        counter["n"] += 1
        course = Course(
            provider_id=provider.id,
            title=title or f"Course {counter['n']}",
            description="Learn things step by step.",
            price=price,
            thumbnail_url="https://cdn.example.com/thumb.png",
            category=category,
            status=status,
        )
        db_session.add(course)
        await db_session.commit()
        await db_session.refresh(course)
        return course

    return _create


@pytest.fixture
def make_lesson(db_session):
    """Factory fixture to append lessons to a course."""

    async def _create(course: Course, order: int, duration: int = 10) -> Lesson:
        lesson = Lesson(
            course_id=course.id,
            title=f"Lesson {order}",
            video_url=f"https://videos.example.com/{course.id}/{order}.mp4",
            duration=duration,
            order=order,
            resources=[],
        )
        db_session.add(lesson)
        await db_session.commit()
        await db_session.refresh(lesson)
        return lesson

    return _create


@pytest.fixture
def make_discount(db_session):
    """Factory fixture to create a discount valid around now."""

    async def _create(
        course: Course,
        code: str = "SAVE20",
        type: DiscountType = DiscountType.PERCENTAGE,
        value: float = 20,
        max_uses: int | None = None,
        active: bool = True,
        starts_in: timedelta = timedelta(days=-1),
        ends_in: timedelta = timedelta(days=1),
    ) -> Discount:
        now = datetime.now(timezone.utc)
        discount = Discount(
            code=code,
            course_id=course.id,
            provider_id=course.provider_id,
            type=type,
            value=value,
            max_uses=max_uses,
            start_date=now + starts_in,
            end_date=now + ends_in,
            active=active,
        )
        db_session.add(discount)
        await db_session.commit()
        await db_session.refresh(discount)
        return discount

    return _create


# ==================== HTTP Client Fixtures ====================

@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client bound to the app, sharing the test database session.
    """
    from app.main import app
    from app.middleware.rate_limit import discount_validate_limiter

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    discount_validate_limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """
    Build a bearer Authorization header for a user.

    Usage:
        response = await client.get("/api/v1/auth/me", headers=auth_headers(user))
    """

    def _headers(user: User) -> dict:
        token = create_access_token(subject=user.id, role=user.role.value)
        return {"Authorization": f"Bearer {token}"}

    return _headers
