"""
Database Configuration

Async SQLAlchemy 2.0 setup. PostgreSQL (asyncpg) in production; any async
driver URL is accepted so tests can run against aiosqlite.
"""

from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base shared by every model and by Alembic autogenerate."""
    pass


def utcnow() -> datetime:
    """Timezone-aware current time, used for Python-side column defaults."""
    return datetime.now(timezone.utc)


# Created on first use so importing the app never opens a connection
_engine: Optional[AsyncEngine] = None
_async_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def postgres_connect_args(db_url: str) -> tuple[str, dict]:
    """
    Split libpq-style query parameters off a PostgreSQL URL.

    asyncpg rejects ``sslmode``/``channel_binding`` in the URL, so the
    query string is dropped and ``sslmode=require`` becomes an SSL context.
    """
    if "?" not in db_url:
        return db_url, {}

    db_url, query = db_url.split("?", 1)
    if "sslmode=require" not in query:
        return db_url, {}

    import ssl

    ssl_context = ssl.create_default_context()
    ssl_context.check_hostname = False
    ssl_context.verify_mode = ssl.CERT_NONE
    return db_url, {"ssl": ssl_context}


def get_engine() -> AsyncEngine:
    """Get or create the async engine for ``settings.DATABASE_URL``."""
    global _engine
    if _engine is None:
        from app.core.config import settings

        db_url = settings.DATABASE_URL
        engine_kwargs = {
            "echo": settings.is_development and settings.LOG_LEVEL == "DEBUG",
            "pool_pre_ping": True,
        }

        if db_url.startswith("postgresql"):
            db_url, connect_args = postgres_connect_args(db_url)
            engine_kwargs.update(
                pool_size=5,
                max_overflow=10,
                connect_args=connect_args,
            )

        _engine = create_async_engine(db_url, **engine_kwargs)
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """
    Get or create the session factory.

    Objects stay usable after commit and nothing is flushed implicitly;
    services flush where a following query must see pending rows.
    """
    global _async_session_maker
    if _async_session_maker is None:
        _async_session_maker = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _async_session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session dependency.

    Whatever a handler left pending is committed when it returns and
    rolled back if it raises.

    Yields:
        AsyncSession: An async database session.
    """
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def close_db() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _async_session_maker
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_maker = None
