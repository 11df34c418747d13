"""Async database session management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from tbsa.config import settings


def build_engine(url: str, **overrides: Any) -> AsyncEngine:
    """Create an async engine with pool settings suited to the backend.

    SQLite drivers do not accept queue pool sizing, so those options are
    only passed for server databases.

    Args:
        url: Async SQLAlchemy database URL
        **overrides: Extra keyword arguments for ``create_async_engine``

    Returns:
        Configured async engine
    """
    options: dict[str, Any] = {"echo": settings.database_echo}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,  # Verify connections before use
        )
    options.update(overrides)
    return create_async_engine(url, **options)


# Create async engine
async_engine = build_engine(settings.async_database_url)

# Create async session factory
async_session_factory = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session.

    The session is committed when the request handler returns and rolled
    back if it raises.

    Usage:
        @router.get("/items")
        async def list_items(db: DBSession):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
