"""Database engine and session management."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from planner.config import Settings
from planner.db.base import Base

_IN_MEMORY_SQLITE = ("sqlite+aiosqlite://", "sqlite+aiosqlite:///:memory:")


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""
    url = settings.database_url
    if url in _IN_MEMORY_SQLITE:
        # One shared connection, otherwise every session sees an empty database
        return create_async_engine(url, echo=settings.debug, poolclass=StaticPool)
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.debug)
    return create_async_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory shared by the SQL-backed collaborators."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables directly (local runs and tests; production uses Alembic)."""
    from planner.db import models  # noqa: F401 - Import models to register them

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
