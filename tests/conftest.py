"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from planner.clock import fixed_clock
from planner.config import Settings
from planner.container import PlannerContainer
from planner.db.session import create_schema, create_session_factory
from planner.main import create_app
from planner.schemas.assignments import Assignment

# Monday morning, well before the default 20:00 notification time
NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock():
    return fixed_clock(NOW)


@pytest.fixture
def make_assignment() -> Callable[..., Assignment]:
    """Factory for assignments with sensible defaults."""

    def factory(**overrides) -> Assignment:
        fields = {
            "title": "Problem Set 3",
            "course_code": "PHY101",
            "course_name": "Physics",
            "due_date": datetime(2026, 3, 5, 17, 0, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return Assignment(**fields)

    return factory


@pytest.fixture
def container(clock) -> PlannerContainer:
    return PlannerContainer.in_memory(clock)


@pytest.fixture
async def client(container: PlannerContainer) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    app = create_app(
        container=container,
        settings=Settings(reschedule_on_startup=False, create_schema_on_startup=False),
    )
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory on a fresh in-memory SQLite database."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await create_schema(engine)
    yield create_session_factory(engine)
    await engine.dispose()
