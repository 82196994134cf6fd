"""Tests for settings and the composition root."""

from planner.config import Settings
from planner.container import PlannerContainer
from planner.schemas.assignments import AssignmentCreate


def test_database_urls_are_rewritten_for_drivers():
    settings = Settings(database_url_override="postgres://u:p@db:5432/planner")
    assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/planner"
    assert settings.database_url_sync == "postgresql://u:p@db:5432/planner"

    sqlite = Settings(database_url_override="sqlite:///planner.db")
    assert sqlite.database_url == "sqlite+aiosqlite:///planner.db"
    assert sqlite.database_url_sync == "sqlite:///planner.db"


async def test_startup_schedules_missing_reminders(container, make_assignment):
    assignment = make_assignment()
    await container.store.save_all([assignment])

    await container.startup(Settings(reschedule_on_startup=True))

    assert len(await container.scheduler.list_scheduled()) == 2


async def test_sqlite_container_end_to_end():
    settings = Settings(
        database_url_override="sqlite://",
        create_schema_on_startup=True,
        reschedule_on_startup=True,
    )
    container = PlannerContainer.from_settings(settings)
    try:
        await container.startup(settings)
        created = await container.assignments.create(
            AssignmentCreate(title="Essay", course_name="English", due_date="2099-01-10T12:00:00Z")
        )

        assert [a.id for a in await container.assignments.list_assignments()] == [created.id]
        assert f"assignment-{created.id}-due" in await container.scheduler.list_scheduled()
    finally:
        await container.aclose()
