"""
Composition root.

Builds every collaborator once and wires them together explicitly. The
FastAPI app keeps one container on ``app.state``; tests build their own.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from planner.clock import Clock, system_clock
from planner.config import Settings
from planner.db.session import create_engine, create_schema, create_session_factory
from planner.services.assignment_service import AssignmentService
from planner.services.events import AssignmentChangePublisher
from planner.services.notification_coordinator import NotificationLifecycleCoordinator
from planner.services.scheduler import InMemoryNotificationBackend, NotificationBackend, SchedulerAdapter
from planner.services.settings_provider import (
    NotificationSettingsProvider,
    SqlSettingsProvider,
    StaticSettingsProvider,
)
from planner.services.sql_scheduler import SqlNotificationBackend
from planner.services.stores import AssignmentStore, InMemoryAssignmentStore, SqlAssignmentStore
from planner.services.subjects import InMemorySubjectDirectory, SqlSubjectDirectory, SubjectDirectory

logger = logging.getLogger(__name__)


class PlannerContainer:
    """Owns the collaborators and the services built on them."""

    def __init__(
        self,
        *,
        store: AssignmentStore,
        settings_provider: NotificationSettingsProvider,
        subjects: SubjectDirectory,
        backend: NotificationBackend,
        clock: Clock,
        engine: AsyncEngine | None = None,
    ):
        self.store = store
        self.settings_provider = settings_provider
        self.subjects = subjects
        self.backend = backend
        self.clock = clock
        self.engine = engine

        self.publisher = AssignmentChangePublisher()
        self.scheduler = SchedulerAdapter(backend, clock)
        self.coordinator = NotificationLifecycleCoordinator(
            self.scheduler, settings_provider, clock, store=store
        )
        self.assignments = AssignmentService(
            store, subjects, self.publisher, coordinator=self.coordinator
        )
        self.publisher.subscribe(self.coordinator.handle)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PlannerContainer":
        """Database-backed container for the running application."""
        engine = create_engine(settings)
        session_factory = create_session_factory(engine)
        clock = system_clock(settings.timezone)
        return cls(
            store=SqlAssignmentStore(session_factory),
            settings_provider=SqlSettingsProvider(session_factory),
            subjects=SqlSubjectDirectory(session_factory),
            backend=SqlNotificationBackend(
                session_factory, clock, capacity=settings.max_scheduled_notifications
            ),
            clock=clock,
            engine=engine,
        )

    @classmethod
    def in_memory(cls, clock: Clock, *, capacity: int | None = None) -> "PlannerContainer":
        """Container with every collaborator held in process memory."""
        return cls(
            store=InMemoryAssignmentStore(),
            settings_provider=StaticSettingsProvider(),
            subjects=InMemorySubjectDirectory(),
            backend=InMemoryNotificationBackend(clock, capacity=capacity),
            clock=clock,
        )

    async def startup(self, settings: Settings) -> None:
        """Prepare the schema if asked, then repair any missing reminders."""
        if self.engine is not None and settings.create_schema_on_startup:
            await create_schema(self.engine)
        if settings.reschedule_on_startup:
            report = await self.assignments.check_notifications()
            logger.info(
                "Startup notification check: %d scheduled, %d failed",
                report.scheduled,
                report.failed,
            )

    async def aclose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
