"""
Notification lifecycle coordination.

Reacts to assignment lifecycle changes by computing triggers with the
planner and handing them to the scheduler adapter. Also owns the two bulk
passes: a full rebuild after settings change, and the cheap self-healing
pass run on startup.
"""

import logging
from collections.abc import Iterable, Sequence

from planner.clock import Clock
from planner.schemas.assignments import Assignment
from planner.schemas.notifications import (
    DAILY_SUMMARY_IDENTIFIER,
    NotificationSettings,
    SchedulerResult,
    SchedulingReport,
    Trigger,
    parse_trigger_identifier,
)
from planner.services.digest import build_daily_summary
from planner.services.errors import InvalidDueDate, StoreReadFailure
from planner.services.events import AssignmentChange, AssignmentEvent
from planner.services.scheduler import SchedulerAdapter
from planner.services.settings_provider import NotificationSettingsProvider
from planner.services.stores import AssignmentStore
from planner.services.trigger_planner import compute_triggers

logger = logging.getLogger(__name__)


class _Tally:
    """Counts adapter outcomes during a bulk pass."""

    def __init__(self) -> None:
        self.scheduled = 0
        self.failed = 0
        self.canceled = 0
        self.invalid: list[str] = []

    def add(self, result: SchedulerResult) -> None:
        if result.status == "scheduled":
            self.scheduled += 1
        elif result.status == "canceled":
            self.canceled += 1
        elif result.status == "failed":
            self.failed += 1

    def report(self) -> SchedulingReport:
        return SchedulingReport(
            scheduled=self.scheduled,
            failed=self.failed,
            canceled=self.canceled,
            invalid_assignment_ids=self.invalid,
        )


class NotificationLifecycleCoordinator:
    """Drives the trigger planner and the scheduler adapter from lifecycle events."""

    def __init__(
        self,
        scheduler: SchedulerAdapter,
        settings_provider: NotificationSettingsProvider,
        clock: Clock,
        *,
        store: AssignmentStore | None = None,
        log: logging.Logger | None = None,
    ):
        self._scheduler = scheduler
        self._settings_provider = settings_provider
        self._clock = clock
        self._store = store
        self._logger = log or logger

    # -------------------------------------------------------------------------
    # Lifecycle events
    # -------------------------------------------------------------------------

    async def handle(self, changes: Sequence[AssignmentChange]) -> None:
        """
        Subscriber entry point for the assignment change publisher.

        Handles each change of one command, then rebuilds the daily summary
        once for the whole batch.
        """
        handlers = {
            AssignmentEvent.CREATED: self.on_created,
            AssignmentEvent.TOGGLED_COMPLETE: self.on_toggled_complete,
            AssignmentEvent.TOGGLED_INCOMPLETE: self.on_toggled_incomplete,
            AssignmentEvent.UPDATED: self.on_updated,
            AssignmentEvent.DELETED: self.on_deleted,
        }
        for change in changes:
            await handlers[change.event](change.assignment)
        await self.refresh_daily_summary()

    async def on_created(self, assignment: Assignment) -> list[SchedulerResult]:
        settings = await self._settings_provider.get()
        return await self._schedule_assignment(assignment, settings)

    async def on_toggled_complete(self, assignment: Assignment) -> list[SchedulerResult]:
        return [await self._scheduler.cancel_all(assignment.id)]

    async def on_toggled_incomplete(self, assignment: Assignment) -> list[SchedulerResult]:
        # Recompute from the current field values, same as a new assignment
        return await self.on_created(assignment)

    async def on_updated(self, assignment: Assignment) -> list[SchedulerResult]:
        """Any field may have changed (due date, type, priority): rebuild from scratch."""
        results = [await self._scheduler.cancel_all(assignment.id)]
        if not assignment.is_completed:
            settings = await self._settings_provider.get()
            results.extend(await self._schedule_assignment(assignment, settings))
        return results

    async def on_deleted(self, assignment: Assignment) -> list[SchedulerResult]:
        return [await self._scheduler.cancel_all(assignment.id)]

    async def preview(self, assignment: Assignment) -> list[Trigger]:
        """
        Triggers the assignment would get right now, without scheduling them.

        Raises:
            InvalidDueDate: If the assignment has no due date.
        """
        settings = await self._settings_provider.get()
        return compute_triggers(assignment, settings, self._clock())

    # -------------------------------------------------------------------------
    # Bulk passes
    # -------------------------------------------------------------------------

    async def schedule_all_notifications(self, assignments: Iterable[Assignment]) -> SchedulingReport:
        """
        Cancel everything, then schedule every incomplete assignment again.

        Used after a settings change that may invalidate every existing
        schedule. With notifications disabled it only cancels.
        """
        assignments = list(assignments)
        settings = await self._settings_provider.get()
        tally = _Tally()

        for identifier in await self._scheduler.list_scheduled():
            tally.add(await self._scheduler.cancel(identifier))
        for assignment in assignments:
            tally.add(await self._scheduler.cancel_all(assignment.id))

        if not settings.enabled:
            self._logger.info("Notifications are disabled, cancelled all scheduled notifications")
            return tally.report()

        for assignment in assignments:
            if assignment.is_completed:
                continue
            triggers = self._plan(assignment, settings, tally)
            for trigger in triggers:
                tally.add(await self._scheduler.schedule(trigger))

        await self.refresh_daily_summary(assignments, settings)
        self._logger.info(
            "Scheduled %d notifications for %d assignments (%d failed)",
            tally.scheduled,
            sum(1 for a in assignments if not a.is_completed),
            tally.failed,
        )
        return tally.report()

    async def check_and_reschedule_notifications(
        self, assignments: Iterable[Assignment]
    ) -> SchedulingReport:
        """
        Schedule only the triggers missing from the backend.

        Existing scheduled triggers are left untouched, so this is cheap to
        run on every startup and repairs anything a failed call left behind.
        Scheduled triggers of a listed assignment that it no longer needs
        (it was completed, or lost its priority flag) are cancelled.
        Triggers of assignments missing from the collection are kept, since
        an unreadable store also yields an empty collection.
        """
        assignments = list(assignments)
        settings = await self._settings_provider.get()
        tally = _Tally()
        if not settings.enabled:
            return tally.report()

        scheduled_by_assignment: dict[str, set[str]] = {}
        for identifier in await self._scheduler.list_scheduled():
            parsed = parse_trigger_identifier(identifier)
            if parsed is not None:
                scheduled_by_assignment.setdefault(parsed[0], set()).add(identifier)

        for assignment in assignments:
            scheduled = scheduled_by_assignment.get(assignment.id, set())
            planned = [] if assignment.is_completed else self._plan(assignment, settings, tally)
            for trigger in planned:
                if trigger.identifier not in scheduled:
                    tally.add(await self._scheduler.schedule(trigger))
            for identifier in scheduled - {trigger.identifier for trigger in planned}:
                tally.add(await self._scheduler.cancel(identifier))

        await self.refresh_daily_summary(assignments, settings)
        if tally.scheduled or tally.canceled or tally.failed:
            self._logger.info(
                "Self-healing pass scheduled %d missing and cancelled %d stale notifications (%d failed)",
                tally.scheduled,
                tally.canceled,
                tally.failed,
            )
        return tally.report()

    async def refresh_daily_summary(
        self,
        assignments: Iterable[Assignment] | None = None,
        settings: NotificationSettings | None = None,
    ) -> SchedulerResult | None:
        """
        Rebuild the daily summary notification.

        Without an explicit collection the store is read; a failed read counts
        as an empty collection for this cycle.
        """
        if assignments is None:
            if self._store is None:
                return None
            assignments = await self.load_assignments()
        if settings is None:
            settings = await self._settings_provider.get()

        summary = build_daily_summary(assignments, settings, self._clock())
        if summary is None:
            return await self._scheduler.cancel(DAILY_SUMMARY_IDENTIFIER)
        return await self._scheduler.schedule(summary)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def load_assignments(self) -> list[Assignment]:
        """Current collection from the store, or empty when it cannot be read."""
        if self._store is None:
            return []
        try:
            return await self._store.get_all()
        except StoreReadFailure as e:
            self._logger.warning("Treating assignment store as empty this cycle: %s", e)
            return []

    def _plan(
        self,
        assignment: Assignment,
        settings: NotificationSettings,
        tally: _Tally | None = None,
    ) -> list[Trigger]:
        try:
            return compute_triggers(assignment, settings, self._clock())
        except InvalidDueDate as e:
            self._logger.warning("Skipping notifications: %s", e)
            if tally is not None:
                tally.invalid.append(assignment.id)
            return []

    async def _schedule_assignment(
        self, assignment: Assignment, settings: NotificationSettings
    ) -> list[SchedulerResult]:
        if assignment.is_completed or not settings.enabled:
            return []
        return [await self._scheduler.schedule(t) for t in self._plan(assignment, settings)]
