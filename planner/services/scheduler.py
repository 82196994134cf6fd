"""
Notification scheduler adapter.

The adapter is the only code that talks to a notification backend. It owns
the overwrite and idempotence rules:

- schedule: cancel whatever holds the identifier, then create
- cancel: a missing identifier is a successful no-op
- cancel_all: cancel every identifier an assignment can own

Backend errors (permission denied, alarm cap) are logged and returned as
failed results; the next self-healing pass picks them up.
"""

import logging
from typing import Protocol

from planner.clock import Clock
from planner.schemas.notifications import (
    ASSIGNMENT_TRIGGER_KINDS,
    SchedulerResult,
    Trigger,
    trigger_identifier,
)
from planner.services.errors import (
    NotificationPermissionDenied,
    ScheduledNotificationLimitReached,
    SchedulingFailure,
)

logger = logging.getLogger(__name__)


class NotificationBackend(Protocol):
    """Platform notification scheduler. Implementations raise SchedulingFailure."""

    async def create(self, trigger: Trigger) -> None: ...

    async def remove(self, identifier: str) -> None: ...

    async def pending(self) -> list[Trigger]: ...


class InMemoryNotificationBackend:
    """Process-local backend; also used to emulate platform limits in tests."""

    def __init__(
        self,
        clock: Clock,
        *,
        capacity: int | None = None,
        permission_granted: bool = True,
    ):
        self._clock = clock
        self.capacity = capacity
        self.permission_granted = permission_granted
        self.triggers: dict[str, Trigger] = {}

    def _drop_fired(self) -> None:
        now = self._clock()
        for identifier in [i for i, t in self.triggers.items() if t.fires_at <= now]:
            del self.triggers[identifier]

    async def create(self, trigger: Trigger) -> None:
        if not self.permission_granted:
            raise NotificationPermissionDenied("Notification permission not granted")
        self._drop_fired()
        if (
            self.capacity is not None
            and trigger.identifier not in self.triggers
            and len(self.triggers) >= self.capacity
        ):
            raise ScheduledNotificationLimitReached(
                f"Limit of {self.capacity} scheduled notifications reached"
            )
        self.triggers[trigger.identifier] = trigger

    async def remove(self, identifier: str) -> None:
        self.triggers.pop(identifier, None)

    async def pending(self) -> list[Trigger]:
        self._drop_fired()
        return sorted(self.triggers.values(), key=lambda t: (t.fires_at, t.identifier))


class SchedulerAdapter:
    """Idempotent schedule/cancel of single triggers by stable identifier."""

    def __init__(
        self,
        backend: NotificationBackend,
        clock: Clock,
        log: logging.Logger | None = None,
    ):
        self._backend = backend
        self._clock = clock
        self._logger = log or logger

    async def schedule(self, trigger: Trigger) -> SchedulerResult:
        """Replace any trigger with the same identifier by ``trigger``."""
        try:
            await self._backend.remove(trigger.identifier)
            if trigger.fires_at <= self._clock():
                self._logger.debug(
                    "Skipped past notification %s for %s",
                    trigger.identifier,
                    trigger.fires_at.isoformat(),
                )
                return SchedulerResult(identifier=trigger.identifier, status="skipped")
            await self._backend.create(trigger)
        except SchedulingFailure as e:
            self._logger.warning("Failed to schedule %s: %s", trigger.identifier, e)
            return SchedulerResult(identifier=trigger.identifier, status="failed", error=str(e))

        self._logger.info(
            "Scheduled notification %s for %s", trigger.identifier, trigger.fires_at.isoformat()
        )
        return SchedulerResult(identifier=trigger.identifier, status="scheduled")

    async def cancel(self, identifier: str) -> SchedulerResult:
        """Cancel one trigger. Unknown identifiers succeed."""
        try:
            await self._backend.remove(identifier)
        except SchedulingFailure as e:
            self._logger.warning("Failed to cancel %s: %s", identifier, e)
            return SchedulerResult(identifier=identifier, status="failed", error=str(e))
        return SchedulerResult(identifier=identifier, status="canceled")

    async def cancel_all(self, assignment_id: str) -> SchedulerResult:
        """Cancel every trigger kind an assignment can own, ignoring misses."""
        errors = []
        for kind in ASSIGNMENT_TRIGGER_KINDS:
            result = await self.cancel(trigger_identifier(assignment_id, kind))
            if not result.ok:
                errors.append(result.error)
        if errors:
            return SchedulerResult(identifier=assignment_id, status="failed", error="; ".join(errors))
        self._logger.debug("Cancelled notifications for assignment %s", assignment_id)
        return SchedulerResult(identifier=assignment_id, status="canceled")

    async def pending(self) -> list[Trigger]:
        """Triggers still waiting to fire. Empty if the backend cannot be read."""
        try:
            return await self._backend.pending()
        except SchedulingFailure as e:
            self._logger.warning("Failed to list scheduled notifications: %s", e)
            return []

    async def list_scheduled(self) -> set[str]:
        """Identifiers of triggers still waiting to fire."""
        return {trigger.identifier for trigger in await self.pending()}
