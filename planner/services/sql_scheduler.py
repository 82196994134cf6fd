"""Durable notification backend on the ``scheduled_notifications`` table."""

from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from planner.clock import Clock
from planner.db.models import ScheduledNotification
from planner.schemas.base import ensure_aware
from planner.schemas.notifications import Trigger, TriggerKind
from planner.services.errors import ScheduledNotificationLimitReached, SchedulingFailure


def _utc(value: datetime) -> datetime:
    return ensure_aware(value).astimezone(timezone.utc)


class SqlNotificationBackend:
    """
    Notification backend persisted in the database.

    Pending rows survive restarts, which is what lets the self-healing pass
    leave existing reminders alone. Only rows whose fire time is still in
    the future count as scheduled.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock,
        *,
        capacity: int | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock
        self.capacity = capacity

    async def create(self, trigger: Trigger) -> None:
        now = _utc(self._clock())
        try:
            async with self._session_factory() as session:
                if self.capacity is not None:
                    outstanding = await session.scalar(
                        select(func.count())
                        .select_from(ScheduledNotification)
                        .where(
                            ScheduledNotification.fires_at > now,
                            ScheduledNotification.identifier != trigger.identifier,
                        )
                    )
                    if outstanding >= self.capacity:
                        raise ScheduledNotificationLimitReached(
                            f"Limit of {self.capacity} scheduled notifications reached"
                        )
                await session.merge(
                    ScheduledNotification(
                        identifier=trigger.identifier,
                        assignment_id=trigger.assignment_id,
                        kind=trigger.kind.value,
                        fires_at=_utc(trigger.fires_at),
                        title=trigger.title,
                        body=trigger.body,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise SchedulingFailure(f"Failed to store notification {trigger.identifier}: {e}") from e

    async def remove(self, identifier: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(ScheduledNotification).where(ScheduledNotification.identifier == identifier)
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise SchedulingFailure(f"Failed to remove notification {identifier}: {e}") from e

    async def pending(self) -> list[Trigger]:
        now = _utc(self._clock())
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(ScheduledNotification)
                    .where(ScheduledNotification.fires_at > now)
                    .order_by(ScheduledNotification.fires_at, ScheduledNotification.identifier)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise SchedulingFailure(f"Failed to list notifications: {e}") from e
        return [
            Trigger(
                identifier=row.identifier,
                kind=TriggerKind(row.kind),
                fires_at=ensure_aware(row.fires_at),
                title=row.title,
                body=row.body,
                assignment_id=row.assignment_id,
            )
            for row in rows
        ]
