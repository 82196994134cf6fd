"""Typed assignment lifecycle events and their publisher."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum

from pydantic import ConfigDict

from planner.schemas.assignments import Assignment
from planner.schemas.base import BaseSchema

logger = logging.getLogger(__name__)


class AssignmentEvent(str, Enum):
    """What happened to an assignment."""

    CREATED = "created"
    TOGGLED_COMPLETE = "toggled_complete"
    TOGGLED_INCOMPLETE = "toggled_incomplete"
    UPDATED = "updated"
    DELETED = "deleted"


class AssignmentChange(BaseSchema):
    """A durable change: published only after the collection was saved."""

    model_config = ConfigDict(frozen=True)

    event: AssignmentEvent
    assignment: Assignment


# Receives every change made by one command, in order
Subscriber = Callable[[Sequence[AssignmentChange]], Awaitable[None]]


class AssignmentChangePublisher:
    """
    Fan-out of lifecycle changes to async subscribers, in subscription order.

    The publisher is owned by the composition root. A failing subscriber is
    logged and does not stop the others; the change is already persisted.
    """

    def __init__(self, log: logging.Logger | None = None):
        self._subscribers: list[Subscriber] = []
        self._logger = log or logger

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber; returns a callable that unsubscribes it."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    async def publish(self, changes: Sequence[AssignmentChange]) -> None:
        """Deliver the changes of one command as a single batch."""
        if not changes:
            return
        for subscriber in list(self._subscribers):
            try:
                await subscriber(changes)
            except Exception:
                self._logger.exception(
                    "Subscriber failed handling %d change(s), first %s for assignment %s",
                    len(changes),
                    changes[0].event.value,
                    changes[0].assignment.id,
                )
