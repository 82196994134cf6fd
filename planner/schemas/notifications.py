"""Notification settings, trigger and scheduling result schemas."""

from datetime import datetime, time
from enum import Enum
from typing import Literal

from pydantic import ConfigDict, Field, field_validator

from planner.schemas.assignments import AssignmentType
from planner.schemas.base import BaseSchema

# Types that may receive a daily digest; every other type never does
DAILY_REMINDER_TYPES = frozenset({AssignmentType.EXAM, AssignmentType.TEST, AssignmentType.QUIZ})

DEFAULT_NOTIFICATION_TIME = time(20, 0)

DEFAULT_REMINDER_DAYS: dict[AssignmentType, int] = {
    AssignmentType.EXAM: 7,
    AssignmentType.TEST: 5,
    AssignmentType.QUIZ: 3,
    AssignmentType.PROJECT: 5,
    AssignmentType.HOMEWORK: 1,
    AssignmentType.LAB: 1,
    AssignmentType.ESSAY: 1,
    AssignmentType.PRESENTATION: 1,
    AssignmentType.OTHER: 1,
}

DEFAULT_DAILY_REMINDERS: dict[AssignmentType, bool] = {
    AssignmentType.EXAM: True,
    AssignmentType.TEST: True,
    AssignmentType.QUIZ: True,
}


class TriggerKind(str, Enum):
    """
    Kind of scheduled reminder.

    Values are part of the identifier format understood by the OS scheduler
    and must not change: alarms scheduled by an older build are canceled by
    reconstructing the identifier.
    """

    DUE = "due"
    DAY_BEFORE = "reminder"
    EARLY_REMINDER = "early-reminder"
    PRIORITY_REMINDER = "priority-reminder"
    DAILY_DIGEST = "daily"
    DAILY_SUMMARY = "daily-summary"


# Kinds that belong to a single assignment, in the order cancel_all visits them
ASSIGNMENT_TRIGGER_KINDS: tuple[TriggerKind, ...] = (
    TriggerKind.DUE,
    TriggerKind.DAY_BEFORE,
    TriggerKind.EARLY_REMINDER,
    TriggerKind.PRIORITY_REMINDER,
    TriggerKind.DAILY_DIGEST,
)

DAILY_SUMMARY_IDENTIFIER = "daily-digest-notification"


def trigger_identifier(assignment_id: str, kind: TriggerKind) -> str:
    """Build the stable scheduler identifier ``assignment-{id}-{kind}``."""
    return f"assignment-{assignment_id}-{kind.value}"


def parse_trigger_identifier(identifier: str) -> tuple[str, TriggerKind] | None:
    """
    Split an identifier back into (assignment_id, kind).

    Assignment ids may contain dashes, so the kind is matched as the longest
    known suffix. Returns None for identifiers this planner did not produce.
    """
    prefix = "assignment-"
    if not identifier.startswith(prefix):
        return None
    rest = identifier[len(prefix):]
    for kind in sorted(ASSIGNMENT_TRIGGER_KINDS, key=lambda k: len(k.value), reverse=True):
        suffix = f"-{kind.value}"
        if rest.endswith(suffix) and len(rest) > len(suffix):
            return rest[: -len(suffix)], kind
    return None


class NotificationSettings(BaseSchema):
    """Read-only snapshot of the user's reminder preferences."""

    enabled: bool = True
    notification_time: time = DEFAULT_NOTIFICATION_TIME
    reminder_days: dict[AssignmentType, int] = Field(
        default_factory=lambda: dict(DEFAULT_REMINDER_DAYS)
    )
    daily_reminders: dict[AssignmentType, bool] = Field(
        default_factory=lambda: dict(DEFAULT_DAILY_REMINDERS)
    )

    @field_validator("notification_time")
    @classmethod
    def strip_time(cls, value: time) -> time:
        """Keep hours and minutes only; the time has no date or zone."""
        return value.replace(second=0, microsecond=0, tzinfo=None)

    @field_validator("reminder_days")
    @classmethod
    def merge_reminder_days(cls, value: dict[AssignmentType, int]) -> dict[AssignmentType, int]:
        """Fill missing types from the defaults and reject negative thresholds."""
        for assignment_type, days in value.items():
            if days < 0:
                raise ValueError(f"reminder days for {assignment_type.value} must be >= 0")
        return {**DEFAULT_REMINDER_DAYS, **value}

    @field_validator("daily_reminders")
    @classmethod
    def merge_daily_reminders(cls, value: dict[AssignmentType, bool]) -> dict[AssignmentType, bool]:
        """Daily digests exist only for exams, tests and quizzes."""
        unsupported = sorted(t.value for t in value if t not in DAILY_REMINDER_TYPES)
        if unsupported:
            raise ValueError(f"daily reminders are not supported for: {', '.join(unsupported)}")
        return {**DEFAULT_DAILY_REMINDERS, **value}

    def reminder_days_for(self, assignment_type: AssignmentType) -> int:
        return self.reminder_days.get(
            assignment_type, DEFAULT_REMINDER_DAYS.get(assignment_type, 1)
        )

    def daily_reminder_enabled_for(self, assignment_type: AssignmentType) -> bool:
        if assignment_type not in DAILY_REMINDER_TYPES:
            return False
        return self.daily_reminders.get(assignment_type, False)


class Trigger(BaseSchema):
    """A single reminder instance, unique per (assignment_id, kind)."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    kind: TriggerKind
    fires_at: datetime
    title: str
    body: str
    assignment_id: str | None = None


SchedulerStatus = Literal["scheduled", "canceled", "skipped", "failed"]


class SchedulerResult(BaseSchema):
    """Outcome of one adapter call. Failures are data, not exceptions."""

    identifier: str
    status: SchedulerStatus
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != "failed"


class SchedulingReport(BaseSchema):
    """Summary of a bulk scheduling or self-healing pass."""

    scheduled: int = 0
    failed: int = 0
    canceled: int = 0
    invalid_assignment_ids: list[str] = Field(default_factory=list)
