"""
Reminder trigger planning.

Pure functions: given an assignment, a settings snapshot and the current
instant, decide which reminders should exist. Nothing here talks to a
scheduler, a store or the wall clock.
"""

from datetime import datetime, timedelta

from planner.schemas.assignments import Assignment
from planner.schemas.base import ensure_aware
from planner.schemas.notifications import (
    ASSIGNMENT_TRIGGER_KINDS,
    NotificationSettings,
    Trigger,
    TriggerKind,
    trigger_identifier,
)
from planner.services.errors import InvalidDueDate

DUE_LEAD = timedelta(minutes=30)
DAY_BEFORE_LEAD = timedelta(hours=24)
PRIORITY_LEAD = timedelta(hours=1)

_KIND_ORDER = {kind: index for index, kind in enumerate(ASSIGNMENT_TRIGGER_KINDS)}


def next_notification_time(settings: NotificationSettings, now: datetime) -> datetime:
    """Today at the configured time of day, or tomorrow if that has passed."""
    anchor = datetime.combine(now.date(), settings.notification_time, tzinfo=now.tzinfo)
    if anchor <= now:
        anchor += timedelta(days=1)
    return anchor


def require_due_date(assignment: Assignment) -> datetime:
    """Return the assignment's due date or raise InvalidDueDate."""
    if assignment.due_date is None:
        raise InvalidDueDate(assignment.id)
    return assignment.due_date


def format_days(days: int) -> str:
    if days <= 0:
        return "less than a day"
    if days == 1:
        return "1 day"
    return f"{days} days"


def _make_trigger(
    assignment: Assignment,
    kind: TriggerKind,
    fires_at: datetime,
    title: str,
    body: str,
) -> Trigger:
    return Trigger(
        identifier=trigger_identifier(assignment.id, kind),
        kind=kind,
        fires_at=fires_at,
        title=title,
        body=body,
        assignment_id=assignment.id,
    )


def compute_triggers(
    assignment: Assignment,
    settings: NotificationSettings,
    now: datetime,
) -> list[Trigger]:
    """
    Compute every future reminder for one assignment.

    Args:
        assignment: Assignment snapshot
        settings: Notification settings snapshot
        now: Current instant (naive values are read as UTC)

    Returns:
        Triggers ordered by fire time, all strictly after ``now``; empty for
        completed assignments, disabled notifications or past due dates.

    Raises:
        InvalidDueDate: If the assignment has no due date.
    """
    if assignment.is_completed or not settings.enabled:
        return []

    now = ensure_aware(now)
    due = require_due_date(assignment)
    label = assignment.assignment_type.value
    subject = f"{assignment.title} for {assignment.course_info}"

    candidates = [
        _make_trigger(
            assignment,
            TriggerKind.DUE,
            due - DUE_LEAD,
            f"{label} Due Soon",
            f"{subject} is due in 30 minutes.",
        ),
        _make_trigger(
            assignment,
            TriggerKind.DAY_BEFORE,
            due - DAY_BEFORE_LEAD,
            f"{label} Due Tomorrow",
            f"{subject} is due tomorrow.",
        ),
    ]

    reminder_days = settings.reminder_days_for(assignment.assignment_type)
    # At one day the day-before reminder already covers it
    if reminder_days > 1:
        candidates.append(
            _make_trigger(
                assignment,
                TriggerKind.EARLY_REMINDER,
                due - timedelta(days=reminder_days),
                f"{label} Coming Up",
                f"{subject} is due in {reminder_days} days.",
            )
        )

    if assignment.is_priority:
        candidates.append(
            _make_trigger(
                assignment,
                TriggerKind.PRIORITY_REMINDER,
                due - PRIORITY_LEAD,
                f"PRIORITY: {label} Due Very Soon",
                f"{subject} is due in 1 hour.",
            )
        )

    if settings.daily_reminder_enabled_for(assignment.assignment_type):
        anchor = next_notification_time(settings, now)
        if anchor < due:
            days_until_due = (due - anchor).days
            candidates.append(
                _make_trigger(
                    assignment,
                    TriggerKind.DAILY_DIGEST,
                    anchor,
                    f"{label} Reminder",
                    f"{subject} is due in {format_days(days_until_due)}.",
                )
            )

    upcoming = [trigger for trigger in candidates if trigger.fires_at > now]
    return sorted(upcoming, key=lambda t: (t.fires_at, _KIND_ORDER[t.kind]))
