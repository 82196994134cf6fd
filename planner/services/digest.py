"""Daily summary digest: one notification listing the upcoming work."""

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from planner.schemas.assignments import Assignment
from planner.schemas.base import ensure_aware
from planner.schemas.notifications import (
    DAILY_SUMMARY_IDENTIFIER,
    NotificationSettings,
    Trigger,
    TriggerKind,
)
from planner.services.trigger_planner import next_notification_time

SUMMARY_WINDOW_DAYS = 14


def _clock_time(moment: datetime) -> str:
    """Format as ``3:30 PM``."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def _day_title(day: date, reference: date) -> str:
    if day == reference:
        return "Today"
    if day == reference + timedelta(days=1):
        return "Tomorrow"
    return f"{day:%A, %b} {day.day}"


def _day_message(assignments: list[Assignment], now: datetime) -> str:
    by_type: dict[str, list[Assignment]] = {}
    for assignment in assignments:
        by_type.setdefault(assignment.assignment_type.value, []).append(assignment)

    blocks = []
    for type_label, items in by_type.items():
        lines = [f"📌 {type_label}{'s' if len(items) > 1 else ''}:"]
        for item in items:
            due_local = item.due_date.astimezone(now.tzinfo)
            lines.append(f"  • {item.title} ({item.course_info}) @ {_clock_time(due_local)}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def build_daily_summary(
    assignments: Iterable[Assignment],
    settings: NotificationSettings,
    now: datetime,
) -> Trigger | None:
    """
    Build the next daily summary notification.

    The summary fires at the next configured notification time and covers
    the following two weeks. An incomplete assignment is listed when it is
    due after the summary fires and is inside its type's reminder window.
    Assignments without a due date are ignored.

    Returns:
        The summary trigger, or None when notifications are disabled or
        nothing qualifies.
    """
    if not settings.enabled:
        return None

    now = ensure_aware(now)
    fires_at = next_notification_time(settings, now)
    first_day = fires_at.date()
    last_day = first_day + timedelta(days=SUMMARY_WINDOW_DAYS - 1)

    by_day: dict[date, list[Assignment]] = {}
    for assignment in assignments:
        if assignment.is_completed or assignment.due_date is None:
            continue
        due = assignment.due_date
        if due <= fires_at:
            continue
        due_day = due.astimezone(now.tzinfo).date()
        if not first_day <= due_day <= last_day:
            continue
        if (due - now).days > settings.reminder_days_for(assignment.assignment_type):
            continue
        by_day.setdefault(due_day, []).append(assignment)

    if not by_day:
        return None

    days = sorted(by_day)
    for day in days:
        by_day[day].sort(key=lambda a: (a.due_date, a.title))

    if len(days) == 1:
        title = f"📚 Assignments for {_day_title(days[0], first_day)}"
        body = _day_message(by_day[days[0]], now)
    else:
        title = "📚 Your Daily Assignment Summary"
        body = "\n\n".join(
            f"📅 {_day_title(day, first_day)}:\n{_day_message(by_day[day], now)}" for day in days
        )

    return Trigger(
        identifier=DAILY_SUMMARY_IDENTIFIER,
        kind=TriggerKind.DAILY_SUMMARY,
        fires_at=fires_at,
        title=title,
        body=body,
    )
