"""Tests for reminder trigger planning."""

from datetime import datetime, time, timedelta, timezone

import pytest
from pydantic import ValidationError

from planner.schemas.assignments import AssignmentType
from planner.schemas.notifications import (
    ASSIGNMENT_TRIGGER_KINDS,
    NotificationSettings,
    TriggerKind,
    parse_trigger_identifier,
    trigger_identifier,
)
from planner.services.errors import InvalidDueDate
from planner.services.trigger_planner import (
    compute_triggers,
    format_days,
    next_notification_time,
)


def kinds(triggers):
    return [t.kind for t in triggers]


class TestComputeTriggers:
    def test_homework_gets_due_and_day_before(self, make_assignment, now):
        """Default homework reminder window is one day, so no early reminder."""
        due = datetime(2026, 3, 5, 17, 0, tzinfo=timezone.utc)
        assignment = make_assignment(due_date=due)

        triggers = compute_triggers(assignment, NotificationSettings(), now)

        assert kinds(triggers) == [TriggerKind.DAY_BEFORE, TriggerKind.DUE]
        assert triggers[0].fires_at == due - timedelta(hours=24)
        assert triggers[1].fires_at == due - timedelta(minutes=30)
        assert triggers[1].title == "Homework Due Soon"
        assert triggers[1].body == "Problem Set 3 for PHY101 - Physics is due in 30 minutes."
        assert triggers[0].title == "Homework Due Tomorrow"
        assert triggers[0].body == "Problem Set 3 for PHY101 - Physics is due tomorrow."

    def test_priority_exam_gets_every_kind(self, make_assignment, now):
        due = datetime(2026, 3, 12, 14, 0, tzinfo=timezone.utc)
        assignment = make_assignment(
            title="Midterm",
            assignment_type=AssignmentType.EXAM,
            is_priority=True,
            due_date=due,
        )

        triggers = compute_triggers(assignment, NotificationSettings(), now)

        assert kinds(triggers) == [
            TriggerKind.DAILY_DIGEST,
            TriggerKind.EARLY_REMINDER,
            TriggerKind.DAY_BEFORE,
            TriggerKind.PRIORITY_REMINDER,
            TriggerKind.DUE,
        ]
        by_kind = {t.kind: t for t in triggers}
        assert by_kind[TriggerKind.DAILY_DIGEST].fires_at == datetime(
            2026, 3, 2, 20, 0, tzinfo=timezone.utc
        )
        assert by_kind[TriggerKind.DAILY_DIGEST].title == "Exam Reminder"
        assert by_kind[TriggerKind.DAILY_DIGEST].body == "Midterm for PHY101 - Physics is due in 9 days."
        assert by_kind[TriggerKind.EARLY_REMINDER].fires_at == due - timedelta(days=7)
        assert by_kind[TriggerKind.EARLY_REMINDER].title == "Exam Coming Up"
        assert by_kind[TriggerKind.PRIORITY_REMINDER].fires_at == due - timedelta(hours=1)
        assert by_kind[TriggerKind.PRIORITY_REMINDER].title == "PRIORITY: Exam Due Very Soon"

    def test_identifiers_are_stable(self, make_assignment, now):
        assignment = make_assignment(id="abc-123", assignment_type=AssignmentType.QUIZ)

        triggers = compute_triggers(assignment, NotificationSettings(), now)

        assert all(t.assignment_id == "abc-123" for t in triggers)
        assert {t.identifier for t in triggers} == {
            trigger_identifier("abc-123", t.kind) for t in triggers
        }
        assert "assignment-abc-123-due" in {t.identifier for t in triggers}

    def test_completed_assignment_has_no_triggers(self, make_assignment, now):
        assignment = make_assignment(is_completed=True, is_priority=True)
        assert compute_triggers(assignment, NotificationSettings(), now) == []

    def test_disabled_notifications_produce_nothing(self, make_assignment, now):
        settings = NotificationSettings(enabled=False)
        assert compute_triggers(make_assignment(), settings, now) == []

    def test_past_due_assignment_has_no_triggers(self, make_assignment, now):
        assignment = make_assignment(due_date=now - timedelta(hours=2), is_priority=True)
        assert compute_triggers(assignment, NotificationSettings(), now) == []

    def test_only_future_triggers_are_returned(self, make_assignment, now):
        assignment = make_assignment(
            assignment_type=AssignmentType.EXAM,
            is_priority=True,
            due_date=now + timedelta(minutes=50),
        )

        triggers = compute_triggers(assignment, NotificationSettings(), now)

        assert kinds(triggers) == [TriggerKind.DUE]
        assert all(t.fires_at > now for t in triggers)

    def test_due_within_half_hour_gets_nothing(self, make_assignment, now):
        assignment = make_assignment(due_date=now + timedelta(minutes=20))
        assert compute_triggers(assignment, NotificationSettings(), now) == []

    def test_missing_due_date_raises(self, make_assignment, now):
        assignment = make_assignment(due_date=None)
        with pytest.raises(InvalidDueDate):
            compute_triggers(assignment, NotificationSettings(), now)

    def test_is_deterministic(self, make_assignment, now):
        assignment = make_assignment(assignment_type=AssignmentType.TEST, is_priority=True)
        settings = NotificationSettings()
        assert compute_triggers(assignment, settings, now) == compute_triggers(
            assignment, settings, now
        )

    def test_naive_now_is_read_as_utc(self, make_assignment, now):
        assignment = make_assignment()
        settings = NotificationSettings()
        assert compute_triggers(assignment, settings, now.replace(tzinfo=None)) == compute_triggers(
            assignment, settings, now
        )

    def test_custom_reminder_days_add_early_reminder(self, make_assignment, now):
        due = datetime(2026, 3, 9, 12, 0, tzinfo=timezone.utc)
        settings = NotificationSettings(reminder_days={AssignmentType.HOMEWORK: 4})

        triggers = compute_triggers(make_assignment(due_date=due), settings, now)

        early = [t for t in triggers if t.kind == TriggerKind.EARLY_REMINDER]
        assert len(early) == 1
        assert early[0].fires_at == due - timedelta(days=4)
        assert early[0].body.endswith("is due in 4 days.")

    def test_daily_digest_can_be_switched_off(self, make_assignment, now):
        settings = NotificationSettings(daily_reminders={AssignmentType.EXAM: False})
        assignment = make_assignment(
            assignment_type=AssignmentType.EXAM,
            due_date=datetime(2026, 3, 12, 14, 0, tzinfo=timezone.utc),
        )

        assert TriggerKind.DAILY_DIGEST not in kinds(compute_triggers(assignment, settings, now))

    def test_daily_digest_moves_to_tomorrow_after_notification_time(self, make_assignment):
        evening = datetime(2026, 3, 2, 21, 0, tzinfo=timezone.utc)
        assignment = make_assignment(
            assignment_type=AssignmentType.QUIZ,
            due_date=datetime(2026, 3, 4, 9, 0, tzinfo=timezone.utc),
        )

        triggers = compute_triggers(assignment, NotificationSettings(), evening)

        digest = next(t for t in triggers if t.kind == TriggerKind.DAILY_DIGEST)
        assert digest.fires_at == datetime(2026, 3, 3, 20, 0, tzinfo=timezone.utc)
        assert digest.body.endswith("is due in less than a day.")

    def test_no_daily_digest_after_due_date(self, make_assignment, now):
        assignment = make_assignment(
            assignment_type=AssignmentType.QUIZ,
            due_date=datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc),
        )
        assert TriggerKind.DAILY_DIGEST not in kinds(
            compute_triggers(assignment, NotificationSettings(), now)
        )


class TestNotificationSettings:
    def test_defaults(self):
        settings = NotificationSettings()
        assert settings.enabled is True
        assert settings.notification_time == time(20, 0)
        assert settings.reminder_days_for(AssignmentType.EXAM) == 7
        assert settings.reminder_days_for(AssignmentType.HOMEWORK) == 1
        assert settings.daily_reminder_enabled_for(AssignmentType.QUIZ) is True
        assert settings.daily_reminder_enabled_for(AssignmentType.HOMEWORK) is False

    def test_partial_reminder_days_are_merged_with_defaults(self):
        settings = NotificationSettings(reminder_days={AssignmentType.EXAM: 10})
        assert settings.reminder_days_for(AssignmentType.EXAM) == 10
        assert settings.reminder_days_for(AssignmentType.QUIZ) == 3

    def test_daily_reminders_rejected_for_other_types(self):
        with pytest.raises(ValidationError):
            NotificationSettings(daily_reminders={AssignmentType.LAB: True})

    def test_negative_reminder_days_rejected(self):
        with pytest.raises(ValidationError):
            NotificationSettings(reminder_days={AssignmentType.EXAM: -1})


def test_next_notification_time_today_or_tomorrow(now):
    settings = NotificationSettings(notification_time=time(8, 0))
    assert next_notification_time(settings, now) == datetime(2026, 3, 3, 8, 0, tzinfo=timezone.utc)
    settings = NotificationSettings(notification_time=time(18, 30))
    assert next_notification_time(settings, now) == datetime(2026, 3, 2, 18, 30, tzinfo=timezone.utc)


def test_format_days():
    assert format_days(0) == "less than a day"
    assert format_days(1) == "1 day"
    assert format_days(5) == "5 days"


@pytest.mark.parametrize("kind", ASSIGNMENT_TRIGGER_KINDS)
def test_parse_trigger_identifier_with_dashed_ids(kind):
    identifier = trigger_identifier("3f2a-9c-01", kind)
    assert parse_trigger_identifier(identifier) == ("3f2a-9c-01", kind)


def test_parse_trigger_identifier_rejects_foreign_identifiers():
    assert parse_trigger_identifier("daily-digest-notification") is None
    assert parse_trigger_identifier("assignment--due") is None
