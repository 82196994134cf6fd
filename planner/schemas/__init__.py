"""Pydantic schemas shared by the services and the API."""

from planner.schemas.assignments import (
    Assignment,
    AssignmentCreate,
    AssignmentType,
    AssignmentUpdate,
)
from planner.schemas.notifications import (
    ASSIGNMENT_TRIGGER_KINDS,
    DAILY_SUMMARY_IDENTIFIER,
    NotificationSettings,
    SchedulerResult,
    SchedulingReport,
    Trigger,
    TriggerKind,
    parse_trigger_identifier,
    trigger_identifier,
)
from planner.schemas.subjects import (
    ReconciliationRead,
    ReconciliationResult,
    Subject,
    SubjectCreate,
    SubjectRosterUpdate,
)

__all__ = [
    # Assignments
    "Assignment",
    "AssignmentCreate",
    "AssignmentType",
    "AssignmentUpdate",
    # Notifications
    "ASSIGNMENT_TRIGGER_KINDS",
    "DAILY_SUMMARY_IDENTIFIER",
    "NotificationSettings",
    "SchedulerResult",
    "SchedulingReport",
    "Trigger",
    "TriggerKind",
    "parse_trigger_identifier",
    "trigger_identifier",
    # Subjects
    "ReconciliationRead",
    "ReconciliationResult",
    "Subject",
    "SubjectCreate",
    "SubjectRosterUpdate",
]
