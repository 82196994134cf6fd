"""Planner services: trigger planning, scheduling, reconciliation and collaborators."""

from planner.services.assignment_service import AssignmentService
from planner.services.digest import build_daily_summary
from planner.services.events import AssignmentChange, AssignmentChangePublisher, AssignmentEvent
from planner.services.notification_coordinator import NotificationLifecycleCoordinator
from planner.services.reconciliation import reconcile
from planner.services.scheduler import InMemoryNotificationBackend, SchedulerAdapter
from planner.services.trigger_planner import compute_triggers

__all__ = [
    "AssignmentChange",
    "AssignmentChangePublisher",
    "AssignmentEvent",
    "AssignmentService",
    "InMemoryNotificationBackend",
    "NotificationLifecycleCoordinator",
    "SchedulerAdapter",
    "build_daily_summary",
    "compute_triggers",
    "reconcile",
]
