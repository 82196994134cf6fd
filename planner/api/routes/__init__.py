"""API routes package."""

from planner.api.routes import assignments, groups, notifications

__all__ = [
    "assignments",
    "groups",
    "notifications",
]
