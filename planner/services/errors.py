"""Error taxonomy for the planner core."""


class PlannerError(Exception):
    """Base class for planner errors."""


class SchedulingFailure(PlannerError):
    """The notification backend refused or failed an operation."""


class NotificationPermissionDenied(SchedulingFailure):
    """The user or platform has not granted notification permission."""


class ScheduledNotificationLimitReached(SchedulingFailure):
    """The platform cap on outstanding notifications has been hit."""


class StoreReadFailure(PlannerError):
    """The assignment collection could not be loaded."""


class StoreWriteFailure(PlannerError):
    """The assignment collection could not be saved."""


class InvalidDueDate(PlannerError):
    """An assignment has a missing or unusable due date."""

    def __init__(self, assignment_id: str, reason: str = "missing due date"):
        super().__init__(f"Assignment {assignment_id}: {reason}")
        self.assignment_id = assignment_id


class AssignmentNotFound(PlannerError):
    """No assignment with the requested id exists."""

    def __init__(self, assignment_id: str):
        super().__init__(f"Assignment {assignment_id} not found")
        self.assignment_id = assignment_id


class UnknownClassGroup(PlannerError):
    """A class group has no registered subjects."""

    def __init__(self, group_id: str):
        super().__init__(f"Class group {group_id} has no subjects")
        self.group_id = group_id
