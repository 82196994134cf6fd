"""
FastAPI dependencies.

The container is built once per application and lives on ``app.state``;
routes reach the services through the aliases below rather than through
module-level singletons.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from planner.container import PlannerContainer
from planner.services.assignment_service import AssignmentService
from planner.services.errors import (
    AssignmentNotFound,
    InvalidDueDate,
    PlannerError,
    StoreReadFailure,
    StoreWriteFailure,
    UnknownClassGroup,
)
from planner.services.notification_coordinator import NotificationLifecycleCoordinator


def get_container(request: Request) -> PlannerContainer:
    return request.app.state.container


def get_assignment_service(
    container: Annotated[PlannerContainer, Depends(get_container)],
) -> AssignmentService:
    return container.assignments


def get_coordinator(
    container: Annotated[PlannerContainer, Depends(get_container)],
) -> NotificationLifecycleCoordinator:
    return container.coordinator


# Type aliases for dependency injection
Container = Annotated[PlannerContainer, Depends(get_container)]
Assignments = Annotated[AssignmentService, Depends(get_assignment_service)]
Coordinator = Annotated[NotificationLifecycleCoordinator, Depends(get_coordinator)]


def http_error(error: PlannerError) -> HTTPException:
    """
    Translate a planner error into the HTTP error a client should see.

    Usage:
        try:
            assignment = await assignments.get(assignment_id)
        except PlannerError as e:
            raise http_error(e) from e
    """
    if isinstance(error, AssignmentNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")
    if isinstance(error, UnknownClassGroup):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class group not found")
    if isinstance(error, InvalidDueDate):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error))
    if isinstance(error, (StoreReadFailure, StoreWriteFailure)):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Assignment storage is unavailable, try again later.",
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
