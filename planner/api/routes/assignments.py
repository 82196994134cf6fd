"""Assignment routes."""

from fastapi import APIRouter, status

from planner.api.deps import Assignments, Coordinator, http_error
from planner.schemas.assignments import Assignment, AssignmentCreate, AssignmentUpdate
from planner.schemas.notifications import Trigger
from planner.services.errors import PlannerError

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get("/", response_model=list[Assignment])
async def list_assignments(
    assignments: Assignments,
    include_completed: bool = True,
    orphaned: bool | None = None,
) -> list[Assignment]:
    """
    List assignments.

    Filters:
    - include_completed: Set to false to hide completed assignments
    - orphaned: Only orphaned (true) or only bound (false) assignments
    """
    try:
        items = await assignments.list_assignments()
    except PlannerError as e:
        raise http_error(e) from e

    if not include_completed:
        items = [a for a in items if not a.is_completed]
    if orphaned is not None:
        items = [a for a in items if a.is_orphaned == orphaned]
    return items


@router.post("/", response_model=Assignment, status_code=status.HTTP_201_CREATED)
async def create_assignment(data: AssignmentCreate, assignments: Assignments) -> Assignment:
    """Create an assignment and schedule its reminders."""
    try:
        return await assignments.create(data)
    except PlannerError as e:
        raise http_error(e) from e


@router.get("/{assignment_id}", response_model=Assignment)
async def get_assignment(assignment_id: str, assignments: Assignments) -> Assignment:
    try:
        return await assignments.get(assignment_id)
    except PlannerError as e:
        raise http_error(e) from e


@router.patch("/{assignment_id}", response_model=Assignment)
async def update_assignment(
    assignment_id: str,
    data: AssignmentUpdate,
    assignments: Assignments,
) -> Assignment:
    """Update an assignment; its reminders are rebuilt from the new values."""
    try:
        return await assignments.update(assignment_id, data)
    except PlannerError as e:
        raise http_error(e) from e


@router.post("/{assignment_id}/toggle", response_model=Assignment)
async def toggle_assignment(assignment_id: str, assignments: Assignments) -> Assignment:
    """Flip completion. Completing cancels reminders, reopening schedules them again."""
    try:
        return await assignments.toggle_completion(assignment_id)
    except PlannerError as e:
        raise http_error(e) from e


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(assignment_id: str, assignments: Assignments) -> None:
    try:
        await assignments.delete(assignment_id)
    except PlannerError as e:
        raise http_error(e) from e


@router.get("/{assignment_id}/triggers", response_model=list[Trigger])
async def preview_triggers(
    assignment_id: str,
    assignments: Assignments,
    coordinator: Coordinator,
) -> list[Trigger]:
    """Reminders the assignment would get right now, without scheduling anything."""
    try:
        assignment = await assignments.get(assignment_id)
        return await coordinator.preview(assignment)
    except PlannerError as e:
        raise http_error(e) from e
