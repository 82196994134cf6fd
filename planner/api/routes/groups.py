"""Class group subject rosters and group switching."""

from fastapi import APIRouter

from planner.api.deps import Assignments, Container, http_error
from planner.schemas.subjects import ReconciliationRead, Subject, SubjectRosterUpdate
from planner.services.errors import PlannerError
from planner.services.subjects import build_roster

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("/{group_id}/subjects", response_model=list[Subject])
async def get_subjects(group_id: str, container: Container) -> list[Subject]:
    try:
        return await container.subjects.get_subjects(group_id)
    except PlannerError as e:
        raise http_error(e) from e


@router.put("/{group_id}/subjects", response_model=list[Subject])
async def replace_subjects(
    group_id: str,
    data: SubjectRosterUpdate,
    container: Container,
) -> list[Subject]:
    """
    Replace a group's roster.

    Ids are derived from subject names unless given, so the same subject in
    two groups shares an id. Assignments are not touched until the group is
    activated.
    """
    roster = build_roster(data.subjects)
    try:
        await container.subjects.replace_roster(group_id, roster)
    except PlannerError as e:
        raise http_error(e) from e
    return roster


@router.post("/{group_id}/activate", response_model=ReconciliationRead)
async def activate_group(group_id: str, assignments: Assignments) -> ReconciliationRead:
    """Switch to a class group and reconcile every assignment against its roster."""
    try:
        result = await assignments.switch_group(group_id)
    except PlannerError as e:
        raise http_error(e) from e
    return ReconciliationRead(
        group_id=group_id,
        changed=result.changed,
        orphaned=result.orphaned,
        restored=result.restored,
        rebound=result.rebound,
    )
