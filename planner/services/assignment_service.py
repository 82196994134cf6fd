"""
Assignment command pipeline.

Every command runs as intent -> apply to a loaded snapshot -> save ->
publish, inside one lock so two commands can never interleave their
load/save spans and lose an update. Subscribers only ever see changes that
are already persisted.
"""

import asyncio
import logging

from planner.schemas.assignments import Assignment, AssignmentCreate, AssignmentUpdate
from planner.schemas.notifications import SchedulingReport
from planner.schemas.subjects import ReconciliationResult
from planner.services.errors import AssignmentNotFound, StoreReadFailure, UnknownClassGroup
from planner.services.events import AssignmentChange, AssignmentChangePublisher, AssignmentEvent
from planner.services.notification_coordinator import NotificationLifecycleCoordinator
from planner.services.reconciliation import reconcile
from planner.services.stores import AssignmentStore
from planner.services.subjects import SubjectDirectory

logger = logging.getLogger(__name__)

# Optional links the user may clear by sending null
_CLEARABLE_FIELDS = frozenset({"period_id", "subject_id"})


def _index_of(assignments: list[Assignment], assignment_id: str) -> int:
    for index, assignment in enumerate(assignments):
        if assignment.id == assignment_id:
            return index
    raise AssignmentNotFound(assignment_id)


class AssignmentService:
    """Owns the assignment collection's read-modify-write cycles."""

    def __init__(
        self,
        store: AssignmentStore,
        subjects: SubjectDirectory,
        publisher: AssignmentChangePublisher,
        *,
        coordinator: NotificationLifecycleCoordinator | None = None,
        log: logging.Logger | None = None,
    ):
        self._store = store
        self._subjects = subjects
        self._publisher = publisher
        self._coordinator = coordinator
        self._logger = log or logger
        self._lock = asyncio.Lock()

    async def list_assignments(self) -> list[Assignment]:
        async with self._lock:
            return await self._store.get_all()

    async def get(self, assignment_id: str) -> Assignment:
        async with self._lock:
            assignments = await self._store.get_all()
            return assignments[_index_of(assignments, assignment_id)]

    async def create(self, data: AssignmentCreate) -> Assignment:
        """Add a new, incomplete assignment."""
        assignment = Assignment(**data.model_dump())
        async with self._lock:
            assignments = await self._store.get_all()
            await self._store.save_all([*assignments, assignment])
            await self._publish(AssignmentEvent.CREATED, assignment)
        self._logger.info("Created assignment %s", assignment.id)
        return assignment

    async def update(self, assignment_id: str, data: AssignmentUpdate) -> Assignment:
        """
        Apply a partial update.

        Explicit nulls are ignored except for the optional period and subject
        links. Picking a subject again clears the orphaned flag.
        """
        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in _CLEARABLE_FIELDS
        }
        async with self._lock:
            assignments = await self._store.get_all()
            index = _index_of(assignments, assignment_id)
            current = assignments[index]
            if "subject_id" in changes and changes["subject_id"] != current.subject_id:
                changes["is_orphaned"] = False
            updated = Assignment.model_validate({**current.model_dump(), **changes})
            assignments[index] = updated
            await self._store.save_all(assignments)
            await self._publish(AssignmentEvent.UPDATED, updated)
        return updated

    async def toggle_completion(self, assignment_id: str) -> Assignment:
        async with self._lock:
            assignments = await self._store.get_all()
            index = _index_of(assignments, assignment_id)
            toggled = assignments[index].model_copy(
                update={"is_completed": not assignments[index].is_completed}
            )
            assignments[index] = toggled
            await self._store.save_all(assignments)
            event = (
                AssignmentEvent.TOGGLED_COMPLETE
                if toggled.is_completed
                else AssignmentEvent.TOGGLED_INCOMPLETE
            )
            await self._publish(event, toggled)
        return toggled

    async def delete(self, assignment_id: str) -> Assignment:
        async with self._lock:
            assignments = await self._store.get_all()
            removed = assignments.pop(_index_of(assignments, assignment_id))
            await self._store.save_all(assignments)
            await self._publish(AssignmentEvent.DELETED, removed)
        self._logger.info("Deleted assignment %s", assignment_id)
        return removed

    async def switch_group(self, group_id: str) -> ReconciliationResult:
        """
        Reconcile the whole collection against a class group's roster.

        The roster must load and be non-empty; reconciling against an unknown
        roster would orphan everything. A failed read of the assignments is
        treated as an empty collection. The collection is saved only when
        something changed, and the changed assignments are published as one
        batch of updates.

        Raises:
            StoreReadFailure: If the roster cannot be loaded.
            UnknownClassGroup: If the group has no subjects.
        """
        subjects = await self._subjects.get_subjects(group_id)
        if not subjects:
            raise UnknownClassGroup(group_id)

        async with self._lock:
            try:
                assignments = await self._store.get_all()
            except StoreReadFailure as e:
                self._logger.warning("Skipping reconciliation for group %s: %s", group_id, e)
                return ReconciliationResult(assignments=[], changed=False)

            result = reconcile(assignments, subjects)
            if not result.changed:
                return result

            await self._store.save_all(result.assignments)
            touched = {*result.orphaned, *result.restored, *result.rebound}
            await self._publisher.publish(
                [
                    AssignmentChange(event=AssignmentEvent.UPDATED, assignment=assignment)
                    for assignment in result.assignments
                    if assignment.id in touched
                ]
            )
        return result

    async def reschedule_all(self) -> SchedulingReport:
        """Rebuild every notification from the stored collection."""
        if self._coordinator is None:
            return SchedulingReport()
        async with self._lock:
            assignments = await self._coordinator.load_assignments()
            return await self._coordinator.schedule_all_notifications(assignments)

    async def check_notifications(self) -> SchedulingReport:
        """Schedule missing notifications and drop stale ones."""
        if self._coordinator is None:
            return SchedulingReport()
        async with self._lock:
            assignments = await self._coordinator.load_assignments()
            return await self._coordinator.check_and_reschedule_notifications(assignments)

    async def _publish(self, event: AssignmentEvent, assignment: Assignment) -> None:
        await self._publisher.publish([AssignmentChange(event=event, assignment=assignment)])
