"""
Orphaned-assignment reconciliation.

After the student switches class group, the valid subject roster changes.
Each assignment is checked against the new roster on its own:

- an assignment whose subject id and course name both miss the roster
  becomes orphaned (its subject_id is kept so it can be restored later)
- an orphaned assignment whose subject id or course name matches again is
  restored
- when only the name matches, subject_id is rebound to the matching subject

Running the pass twice against the same roster changes nothing the second time.
"""

import logging
from collections.abc import Iterable

from planner.schemas.assignments import Assignment
from planner.schemas.subjects import ReconciliationResult, Subject

logger = logging.getLogger(__name__)


class SubjectIndex:
    """Lookup tables for one roster: ids, and lower-cased names to ids."""

    def __init__(self, subjects: Iterable[Subject]):
        self.ids: set[str] = set()
        self.ids_by_name: dict[str, str] = {}
        for subject in subjects:
            self.ids.add(subject.id)
            # First subject with a given name wins
            self.ids_by_name.setdefault(subject.name.lower(), subject.id)

    def has_id(self, subject_id: str | None) -> bool:
        return subject_id is not None and subject_id in self.ids

    def id_for_name(self, course_name: str) -> str | None:
        return self.ids_by_name.get(course_name.lower())


def reconcile_assignment(assignment: Assignment, index: SubjectIndex) -> Assignment:
    """Return the assignment with orphan state and subject link fixed up."""
    id_exists = index.has_id(assignment.subject_id)
    name_match = index.id_for_name(assignment.course_name)

    updates: dict = {}
    if assignment.is_orphaned:
        if id_exists or name_match is not None:
            updates["is_orphaned"] = False
            if not id_exists:
                updates["subject_id"] = name_match
    elif not id_exists and name_match is None:
        updates["is_orphaned"] = True
    elif not id_exists:
        updates["subject_id"] = name_match

    if not updates or all(getattr(assignment, k) == v for k, v in updates.items()):
        return assignment
    return assignment.model_copy(update=updates)


def reconcile(assignments: Iterable[Assignment], subjects: Iterable[Subject]) -> ReconciliationResult:
    """
    Re-evaluate every assignment against the current roster.

    Args:
        assignments: Full assignment collection
        subjects: Valid subjects for the selected class group

    Returns:
        ReconciliationResult with the updated collection (same order), whether
        anything changed, and the ids that were orphaned, restored or rebound.
    """
    index = SubjectIndex(subjects)
    updated: list[Assignment] = []
    orphaned: list[str] = []
    restored: list[str] = []
    rebound: list[str] = []

    for assignment in assignments:
        result = reconcile_assignment(assignment, index)
        updated.append(result)
        if result is assignment:
            continue
        if result.is_orphaned and not assignment.is_orphaned:
            orphaned.append(result.id)
        if assignment.is_orphaned and not result.is_orphaned:
            restored.append(result.id)
        if result.subject_id != assignment.subject_id:
            rebound.append(result.id)

    changed = bool(orphaned or restored or rebound)
    if changed:
        logger.info(
            "Reconciled assignments: %d orphaned, %d restored, %d rebound",
            len(orphaned),
            len(restored),
            len(rebound),
        )
    return ReconciliationResult(
        assignments=updated,
        changed=changed,
        orphaned=orphaned,
        restored=restored,
        rebound=rebound,
    )
