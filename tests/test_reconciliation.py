"""Unit tests for orphaned-assignment reconciliation."""

import pytest

from planner.schemas.subjects import Subject, SubjectCreate
from planner.services.reconciliation import reconcile
from planner.services.subjects import build_roster, subject_id_for_name


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def science_roster():
    return [
        Subject(id="subject_physics", name="Physics"),
        Subject(id="subject_chemistry", name="Chemistry"),
    ]


@pytest.fixture
def arts_roster():
    return [
        Subject(id="subject_history", name="History"),
        Subject(id="subject_art", name="Art"),
    ]


# ============================================================================
# Orphaning and restoring
# ============================================================================


def test_missing_subject_orphans_but_keeps_subject_id(make_assignment, arts_roster):
    assignment = make_assignment(subject_id="subject_physics", course_name="Physics")

    result = reconcile([assignment], arts_roster)

    updated = result.assignments[0]
    assert result.changed
    assert updated.is_orphaned
    assert updated.subject_id == "subject_physics"
    assert result.orphaned == [assignment.id]


def test_switching_back_restores(make_assignment, science_roster, arts_roster):
    assignment = make_assignment(subject_id="subject_physics", course_name="Physics")

    orphaned = reconcile([assignment], arts_roster).assignments
    result = reconcile(orphaned, science_roster)

    restored = result.assignments[0]
    assert not restored.is_orphaned
    assert restored.subject_id == "subject_physics"
    assert result.restored == [assignment.id]
    assert result.rebound == []


def test_name_match_rebinds_subject(make_assignment):
    """Same course name in the new group under a different id: follow the name."""
    assignment = make_assignment(subject_id="custom_subject_1", course_name="physics")
    roster = [Subject(id="subject_physics", name="Physics")]

    result = reconcile([assignment], roster)

    updated = result.assignments[0]
    assert not updated.is_orphaned
    assert updated.subject_id == "subject_physics"
    assert result.rebound == [assignment.id]
    assert result.orphaned == []


def test_orphan_restored_by_name_is_rebound(make_assignment, science_roster):
    assignment = make_assignment(
        subject_id="subject_old_physics", course_name="Physics", is_orphaned=True
    )

    result = reconcile([assignment], science_roster)

    updated = result.assignments[0]
    assert not updated.is_orphaned
    assert updated.subject_id == "subject_physics"
    assert result.restored == [assignment.id]
    assert result.rebound == [assignment.id]


def test_assignment_without_subject_and_unknown_name_is_orphaned(make_assignment, science_roster):
    assignment = make_assignment(subject_id=None, course_name="Drama")

    result = reconcile([assignment], science_roster)

    assert result.assignments[0].is_orphaned
    assert result.assignments[0].subject_id is None


def test_assignment_without_subject_binds_by_name(make_assignment, science_roster):
    assignment = make_assignment(subject_id=None, course_name="Chemistry")

    result = reconcile([assignment], science_roster)

    assert result.assignments[0].subject_id == "subject_chemistry"
    assert not result.assignments[0].is_orphaned


# ============================================================================
# Pass-level properties
# ============================================================================


def test_second_pass_changes_nothing(make_assignment, science_roster):
    assignments = [
        make_assignment(subject_id="subject_math", course_name="Math"),
        make_assignment(subject_id="x", course_name="Chemistry"),
        make_assignment(subject_id="subject_physics", course_name="Physics"),
    ]

    first = reconcile(assignments, science_roster)
    second = reconcile(first.assignments, science_roster)

    assert first.changed
    assert not second.changed
    assert second.assignments == first.assignments


def test_untouched_assignments_are_returned_as_is(make_assignment, science_roster):
    bound = make_assignment(subject_id="subject_physics", course_name="Physics")
    stray = make_assignment(subject_id="subject_math", course_name="Math")

    result = reconcile([bound, stray], science_roster)

    assert result.assignments[0] is bound
    assert result.assignments[1] is not stray
    assert [a.id for a in result.assignments] == [bound.id, stray.id]


def test_empty_roster_orphans_everything(make_assignment):
    assignments = [make_assignment(subject_id="subject_physics"), make_assignment(subject_id=None)]

    result = reconcile(assignments, [])

    assert all(a.is_orphaned for a in result.assignments)


def test_duplicate_names_first_subject_wins(make_assignment):
    roster = [
        Subject(id="subject_lab_a", name="Lab"),
        Subject(id="subject_lab_b", name="lab"),
    ]
    assignment = make_assignment(subject_id=None, course_name="LAB")

    result = reconcile([assignment], roster)

    assert result.assignments[0].subject_id == "subject_lab_a"


# ============================================================================
# Roster building
# ============================================================================


def test_subject_ids_are_derived_from_names():
    assert subject_id_for_name("Applied  Physics ") == "subject_applied_physics"


def test_build_roster_dedupes_and_keeps_given_ids():
    roster = build_roster(
        [
            SubjectCreate(name="Physics"),
            SubjectCreate(name="Physics"),
            SubjectCreate(id="custom_subject_7", name="Robotics", is_custom=True),
            SubjectCreate(name="Film Studies", is_custom=True),
        ]
    )

    assert [s.id for s in roster[:2]] == ["subject_physics", "custom_subject_7"]
    assert roster[2].id.startswith("custom_subject_")
    assert len(roster) == 3
