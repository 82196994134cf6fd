"""
Assignment store collaborators.

A store hands out full snapshots of the collection and accepts full
replacements. It never merges partial records; the assignment service owns
the read-modify-write cycle.
"""

import logging
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from planner.db.models import AssignmentRecord
from planner.schemas.assignments import Assignment, AssignmentType
from planner.schemas.base import ensure_aware
from planner.services.errors import StoreReadFailure, StoreWriteFailure

logger = logging.getLogger(__name__)


class AssignmentStore(Protocol):
    """Persistent assignment collection."""

    async def get_all(self) -> list[Assignment]: ...

    async def save_all(self, assignments: list[Assignment]) -> None: ...


class InMemoryAssignmentStore:
    """Store holding the collection in process memory."""

    def __init__(self, assignments: list[Assignment] | None = None):
        self._assignments = list(assignments or [])

    async def get_all(self) -> list[Assignment]:
        return list(self._assignments)

    async def save_all(self, assignments: list[Assignment]) -> None:
        self._assignments = list(assignments)


def _to_utc(value: datetime | None) -> datetime | None:
    value = ensure_aware(value)
    return value.astimezone(timezone.utc) if value is not None else None


def _record_to_schema(record: AssignmentRecord) -> Assignment:
    try:
        assignment_type = AssignmentType(record.assignment_type)
    except ValueError:
        # Rows written before the type column was filled default to homework
        logger.warning(
            "Unknown assignment type %r on %s, using Homework", record.assignment_type, record.id
        )
        assignment_type = AssignmentType.HOMEWORK

    return Assignment(
        id=record.id,
        title=record.title or "Untitled",
        description=record.description or "",
        course_code=record.course_code or "",
        course_name=record.course_name or "",
        due_date=_to_utc(record.due_date),
        is_completed=record.is_completed,
        is_priority=record.is_priority,
        assignment_type=assignment_type,
        period_id=record.period_id,
        subject_id=record.subject_id,
        is_orphaned=record.is_orphaned,
    )


def _schema_to_record(assignment: Assignment, updated_at: datetime) -> AssignmentRecord:
    return AssignmentRecord(
        id=assignment.id,
        title=assignment.title,
        description=assignment.description,
        course_code=assignment.course_code,
        course_name=assignment.course_name,
        due_date=_to_utc(assignment.due_date),
        is_completed=assignment.is_completed,
        is_priority=assignment.is_priority,
        assignment_type=assignment.assignment_type.value,
        period_id=assignment.period_id,
        subject_id=assignment.subject_id,
        is_orphaned=assignment.is_orphaned,
        updated_at=updated_at,
    )


class SqlAssignmentStore:
    """Store backed by the ``assignments`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_all(self) -> list[Assignment]:
        """
        Load every stored assignment.

        Raises:
            StoreReadFailure: If the database cannot be queried.
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AssignmentRecord).order_by(
                        AssignmentRecord.due_date, AssignmentRecord.id
                    )
                )
                records = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreReadFailure(f"Failed to load assignments: {e}") from e
        return [_record_to_schema(record) for record in records]

    async def save_all(self, assignments: list[Assignment]) -> None:
        """
        Replace the stored collection with ``assignments``.

        Rows missing from the list are deleted; the rest are upserted by id.

        Raises:
            StoreWriteFailure: If the transaction fails.
        """
        updated_at = datetime.now(timezone.utc)
        ids = [assignment.id for assignment in assignments]
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(AssignmentRecord).where(AssignmentRecord.id.not_in(ids))
                )
                for assignment in assignments:
                    await session.merge(_schema_to_record(assignment, updated_at))
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreWriteFailure(f"Failed to save assignments: {e}") from e
