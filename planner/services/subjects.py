"""Subject rosters per class group."""

import logging
import re
from collections.abc import Iterable
from typing import Protocol
from uuid import uuid4

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from planner.db.models import SubjectRecord
from planner.schemas.subjects import Subject, SubjectCreate
from planner.services.errors import StoreReadFailure, StoreWriteFailure

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def subject_id_for_name(name: str) -> str:
    """
    Stable id for a schedule subject, e.g. ``Applied Physics`` -> ``subject_applied_physics``.

    Two groups teaching the same subject name produce the same id, which is
    what lets an orphaned assignment find its subject again by id.
    """
    return f"subject_{_WHITESPACE.sub('_', name.strip()).lower()}"


def custom_subject_id() -> str:
    return f"custom_subject_{uuid4().hex}"


def build_roster(entries: Iterable[SubjectCreate]) -> list[Subject]:
    """Assign ids to roster entries and drop duplicates (first one wins)."""
    roster: dict[str, Subject] = {}
    for entry in entries:
        if entry.id:
            subject_id = entry.id
        elif entry.is_custom:
            subject_id = custom_subject_id()
        else:
            subject_id = subject_id_for_name(entry.name)
        if subject_id not in roster:
            roster[subject_id] = Subject(id=subject_id, name=entry.name, is_custom=entry.is_custom)
    return list(roster.values())


class SubjectDirectory(Protocol):
    """Roster of valid subjects for each class group."""

    async def get_subjects(self, group_id: str) -> list[Subject]: ...

    async def replace_roster(self, group_id: str, subjects: list[Subject]) -> None: ...


class InMemorySubjectDirectory:
    def __init__(self, rosters: dict[str, list[Subject]] | None = None):
        self._rosters = {group: list(subjects) for group, subjects in (rosters or {}).items()}

    async def get_subjects(self, group_id: str) -> list[Subject]:
        return list(self._rosters.get(group_id, []))

    async def replace_roster(self, group_id: str, subjects: list[Subject]) -> None:
        self._rosters[group_id] = list(subjects)


class SqlSubjectDirectory:
    """Rosters stored in the ``subjects`` table, keyed by group."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_subjects(self, group_id: str) -> list[Subject]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(SubjectRecord)
                    .where(SubjectRecord.group_id == group_id)
                    .order_by(SubjectRecord.position)
                )
                records = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreReadFailure(f"Failed to load subjects for group {group_id}: {e}") from e
        return [Subject(id=r.subject_id, name=r.name, is_custom=r.is_custom) for r in records]

    async def replace_roster(self, group_id: str, subjects: list[Subject]) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(delete(SubjectRecord).where(SubjectRecord.group_id == group_id))
                session.add_all(
                    SubjectRecord(
                        group_id=group_id,
                        subject_id=subject.id,
                        name=subject.name,
                        is_custom=subject.is_custom,
                        position=position,
                    )
                    for position, subject in enumerate(subjects)
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreWriteFailure(f"Failed to save subjects for group {group_id}: {e}") from e
        logger.info("Stored %d subjects for group %s", len(subjects), group_id)
