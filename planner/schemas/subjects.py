"""Subject roster and reconciliation schemas."""

from pydantic import ConfigDict, Field

from planner.schemas.assignments import Assignment
from planner.schemas.base import BaseSchema


class Subject(BaseSchema):
    """A subject offered to the currently selected class group."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    is_custom: bool = False


class SubjectCreate(BaseSchema):
    """Roster entry; ``id`` is derived from the name when omitted."""

    id: str | None = Field(None, min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    is_custom: bool = False


class SubjectRosterUpdate(BaseSchema):
    """Full replacement of one class group's roster."""

    subjects: list[SubjectCreate]


class ReconciliationResult(BaseSchema):
    """Collection after a reconciliation pass plus what moved."""

    assignments: list[Assignment]
    changed: bool
    orphaned: list[str] = Field(default_factory=list)
    restored: list[str] = Field(default_factory=list)
    rebound: list[str] = Field(default_factory=list)


class ReconciliationRead(BaseSchema):
    """API view of a group switch."""

    group_id: str
    changed: bool
    orphaned: list[str]
    restored: list[str]
    rebound: list[str]
