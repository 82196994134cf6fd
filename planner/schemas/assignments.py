"""Assignment schemas."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import ConfigDict, Field, field_validator

from planner.schemas.base import BaseSchema, ensure_aware


class AssignmentType(str, Enum):
    """Type of assignment."""

    HOMEWORK = "Homework"
    TEST = "Test"
    EXAM = "Exam"
    PROJECT = "Project"
    QUIZ = "Quiz"
    LAB = "Lab"
    ESSAY = "Essay"
    PRESENTATION = "Presentation"
    OTHER = "Other"


def new_assignment_id() -> str:
    return str(uuid4())


class Assignment(BaseSchema):
    """
    In-memory copy of a stored assignment.

    Instances are immutable; services produce updated copies with
    ``model_copy(update=...)`` instead of mutating shared state.
    ``due_date`` may be missing on legacy records; planning treats that as an
    invalid due date and skips the record.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_assignment_id, min_length=1)
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    course_code: str = ""
    course_name: str = ""
    due_date: datetime | None = None
    is_completed: bool = False
    is_priority: bool = False
    assignment_type: AssignmentType = AssignmentType.HOMEWORK
    period_id: str | None = None
    subject_id: str | None = None
    is_orphaned: bool = False

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime | None) -> datetime | None:
        """Interpret naive due dates as UTC."""
        return ensure_aware(value)

    @property
    def course_info(self) -> str:
        """Course label used in reminder texts."""
        if self.course_code:
            return f"{self.course_code} - {self.course_name}"
        return self.course_name


class AssignmentCreate(BaseSchema):
    """Schema for creating an assignment."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    course_code: str = Field("", max_length=50)
    course_name: str = Field("", max_length=255)
    due_date: datetime
    is_priority: bool = False
    assignment_type: AssignmentType = AssignmentType.HOMEWORK
    period_id: str | None = None
    subject_id: str | None = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime | None) -> datetime | None:
        """Interpret naive due dates as UTC."""
        return ensure_aware(value)


class AssignmentUpdate(BaseSchema):
    """Schema for updating an assignment. All fields optional; completion goes through toggle."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    course_code: str | None = Field(None, max_length=50)
    course_name: str | None = Field(None, max_length=255)
    due_date: datetime | None = None
    is_priority: bool | None = None
    assignment_type: AssignmentType | None = None
    period_id: str | None = None
    subject_id: str | None = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, value: datetime | None) -> datetime | None:
        """Interpret naive due dates as UTC."""
        return ensure_aware(value)
