"""
SQLAlchemy 2.0 Models for the planner.

Uses modern declarative syntax with Mapped[] type annotations. Column types
are portable so the same models run on Postgres and SQLite.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from planner.db.base import Base


class AssignmentRecord(Base):
    """
    Stored assignment.

    subject_id is kept when the assignment is orphaned; it is the key used to
    restore the link after switching back to a group that has the subject.
    """

    __tablename__ = "assignments"
    __table_args__ = (
        Index("idx_assignments_due_date", "due_date"),
        Index("idx_assignments_subject", "subject_id"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    course_code: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    course_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_completed: Mapped[bool] = mapped_column(nullable=False, default=False)
    is_priority: Mapped[bool] = mapped_column(nullable=False, default=False)
    assignment_type: Mapped[str] = mapped_column(String(32), nullable=False, default="Homework")
    period_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    subject_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_orphaned: Mapped[bool] = mapped_column(nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ScheduledNotification(Base):
    """
    Pending reminder held by the durable notification backend.

    The identifier is the primary key, so scheduling the same identifier
    again replaces the row instead of adding a second one.
    """

    __tablename__ = "scheduled_notifications"
    __table_args__ = (Index("idx_scheduled_notifications_fires_at", "fires_at"),)

    identifier: Mapped[str] = mapped_column(String(255), primary_key=True)
    assignment_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    fires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class NotificationSettingsRecord(Base):
    """Single-row table holding the user's notification settings as JSON."""

    __tablename__ = "notification_settings"

    id: Mapped[int] = mapped_column(primary_key=True, default=1)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class SubjectRecord(Base):
    """Subject in one class group's roster."""

    __tablename__ = "subjects"

    group_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    subject_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_custom: Mapped[bool] = mapped_column(nullable=False, default=False)
    position: Mapped[int] = mapped_column(nullable=False, default=0)
