"""Initial schema.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

Creates the planner tables:
- assignments: the persisted assignment collection
- scheduled_notifications: pending reminders of the durable backend
- notification_settings: single row of JSON settings
- subjects: subject roster per class group
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ==========================================================================
    # ASSIGNMENTS TABLE
    # ==========================================================================
    op.create_table(
        "assignments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("course_code", sa.String(50), nullable=False, server_default=""),
        sa.Column("course_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_priority", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("assignment_type", sa.String(32), nullable=False, server_default="Homework"),
        sa.Column("period_id", sa.String(255), nullable=True),
        sa.Column("subject_id", sa.String(255), nullable=True),
        sa.Column("is_orphaned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_assignments_due_date", "assignments", ["due_date"])
    op.create_index("idx_assignments_subject", "assignments", ["subject_id"])

    # ==========================================================================
    # SCHEDULED_NOTIFICATIONS TABLE
    # ==========================================================================
    op.create_table(
        "scheduled_notifications",
        sa.Column("identifier", sa.String(255), nullable=False),
        sa.Column("assignment_id", sa.String(64), nullable=True),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("fires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("identifier"),
    )
    op.create_index("idx_scheduled_notifications_fires_at", "scheduled_notifications", ["fires_at"])
    op.create_index(
        "ix_scheduled_notifications_assignment_id", "scheduled_notifications", ["assignment_id"]
    )

    # ==========================================================================
    # NOTIFICATION_SETTINGS TABLE
    # ==========================================================================
    op.create_table(
        "notification_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # ==========================================================================
    # SUBJECTS TABLE
    # ==========================================================================
    op.create_table(
        "subjects",
        sa.Column("group_id", sa.String(255), nullable=False),
        sa.Column("subject_id", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("is_custom", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("group_id", "subject_id"),
    )


def downgrade() -> None:
    op.drop_table("subjects")
    op.drop_table("notification_settings")
    op.drop_index("ix_scheduled_notifications_assignment_id", table_name="scheduled_notifications")
    op.drop_index("idx_scheduled_notifications_fires_at", table_name="scheduled_notifications")
    op.drop_table("scheduled_notifications")
    op.drop_index("idx_assignments_subject", table_name="assignments")
    op.drop_index("idx_assignments_due_date", table_name="assignments")
    op.drop_table("assignments")
