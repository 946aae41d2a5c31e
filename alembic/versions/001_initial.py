"""Initial tables: users, card task collections, calendar, mind tools activity.

Revision ID: 001
Revises:
Create Date: 2025-03-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CARD_TASK_TABLES = ("vision_board_tasks", "weekly_planner_tasks", "annual_calendar_tasks")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("firebase_uid", sa.String(128), nullable=True),
        sa.Column("welcome_email_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    for table in CARD_TASK_TABLES:
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("user_name", sa.String(255), nullable=False),
            sa.Column("email", sa.String(255), nullable=False),
            sa.Column("card_id", sa.String(255), nullable=False),
            sa.Column("tasks", sa.JSON(), nullable=False),
            sa.Column("theme", sa.String(255), nullable=False),
            *_timestamps(),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f(f"ix_{table}_email"), table, ["email"], unique=False)
        op.create_index(op.f(f"ix_{table}_card_id"), table, ["card_id"], unique=False)
        op.create_index(op.f(f"ix_{table}_theme"), table, ["theme"], unique=False)

    op.create_table(
        "calendar_2025_tasks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("task_date", sa.Date(), nullable=False),
        sa.Column("task_type", sa.Integer(), nullable=False),
        sa.Column("task_description", sa.Text(), nullable=False),
        sa.Column("color_code", sa.String(32), nullable=False),
        sa.Column("theme", sa.String(50), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_calendar_2025_tasks_email"), "calendar_2025_tasks", ["email"], unique=False)
    op.create_index(op.f("ix_calendar_2025_tasks_task_date"), "calendar_2025_tasks", ["task_date"], unique=False)
    op.create_index(op.f("ix_calendar_2025_tasks_theme"), "calendar_2025_tasks", ["theme"], unique=False)

    op.create_table(
        "mind_tools_activity",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("tracker_type", sa.String(50), nullable=False),
        sa.Column("activity_date", sa.Date(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_mind_tools_activity_email"), "mind_tools_activity", ["email"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_mind_tools_activity_email"), table_name="mind_tools_activity")
    op.drop_table("mind_tools_activity")
    op.drop_index(op.f("ix_calendar_2025_tasks_theme"), table_name="calendar_2025_tasks")
    op.drop_index(op.f("ix_calendar_2025_tasks_task_date"), table_name="calendar_2025_tasks")
    op.drop_index(op.f("ix_calendar_2025_tasks_email"), table_name="calendar_2025_tasks")
    op.drop_table("calendar_2025_tasks")
    for table in reversed(CARD_TASK_TABLES):
        op.drop_index(op.f(f"ix_{table}_theme"), table_name=table)
        op.drop_index(op.f(f"ix_{table}_card_id"), table_name=table)
        op.drop_index(op.f(f"ix_{table}_email"), table_name=table)
        op.drop_table(table)
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
