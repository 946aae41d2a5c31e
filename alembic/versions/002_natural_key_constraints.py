"""Unique constraints on natural keys so concurrent first-writes cannot duplicate rows.

Revision ID: 002
Revises: 001
Create Date: 2025-04-11

"""
from typing import Sequence, Union

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NATURAL_KEYS = {
    "vision_board_tasks": ["user_name", "email", "card_id", "theme"],
    "weekly_planner_tasks": ["user_name", "email", "card_id", "theme"],
    "annual_calendar_tasks": ["user_name", "email", "card_id", "theme"],
    "calendar_2025_tasks": ["user_name", "email", "task_date", "theme"],
    "mind_tools_activity": ["email", "tracker_type", "activity_date"],
}


def upgrade() -> None:
    # batch mode so SQLite can rebuild the tables
    for table, columns in NATURAL_KEYS.items():
        with op.batch_alter_table(table) as batch_op:
            batch_op.create_unique_constraint(f"uq_{table}_natural_key", columns)


def downgrade() -> None:
    for table in NATURAL_KEYS:
        with op.batch_alter_table(table) as batch_op:
            batch_op.drop_constraint(f"uq_{table}_natural_key", type_="unique")
