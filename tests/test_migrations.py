"""Tests for the Alembic migrations, run in-process on the async SQLite driver."""

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ROOT = Path(__file__).resolve().parents[1]

NATURAL_KEYS = {
    "vision_board_tasks": ["user_name", "email", "card_id", "theme"],
    "weekly_planner_tasks": ["user_name", "email", "card_id", "theme"],
    "annual_calendar_tasks": ["user_name", "email", "card_id", "theme"],
    "calendar_2025_tasks": ["user_name", "email", "task_date", "theme"],
    "mind_tools_activity": ["email", "tracker_type", "activity_date"],
}


@pytest.fixture
def migrated(tmp_path, monkeypatch):
    """Alembic config pointed at a scratch database through ALEMBIC_DATABASE_URL."""
    db_path = tmp_path / "migrated.db"
    monkeypatch.setenv("ALEMBIC_DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(ROOT / "alembic"))
    engine = create_engine(f"sqlite:///{db_path}")
    yield config, engine
    engine.dispose()


def test_upgrade_creates_tables_with_natural_keys(migrated):
    config, engine = migrated
    command.upgrade(config, "head")

    inspector = inspect(engine)
    assert set(inspector.get_table_names()) >= {"users", *NATURAL_KEYS}
    for table, columns in NATURAL_KEYS.items():
        constraints = {c["name"]: c["column_names"] for c in inspector.get_unique_constraints(table)}
        assert constraints[f"uq_{table}_natural_key"] == columns


def test_downgrade_to_base_drops_everything(migrated):
    config, engine = migrated
    command.upgrade(config, "head")
    command.downgrade(config, "base")

    assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
