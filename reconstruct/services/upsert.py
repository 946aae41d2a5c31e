"""Generic upsert-by-natural-key over table descriptors.

A :class:`TableDescriptor` names the mapped class, the columns that form the
natural key and the payload columns that may be written. :func:`upsert`
looks the row up by natural key, then either partially updates it or, after
checking the creation-required columns, inserts it.

Every natural key is backed by a unique constraint. If two requests race on
the same key and both miss the lookup, the loser's insert raises
``IntegrityError``; :func:`insert_or_get` rolls back and hands back the
winner's row, and the loser's payload is applied to it as an update, so one
logical entity never gets two rows.
"""
import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reconstruct.core.errors import NotFound, ValidationFailure
from reconstruct.models import (
    AnnualCalendarTasks,
    CalendarTask,
    MindToolsActivity,
    VisionBoardTasks,
    WeeklyPlannerTasks,
)
from reconstruct.models.mixins import utcnow

logger = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"


@dataclass(frozen=True)
class TableDescriptor:
    model: type
    key_columns: tuple[str, ...]
    payload_columns: tuple[str, ...]
    required_on_create: tuple[str, ...] = field(default=())

    @property
    def table_name(self) -> str:
        return self.model.__tablename__


@dataclass
class UpsertResult:
    action: str
    row: Any

    @property
    def created(self) -> bool:
        return self.action == CREATED

    @property
    def row_id(self) -> int:
        return self.row.id


CARD_TASK_COLUMNS = dict(
    key_columns=("user_name", "email", "card_id", "theme"),
    payload_columns=("tasks",),
    required_on_create=("tasks",),
)

VISION_BOARD = TableDescriptor(VisionBoardTasks, **CARD_TASK_COLUMNS)
WEEKLY_PLANNER = TableDescriptor(WeeklyPlannerTasks, **CARD_TASK_COLUMNS)
ANNUAL_CALENDAR = TableDescriptor(AnnualCalendarTasks, **CARD_TASK_COLUMNS)

CALENDAR = TableDescriptor(
    CalendarTask,
    key_columns=("user_name", "email", "task_date", "theme"),
    payload_columns=("task_type", "task_description", "color_code"),
    required_on_create=("task_type", "task_description", "color_code"),
)

MIND_TOOLS = TableDescriptor(
    MindToolsActivity,
    key_columns=("email", "tracker_type", "activity_date"),
    payload_columns=("user_name", "count"),
    required_on_create=("user_name", "count"),
)

# The only tables the generic save endpoint may target, by client-facing name
SAVEABLE_TABLES = {
    VISION_BOARD.table_name: VISION_BOARD,
    WEEKLY_PLANNER.table_name: WEEKLY_PLANNER,
}


def resolve_saveable_table(name: str | None) -> TableDescriptor:
    """Map a caller-supplied table name to its descriptor, or reject it."""
    try:
        return SAVEABLE_TABLES[name]
    except (KeyError, TypeError):
        allowed = " or ".join(f'"{t}"' for t in SAVEABLE_TABLES)
        raise ValidationFailure(f"Invalid table name. Only {allowed} allowed.") from None


def is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def missing_fields(values: dict[str, Any], names) -> list[str]:
    return [name for name in names if is_missing(values.get(name))]


async def find_by_natural_key(db: AsyncSession, descriptor: TableDescriptor, key: dict[str, Any]):
    model = descriptor.model
    stmt = select(model).where(
        *(getattr(model, column) == key[column] for column in descriptor.key_columns)
    ).order_by(model.id)
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none()


def apply_partial_update(row, payload: dict[str, Any], columns) -> None:
    """Set only the columns present in the payload and refresh updated_at."""
    for column in columns:
        value = payload.get(column)
        if value is not None:
            setattr(row, column, value)
    row.updated_at = utcnow()


async def upsert(
    db: AsyncSession,
    descriptor: TableDescriptor,
    key: dict[str, Any],
    payload: dict[str, Any],
) -> UpsertResult:
    """Insert-if-absent, update-if-present, keyed by the descriptor's natural key.

    The caller is responsible for the ownership check on the key's identity
    columns. Raises ValidationFailure when a row must be created and a
    required column is missing.
    """
    missing_key = missing_fields(key, descriptor.key_columns)
    if missing_key:
        raise ValidationFailure(f"Missing required fields: {', '.join(missing_key)}")

    existing = await find_by_natural_key(db, descriptor, key)
    if existing is not None:
        return await _update(db, descriptor, existing, payload)

    missing = missing_fields(payload, descriptor.required_on_create)
    if missing:
        raise ValidationFailure(f"Missing required fields: {', '.join(missing)}")

    created, row = await insert_or_get(db, descriptor, key, payload)
    if created:
        return UpsertResult(CREATED, row)
    return await _update(db, descriptor, row, payload)


async def insert_or_get(
    db: AsyncSession,
    descriptor: TableDescriptor,
    key: dict[str, Any],
    payload: dict[str, Any],
) -> tuple[bool, Any]:
    """Insert a new row; if the natural key was taken meanwhile, return the existing row untouched."""
    values = {column: key[column] for column in descriptor.key_columns}
    values.update(
        {column: payload[column] for column in descriptor.payload_columns if payload.get(column) is not None}
    )
    row = descriptor.model(**values)
    db.add(row)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Concurrent insert on %s for key %s; using the existing row", descriptor.table_name, key)
        existing = await find_by_natural_key(db, descriptor, key)
        if existing is None:
            raise
        return False, existing

    logger.info("Created %s row %s", descriptor.table_name, row.id)
    return True, row


async def _update(db: AsyncSession, descriptor: TableDescriptor, row, payload: dict[str, Any]) -> UpsertResult:
    apply_partial_update(row, payload, descriptor.payload_columns)
    await db.commit()
    logger.info("Updated %s row %s", descriptor.table_name, row.id)
    return UpsertResult(UPDATED, row)


async def get_owned_row(db: AsyncSession, descriptor: TableDescriptor, row_id: int, user_name: str, email: str):
    """Fetch a row by id only if it belongs to the identity."""
    model = descriptor.model
    result = await db.execute(
        select(model).where(model.id == row_id, model.user_name == user_name, model.email == email)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFound(f"{_label(descriptor)} not found or not owned by this user")
    return row


async def list_rows(db: AsyncSession, descriptor: TableDescriptor, user_name: str, email: str, **filters) -> list:
    model = descriptor.model
    stmt = select(model).where(model.user_name == user_name, model.email == email)
    for column, value in filters.items():
        stmt = stmt.where(getattr(model, column) == value)
    result = await db.execute(stmt.order_by(model.id))
    return list(result.scalars().all())


def _label(descriptor: TableDescriptor) -> str:
    return "Calendar task" if descriptor is CALENDAR else "Task"
