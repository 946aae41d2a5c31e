"""Mind tools activity counters: single increments and max-wins batch sync.

Counts are usage tallies that only ever grow, so when the mobile client syncs
its offline counts the larger of the client and server observation is kept,
whatever order they arrive in.
"""
import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reconstruct.core.errors import ValidationFailure
from reconstruct.core.identity import Identity
from reconstruct.models import MindToolsActivity
from reconstruct.services.upsert import (
    CREATED,
    MIND_TOOLS,
    UPDATED,
    apply_partial_update,
    find_by_natural_key,
    insert_or_get,
)

logger = logging.getLogger(__name__)

UNCHANGED = "unchanged"
FAILED = "failed"

# count is a signed 32-bit INTEGER column
MAX_COUNT = 2**31 - 1


class TrackerType(str, Enum):
    THOUGHT_SHREDDER = "thought_shredder"
    MAKE_ME_SMILE = "make_me_smile"
    BUBBLE_WRAP_POPPER = "bubble_wrap_popper"
    BREAK_THINGS = "break_things"


TRACKER_TYPES = [t.value for t in TrackerType]


def today() -> date:
    return datetime.now(timezone.utc).date()


def parse_activity_date(value: Any) -> date:
    """Accept a date, a YYYY-MM-DD string or an ISO datetime (reduced to its UTC day)."""
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        return value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if "T" not in text and " " not in text:
            return date.fromisoformat(text)
        moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    else:
        raise ValueError("activity_date must be a date string")
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def validate_tracker_type(value: Any) -> TrackerType:
    try:
        return TrackerType(value)
    except ValueError:
        raise ValidationFailure(
            "Invalid tracker_type. Must be one of: " + ", ".join(TRACKER_TYPES)
        ) from None


class ActivityItem(BaseModel):
    """One client-reported counter in a sync batch."""

    tracker_type: TrackerType
    activity_date: date
    count: int = Field(default=1, ge=1, le=MAX_COUNT)

    @field_validator("activity_date", mode="before")
    @classmethod
    def _coerce_date(cls, value):
        return parse_activity_date(value)

    @field_validator("count", mode="before")
    @classmethod
    def _default_count(cls, value):
        # 0 and null both mean "one more use" to older clients
        return value or 1


def _item_data(tracker_type: str, activity_date: date, count: int, row_id: int | None = None) -> dict:
    data = {
        "tracker_type": tracker_type,
        "activity_date": activity_date.isoformat(),
        "count": count,
    }
    if row_id is not None:
        data["id"] = row_id
    return data


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"]) or "item"
        if field == "tracker_type" and err["type"] == "enum":
            parts.append("Invalid tracker_type. Must be one of: " + ", ".join(TRACKER_TYPES))
        elif err["type"] == "missing":
            parts.append(f"Missing required field: {field}")
        else:
            parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


async def merge_counter(db: AsyncSession, identity: Identity, item: ActivityItem) -> dict:
    """Max-wins merge of one client counter into the stored counter."""
    tracker_type = item.tracker_type.value
    key = {"email": identity.email, "tracker_type": tracker_type, "activity_date": item.activity_date}

    existing = await find_by_natural_key(db, MIND_TOOLS, key)
    if existing is None:
        created, existing = await insert_or_get(
            db, MIND_TOOLS, key, {"user_name": identity.name, "count": item.count}
        )
        if created:
            return {
                "success": True,
                "action": CREATED,
                "message": "Activity recorded",
                "data": _item_data(tracker_type, item.activity_date, existing.count, existing.id),
            }

    if existing.count >= item.count:
        return {
            "success": True,
            "action": UNCHANGED,
            "message": "No update needed (server has higher count)",
            "data": _item_data(tracker_type, item.activity_date, existing.count),
        }

    apply_partial_update(existing, {"count": item.count}, ("count",))
    await db.commit()
    return {
        "success": True,
        "action": UPDATED,
        "message": "Activity updated",
        "data": _item_data(tracker_type, item.activity_date, existing.count),
    }


async def reconcile(db: AsyncSession, identity: Identity, activities: list[Any]) -> list[dict]:
    """Merge a batch of client counters; always one result per input item, in order."""
    results = []
    for raw in activities:
        try:
            item = ActivityItem.model_validate(raw)
        except ValidationError as exc:
            results.append({"success": False, "action": FAILED, "message": _describe_errors(exc), "data": raw})
            continue

        try:
            results.append(await merge_counter(db, identity, item))
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.exception("Failed to sync %s for %s", item.tracker_type.value, item.activity_date)
            results.append({"success": False, "action": FAILED, "message": str(exc), "data": raw})
    return results


async def increment(
    db: AsyncSession,
    identity: Identity,
    tracker_type: Any,
    activity_date: date | None = None,
) -> tuple[str, dict]:
    """Add one use to the (user, tracker, day) counter, creating it at 1."""
    tracker = validate_tracker_type(tracker_type).value
    activity_date = activity_date or today()
    key = {"email": identity.email, "tracker_type": tracker, "activity_date": activity_date}

    existing = await find_by_natural_key(db, MIND_TOOLS, key)
    if existing is None:
        created, existing = await insert_or_get(db, MIND_TOOLS, key, {"user_name": identity.name, "count": 1})
        if created:
            return CREATED, _item_data(tracker, activity_date, existing.count, existing.id)

    apply_partial_update(existing, {"count": existing.count + 1}, ("count",))
    await db.commit()
    return UPDATED, _item_data(tracker, activity_date, existing.count)


async def load_activity(db: AsyncSession, identity: Identity, tracker_types: list[str] | None = None) -> dict:
    """Return {tracker_type: {YYYY-MM-DD: count}} for the requested trackers."""
    tracker_types = tracker_types or TRACKER_TYPES
    result = await db.execute(
        select(MindToolsActivity.tracker_type, MindToolsActivity.activity_date, MindToolsActivity.count).where(
            MindToolsActivity.email == identity.email,
            MindToolsActivity.tracker_type.in_(tracker_types),
        )
    )
    data: dict[str, dict[str, int]] = {tracker_type: {} for tracker_type in tracker_types}
    for tracker_type, activity_date, count in result.all():
        data.setdefault(tracker_type, {})[activity_date.isoformat()] = count
    return data
