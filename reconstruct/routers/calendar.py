"""2025 calendar routes, including the /calendar2025 compatibility surface."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reconstruct.core.errors import ValidationFailure
from reconstruct.core.identity import Identity, ensure_owner, get_legacy_identity
from reconstruct.db.session import get_db
from reconstruct.schemas.calendar import CalendarFields, CalendarSaveSchema, CalendarUpdateSchema
from reconstruct.services.calendar import COLOR_PREFIX, normalize_color_code, normalize_task
from reconstruct.services.upsert import (
    CALENDAR,
    apply_partial_update,
    get_owned_row,
    list_rows,
    missing_fields,
    upsert,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calendar"])

DEFAULT_THEME = "animal"
UPDATABLE_FIELDS = ("task_type", "task_description", "color_code", "task_date")
REQUIRED_FIELDS = ("task_date", "task_type", "task_description", "color_code", "theme")


async def _load(db: AsyncSession, identity: Identity, theme: str) -> dict:
    logger.info("Loading calendar tasks for user %s with theme %s", identity.name, theme)
    rows = await list_rows(db, CALENDAR, identity.name, identity.email, theme=theme)
    tasks = [normalize_task(row.to_dict()) for row in rows]
    return {
        "success": True,
        "message": f"Loaded {len(tasks)} calendar tasks",
        "tasks": jsonable_encoder(tasks),
    }


async def _update_owned(
    db: AsyncSession,
    identity: Identity,
    task_id: int,
    changes: dict,
    fields=UPDATABLE_FIELDS,
    normalize: bool = False,
):
    row = await get_owned_row(db, CALENDAR, task_id, identity.name, identity.email)
    apply_partial_update(row, changes, fields)
    if normalize:
        row.color_code, row.task_type = normalize_color_code(row.color_code, row.task_type)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationFailure("Another calendar task already exists for that date and theme") from None
    logger.info("Updated calendar task %s", task_id)
    return row


async def _delete_owned(db: AsyncSession, identity: Identity, task_id: int) -> None:
    row = await get_owned_row(db, CALENDAR, task_id, identity.name, identity.email)
    await db.delete(row)
    await db.commit()
    logger.info("Deleted calendar task %s", task_id)


def _calendar_key(identity: Identity, task: CalendarFields) -> dict:
    return {
        "user_name": identity.name,
        "email": identity.email,
        "task_date": task.task_date,
        "theme": task.theme,
    }


def _require_new_task_fields(task: CalendarFields) -> None:
    missing = missing_fields(task.model_dump(), REQUIRED_FIELDS)
    if missing:
        raise ValidationFailure(f"Missing required fields: {', '.join(missing)}")


@router.get("/api/calendar/load", deprecated=True)
async def load_calendar(
    identity: Annotated[Identity, Depends(get_legacy_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    theme: str | None = None,
):
    if not theme:
        raise ValidationFailure("Missing required parameter: theme", tasks=[])
    return await _load(db, identity, theme)


@router.post("/api/calendar/save", deprecated=True)
async def save_calendar(
    body: CalendarSaveSchema,
    identity: Annotated[Identity, Depends(get_legacy_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Delete by id, partially update by id, or upsert by (user, date, theme)."""
    ensure_owner(identity, body.user_name, body.email, what="calendar tasks")
    task = body.fields()

    if task.delete and task.id:
        await _delete_owned(db, identity, task.id)
        return {"success": True, "message": "Calendar task deleted successfully", "id": task.id}

    if task.id:
        await _update_owned(
            db, identity, task.id, task.model_dump(), fields=UPDATABLE_FIELDS + ("theme",)
        )
        return {"success": True, "message": "Calendar task updated successfully", "id": task.id}

    _require_new_task_fields(task)
    logger.info("Saving calendar task for user %s on date %s", identity.name, task.task_date)
    result = await upsert(db, CALENDAR, _calendar_key(identity, task), task.model_dump())
    return JSONResponse(
        status_code=201 if result.created else 200,
        content={
            "success": True,
            "message": "Calendar task saved successfully" if result.created else "Calendar task updated successfully",
            "action": result.action,
            "id": result.row_id,
        },
    )


@router.get("/calendar2025/tasks", deprecated=True)
async def compat_load_calendar(
    identity: Annotated[Identity, Depends(get_legacy_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    theme: str | None = None,
):
    return await _load(db, identity, theme or DEFAULT_THEME)


@router.post("/calendar2025/tasks", deprecated=True)
async def compat_save_calendar(
    body: CalendarSaveSchema,
    identity: Annotated[Identity, Depends(get_legacy_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Compatibility save: repairs the color code / task type pair before writing."""
    ensure_owner(identity, body.user_name, body.email, what="calendar tasks")
    task = body.fields()
    _require_new_task_fields(task)

    color_code, task_type = normalize_color_code(task.color_code, task.task_type)
    payload = task.model_dump()
    payload.update(color_code=color_code, task_type=task_type)

    result = await upsert(db, CALENDAR, _calendar_key(identity, task), payload)
    return JSONResponse(
        status_code=201 if result.created else 200,
        content={
            "success": True,
            "message": "Calendar task saved successfully" if result.created else "Calendar task updated successfully",
            "action": result.action,
            "task": {"id": result.row_id},
        },
    )


@router.put("/calendar2025/tasks/{task_id}", deprecated=True)
async def compat_update_calendar(
    task_id: int,
    body: CalendarUpdateSchema,
    identity: Annotated[Identity, Depends(get_legacy_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    ensure_owner(identity, body.user_name, body.email, what="calendar tasks")
    changes = body.fields().model_dump()
    if all(changes.get(field) is None for field in UPDATABLE_FIELDS):
        raise ValidationFailure("No fields to update")

    # A new type on its own must not be reverted by the stored color winning
    if changes.get("task_type") is not None and not changes.get("color_code"):
        changes["color_code"] = f"{COLOR_PREFIX}{changes['task_type']}"

    row = await _update_owned(db, identity, task_id, changes, normalize=True)
    return {
        "success": True,
        "message": "Calendar task updated successfully",
        "task": jsonable_encoder(row.to_dict()),
    }


@router.delete("/calendar2025/tasks/{task_id}", deprecated=True)
async def compat_delete_calendar(
    task_id: int,
    identity: Annotated[Identity, Depends(get_legacy_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    await _delete_owned(db, identity, task_id)
    return {"success": True, "message": "Calendar task deleted successfully", "id": task_id}
