"""Card task collection routes: vision board, weekly planner, annual calendar."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from reconstruct.core.errors import ValidationFailure
from reconstruct.core.identity import Identity, ensure_owner, get_legacy_identity, get_token_identity
from reconstruct.db.session import get_db
from reconstruct.schemas.tasks import CardTasksSchema, TaskSaveSchema, parse_task_list
from reconstruct.services.upsert import (
    ANNUAL_CALENDAR,
    VISION_BOARD,
    WEEKLY_PLANNER,
    TableDescriptor,
    UpsertResult,
    list_rows,
    missing_fields,
    resolve_saveable_table,
    upsert,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def _saved_response(result: UpsertResult, created_message: str, updated_message: str) -> JSONResponse:
    return JSONResponse(
        status_code=201 if result.created else 200,
        content={
            "success": True,
            "message": created_message if result.created else updated_message,
            "action": result.action,
            "id": result.row_id,
        },
    )


async def _save_card_tasks(
    db: AsyncSession,
    descriptor: TableDescriptor,
    identity: Identity,
    body: CardTasksSchema,
) -> UpsertResult:
    key = {"user_name": identity.name, "email": identity.email, "card_id": body.card_id, "theme": body.theme}
    return await upsert(db, descriptor, key, {"tasks": parse_task_list(body.tasks)})


@router.get("/api/tasks/load", deprecated=True)
async def load_vision_board(
    identity: Annotated[Identity, Depends(get_legacy_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    theme: str | None = None,
):
    """Vision board rows for the caller and theme."""
    if not theme:
        raise ValidationFailure("Missing required parameter: theme")
    logger.info("Loading tasks for user %s with theme %s", identity.name, theme)
    rows = await list_rows(db, VISION_BOARD, identity.name, identity.email, theme=theme)
    return {
        "success": True,
        "message": f"Loaded {len(rows)} tasks",
        "tasks": jsonable_encoder([row.to_dict() for row in rows]),
    }


@router.post("/api/tasks/save", deprecated=True)
async def save_tasks(
    body: TaskSaveSchema,
    identity: Annotated[Identity, Depends(get_legacy_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Generic save into one of the allowlisted task tables."""
    ensure_owner(identity, body.user_name, body.email)
    fields = body.fields()

    missing = missing_fields(fields.model_dump(), ("card_id", "tasks", "theme", "table"))
    if missing:
        raise ValidationFailure(f"Missing required fields: {', '.join(missing)}")
    descriptor = resolve_saveable_table(fields.table)

    logger.info("Saving task for user %s in table %s", identity.name, descriptor.table_name)
    result = await _save_card_tasks(
        db, descriptor, identity, CardTasksSchema(card_id=fields.card_id, tasks=fields.tasks, theme=fields.theme)
    )
    return _saved_response(result, "Task saved successfully", "Task updated successfully")


async def _list_card_tasks(db: AsyncSession, descriptor: TableDescriptor, identity: Identity) -> dict:
    rows = await list_rows(db, descriptor, identity.name, identity.email)
    return {
        "success": True,
        "message": f"Loaded {len(rows)} tasks",
        "tasks": jsonable_encoder([row.to_dict() for row in rows]),
    }


async def _post_card_tasks(
    db: AsyncSession, descriptor: TableDescriptor, identity: Identity, body: CardTasksSchema
) -> JSONResponse:
    missing = missing_fields(body.model_dump(), ("card_id", "tasks", "theme"))
    if missing:
        raise ValidationFailure(f"Missing required fields: {', '.join(missing)}")
    result = await _save_card_tasks(db, descriptor, identity, body)
    return _saved_response(result, "Task created successfully", "Task updated successfully")


@router.get("/annual-calendar/tasks")
async def list_annual_calendar(
    identity: Annotated[Identity, Depends(get_token_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await _list_card_tasks(db, ANNUAL_CALENDAR, identity)


@router.post("/annual-calendar/tasks")
async def save_annual_calendar(
    body: CardTasksSchema,
    identity: Annotated[Identity, Depends(get_token_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await _post_card_tasks(db, ANNUAL_CALENDAR, identity, body)


@router.get("/weekly-planner/tasks")
async def list_weekly_planner(
    identity: Annotated[Identity, Depends(get_token_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await _list_card_tasks(db, WEEKLY_PLANNER, identity)


@router.post("/weekly-planner/tasks")
async def save_weekly_planner(
    body: CardTasksSchema,
    identity: Annotated[Identity, Depends(get_token_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return await _post_card_tasks(db, WEEKLY_PLANNER, identity, body)
