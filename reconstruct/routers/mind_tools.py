"""Mind tools activity routes: load, record one use, batch sync."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from reconstruct.core.errors import ValidationFailure
from reconstruct.core.identity import Identity, get_token_identity
from reconstruct.db.session import get_db
from reconstruct.schemas.activity import ActivityRecordSchema, ActivitySyncSchema
from reconstruct.services.activity import CREATED, increment, load_activity, parse_activity_date, reconcile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mind-tools", tags=["mind-tools"])


@router.get("/activity")
async def get_activity(
    identity: Annotated[Identity, Depends(get_token_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
    tracker_types: str | None = None,
):
    """Counts per tracker and day; tracker_types is a comma-separated filter."""
    requested = [t.strip() for t in tracker_types.split(",") if t.strip()] if tracker_types else None
    data = await load_activity(db, identity, requested)
    return {"success": True, "message": "Activity data retrieved", "data": data}


@router.post("/activity")
async def record_activity(
    body: ActivityRecordSchema,
    identity: Annotated[Identity, Depends(get_token_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Count one more use of a tracker, today unless activity_date is given."""
    if not body.tracker_type:
        raise ValidationFailure("Missing required field: tracker_type")
    activity_date = None
    if body.activity_date:
        try:
            activity_date = parse_activity_date(body.activity_date)
        except ValueError as exc:
            raise ValidationFailure("Invalid activity_date", str(exc)) from None

    action, data = await increment(db, identity, body.tracker_type, activity_date)
    created = action == CREATED
    return JSONResponse(
        status_code=201 if created else 200,
        content={
            "success": True,
            "message": "Activity recorded" if created else "Activity count updated",
            "action": action,
            "data": data,
        },
    )


@router.post("/sync")
async def sync_activity(
    body: ActivitySyncSchema,
    identity: Annotated[Identity, Depends(get_token_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Max-wins merge of offline counts; one result per submitted item."""
    if not body.activities:
        raise ValidationFailure('Invalid request format. Expected "activities" array.')

    results = await reconcile(db, identity, body.activities)
    failed = sum(1 for r in results if not r["success"])
    logger.info("Synced %d activities for %s (%d failed)", len(results), identity.email, failed)
    return {
        "success": True,
        "message": f"Processed {len(results)} activities",
        "results": results,
    }
