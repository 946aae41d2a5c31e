"""Pydantic schemas for mind tools activity."""
from typing import Any

from pydantic import BaseModel


class ActivityRecordSchema(BaseModel):
    tracker_type: str | None = None
    activity_date: str | None = None


class ActivitySyncSchema(BaseModel):
    # items are validated one by one so a bad entry fails alone
    activities: list[Any] | None = None
