"""Pydantic schemas for 2025 calendar entries.

Request bodies accept anything so the ownership check runs first; the typed
``*Fields`` models are validated afterwards via ``OwnedBody.payload``.
"""
from datetime import date
from typing import Any

from pydantic import BaseModel

from reconstruct.schemas.common import OwnedBody


class CalendarFields(BaseModel):
    task_date: date | None = None
    task_type: int | None = None
    task_description: str | None = None
    color_code: str | None = None
    theme: str | None = None
    id: int | None = None
    delete: bool = False


class CalendarUpdateFields(BaseModel):
    task_date: date | None = None
    task_type: int | None = None
    task_description: str | None = None
    color_code: str | None = None


class CalendarSaveSchema(OwnedBody):
    task_date: Any = None
    task_type: Any = None
    task_description: Any = None
    color_code: Any = None
    theme: Any = None
    id: Any = None
    delete: Any = False

    def fields(self) -> CalendarFields:
        return self.payload(CalendarFields)


class CalendarUpdateSchema(OwnedBody):
    task_date: Any = None
    task_type: Any = None
    task_description: Any = None
    color_code: Any = None

    def fields(self) -> CalendarUpdateFields:
        return self.payload(CalendarUpdateFields)
