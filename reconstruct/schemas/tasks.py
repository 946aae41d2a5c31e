"""Pydantic schemas for card task collections."""
import json
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from reconstruct.core.errors import ValidationFailure
from reconstruct.schemas.common import OwnedBody


class TaskItemSchema(BaseModel):
    """One item of a card's task list, as the app stores it."""

    model_config = ConfigDict(extra="allow")

    text: str
    completed: bool = False
    id: str | int | None = None


TaskListAdapter = TypeAdapter(list[TaskItemSchema])


def parse_task_list(value: Any) -> list[dict]:
    """Accept the task list as a JSON array or as a JSON-encoded string of one."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValidationFailure("tasks must be a JSON array") from None
    try:
        items = TaskListAdapter.validate_python(value)
    except ValidationError as exc:
        raise ValidationFailure("tasks must be a list of {text, completed, id} items", str(exc)) from None
    return [item.model_dump() for item in items]


class TaskSaveFields(BaseModel):
    card_id: str | None = None
    tasks: Any = None
    theme: str | None = None
    table: str | None = None


class TaskSaveSchema(OwnedBody):
    """Generic save body. Unchecked until the ownership check passes; see fields()."""

    card_id: Any = None
    tasks: Any = None
    theme: Any = None
    table: Any = None

    def fields(self) -> TaskSaveFields:
        return self.payload(TaskSaveFields)


class CardTasksSchema(BaseModel):
    card_id: str | None = None
    tasks: Any = None
    theme: str | None = None
