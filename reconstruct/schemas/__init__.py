from reconstruct.schemas.activity import ActivityRecordSchema, ActivitySyncSchema
from reconstruct.schemas.auth import (
    GoogleSignInSchema,
    LoginSchema,
    RegisterSchema,
    UserOutSchema,
    WelcomeEmailSchema,
)
from reconstruct.schemas.calendar import CalendarFields, CalendarSaveSchema, CalendarUpdateFields, CalendarUpdateSchema
from reconstruct.schemas.common import OwnedBody, validate_fields
from reconstruct.schemas.tasks import (
    CardTasksSchema,
    TaskItemSchema,
    TaskSaveFields,
    TaskSaveSchema,
    parse_task_list,
)

__all__ = [
    "ActivityRecordSchema",
    "ActivitySyncSchema",
    "CalendarFields",
    "CalendarSaveSchema",
    "CalendarUpdateFields",
    "CalendarUpdateSchema",
    "CardTasksSchema",
    "GoogleSignInSchema",
    "LoginSchema",
    "OwnedBody",
    "RegisterSchema",
    "TaskItemSchema",
    "TaskSaveFields",
    "TaskSaveSchema",
    "UserOutSchema",
    "WelcomeEmailSchema",
    "parse_task_list",
    "validate_fields",
]
