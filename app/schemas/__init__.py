"""Request, response and value schemas."""
from app.schemas.reminder import (
    SCHEDULE_FIELDS,
    ScheduleSpec,
    ReminderCreate,
    ReminderUpdate,
    ReminderToggle,
    ReminderActionCreate,
    ReminderFilter,
    ReminderResponse,
    ReminderLogResponse,
)

__all__ = [
    "SCHEDULE_FIELDS",
    "ScheduleSpec",
    "ReminderCreate",
    "ReminderUpdate",
    "ReminderToggle",
    "ReminderActionCreate",
    "ReminderFilter",
    "ReminderResponse",
    "ReminderLogResponse",
]
