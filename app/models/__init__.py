"""Database models package."""
from app.models.reminder import (
    Reminder,
    ReminderType,
    ReminderFrequency,
    Weekday,
    weekdays_to_mask,
    mask_to_weekdays,
)
from app.models.reminder_log import ReminderLog, ReminderLogStatus

__all__ = [
    "Reminder",
    "ReminderType",
    "ReminderFrequency",
    "Weekday",
    "weekdays_to_mask",
    "mask_to_weekdays",
    "ReminderLog",
    "ReminderLogStatus",
]
