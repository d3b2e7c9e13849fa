"""Reminder storage package."""
from app.store.base import ReminderStore
from app.store.sql_store import SQLReminderStore

__all__ = [
    "ReminderStore",
    "SQLReminderStore",
]
