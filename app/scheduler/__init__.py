"""Scheduler and background tasks package."""
from app.scheduler.due_poller import (
    DueOccurrencePoller,
    start_scheduler,
    stop_scheduler,
    check_due_reminders
)

__all__ = [
    'DueOccurrencePoller',
    'start_scheduler',
    'stop_scheduler',
    'check_due_reminders'
]
