"""Business logic services package."""
from app.services.recurrence import compute_next_occurrence, compute_snooze_until
from app.services.reminder_scheduler import ReminderScheduler, validate_schedule
from app.services.notification_service import Notifier, LineNotifier

__all__ = [
    "compute_next_occurrence",
    "compute_snooze_until",
    "ReminderScheduler",
    "validate_schedule",
    "Notifier",
    "LineNotifier",
]
