"""Storage boundary for reminders and their logs."""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from app.models.reminder import Reminder
from app.models.reminder_log import ReminderLog
from app.schemas.reminder import ReminderFilter


class ReminderStore(ABC):
    """Durable storage for reminders and their append-only logs.

    ``save`` must enforce optimistic concurrency: writing a reminder that was
    modified by someone else since it was read raises
    ``ConcurrentModificationError``. When a log is passed, the reminder and
    the log are written atomically: neither is stored if either write fails.
    """

    @abstractmethod
    def get(self, reminder_id: str) -> Optional[Reminder]:
        pass

    @abstractmethod
    def save(self, reminder: Reminder, log: Optional[ReminderLog] = None) -> Reminder:
        """Persist a reminder, together with a new log in the same transaction."""
        pass

    @abstractmethod
    def delete(self, reminder_id: str) -> bool:
        pass

    @abstractmethod
    def list_by_user(self, user_id: str, filter: ReminderFilter) -> List[Reminder]:
        """Reminders of a user ordered by next occurrence ascending."""
        pass

    @abstractmethod
    def find_due(self, now: datetime) -> List[Reminder]:
        """Active reminders whose next occurrence is at or before ``now``."""
        pass

    @abstractmethod
    def append_log(self, log: ReminderLog) -> ReminderLog:
        pass

    @abstractmethod
    def list_logs(self, reminder_id: str) -> List[ReminderLog]:
        """Logs of a reminder, most recent first."""
        pass
