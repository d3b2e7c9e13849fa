"""SQLAlchemy implementation of the reminder store."""
from datetime import datetime
from typing import List, Optional
from sqlalchemy import and_
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
import logging

from app.exceptions import ConcurrentModificationError
from app.models.reminder import Reminder
from app.models.reminder_log import ReminderLog
from app.schemas.reminder import ReminderFilter
from app.store.base import ReminderStore


# Configure logging
logger = logging.getLogger(__name__)


class SQLReminderStore(ReminderStore):
    """Reminder store backed by a SQLAlchemy session.

    Optimistic concurrency relies on the ``reminders.version`` column, which
    SQLAlchemy increments and checks on every UPDATE.
    """

    def __init__(self, db: Session):
        """Initialize the store.

        Args:
            db: Database session
        """
        self.db = db

    def get(self, reminder_id: str) -> Optional[Reminder]:
        """Load a reminder, refreshing it from the database if already in the session.

        Args:
            reminder_id: ID of the reminder

        Returns:
            Reminder object if found, None otherwise
        """
        return self.db.get(Reminder, reminder_id, populate_existing=True)

    def save(self, reminder: Reminder, log: Optional[ReminderLog] = None) -> Reminder:
        """Insert or update a reminder, optionally appending a log in the same commit.

        Args:
            reminder: Reminder to persist
            log: New log entry recording the change (optional)

        Returns:
            The persisted reminder

        Raises:
            ConcurrentModificationError: If the row changed since it was read
        """
        try:
            self.db.add(reminder)
            if log is not None:
                self.db.add(log)
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            logger.warning(f"Version conflict while saving reminder {reminder.id}")
            raise ConcurrentModificationError(reminder.id)
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(reminder)
        if log is not None:
            self.db.refresh(log)
        return reminder

    def delete(self, reminder_id: str) -> bool:
        """Delete a reminder and, by cascade, its logs.

        Args:
            reminder_id: ID of the reminder

        Returns:
            True if a reminder was deleted, False if it did not exist
        """
        reminder = self.db.get(Reminder, reminder_id)
        if reminder is None:
            return False

        try:
            self.db.delete(reminder)
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            raise ConcurrentModificationError(reminder_id)
        except Exception:
            self.db.rollback()
            raise

        return True

    def list_by_user(self, user_id: str, filter: ReminderFilter) -> List[Reminder]:
        """List reminders of a user ordered by next occurrence ascending.

        Args:
            user_id: Owning user ID
            filter: Subject, activity and page options

        Returns:
            List of Reminder objects
        """
        query = self.db.query(Reminder).filter(Reminder.user_id == user_id)

        if filter.subject_id:
            query = query.filter(Reminder.subject_id == filter.subject_id)
        if filter.active_only:
            query = query.filter(Reminder.is_active.is_(True))

        query = query.order_by(Reminder.next_occurrence_at.asc(), Reminder.id.asc())

        if filter.offset:
            query = query.offset(filter.offset)
        if filter.limit:
            query = query.limit(filter.limit)

        return query.all()

    def find_due(self, now: datetime) -> List[Reminder]:
        """Find active reminders whose next occurrence has arrived.

        Args:
            now: Current instant

        Returns:
            List of due Reminder objects, earliest first
        """
        return self.db.query(Reminder).filter(
            and_(
                Reminder.is_active.is_(True),
                Reminder.next_occurrence_at <= now
            )
        ).order_by(Reminder.next_occurrence_at.asc()).all()

    def append_log(self, log: ReminderLog) -> ReminderLog:
        """Persist a new reminder log.

        Args:
            log: Log entry to append

        Returns:
            The persisted log
        """
        try:
            self.db.add(log)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(log)
        return log

    def list_logs(self, reminder_id: str) -> List[ReminderLog]:
        """List logs of a reminder, most recent first.

        Args:
            reminder_id: ID of the reminder

        Returns:
            List of ReminderLog objects
        """
        return self.db.query(ReminderLog).filter(
            ReminderLog.reminder_id == reminder_id
        ).order_by(ReminderLog.reminded_at.desc(), ReminderLog.created_at.desc()).all()
