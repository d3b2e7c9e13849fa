"""Due-occurrence poller and its periodic background job."""
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from datetime import datetime
from typing import Dict, Optional, Tuple
import logging

from app.clock import Clock, SystemClock
from app.config import settings
from app.database import SessionLocal
from app.models.reminder import Reminder
from app.models.reminder_log import ReminderLogStatus
from app.services.notification_service import LineNotifier, Notifier
from app.services.reminder_scheduler import ReminderScheduler
from app.store.base import ReminderStore
from app.store.sql_store import SQLReminderStore


# Configure logging
logger = logging.getLogger(__name__)


class DueOccurrencePoller:
    """Hands due reminders to a notifier on every tick.

    Delivery never advances the schedule: a due reminder keeps being reported
    on each tick until an action is logged for it or it is deactivated. When
    ``auto_dismiss_after_missed_ticks`` is set, a reminder reported that many
    times for the same occurrence is dismissed on the following tick.
    """

    def __init__(
        self,
        notifier: Notifier,
        clock: Optional[Clock] = None,
        auto_dismiss_after_missed_ticks: Optional[int] = None
    ):
        """Initialize the poller.

        Args:
            notifier: Delivery collaborator for due reminders
            clock: Source of the current instant (defaults to wall-clock time)
            auto_dismiss_after_missed_ticks: Missed ticks before auto-dismissal,
                None to keep reporting forever
        """
        if auto_dismiss_after_missed_ticks is not None and auto_dismiss_after_missed_ticks < 1:
            raise ValueError("auto_dismiss_after_missed_ticks must be at least 1")

        self.notifier = notifier
        self.clock = clock or SystemClock()
        self.auto_dismiss_after_missed_ticks = auto_dismiss_after_missed_ticks

        # reminder id -> (occurrence reported, number of ticks reported)
        self._missed: Dict[str, Tuple[datetime, int]] = {}

    def poll_once(self, store: ReminderStore) -> int:
        """Run one polling cycle.

        Args:
            store: Reminder storage to read due reminders from

        Returns:
            Number of reminders delivered successfully
        """
        now = self.clock.now()

        try:
            due = store.find_due(now)
        except Exception as e:
            logger.error(f"Could not load due reminders, retrying next tick: {str(e)}", exc_info=True)
            return 0

        if not due:
            self._missed.clear()
            return 0

        self._forget_settled(due)

        delivered = 0
        for reminder in due:
            if self._should_auto_dismiss(reminder):
                self._auto_dismiss(store, reminder)
                continue

            if self._deliver(reminder):
                delivered += 1
            self._record_report(reminder)

        logger.info(f"Due reminder poll at {now}: delivered {delivered}/{len(due)}")
        return delivered

    def _deliver(self, reminder: Reminder) -> bool:
        try:
            success = self.notifier.notify(
                reminder_id=reminder.id,
                user_id=reminder.user_id,
                title=reminder.title,
                description=reminder.description
            )
        except Exception as e:
            logger.error(f"Error notifying reminder {reminder.id}: {str(e)}", exc_info=True)
            return False

        if not success:
            logger.warning(f"Failed to deliver reminder {reminder.id}, it stays due")
        return bool(success)

    def _forget_settled(self, due) -> None:
        """Drop counters of reminders that are no longer due."""
        due_ids = {reminder.id for reminder in due}
        for reminder_id in list(self._missed):
            if reminder_id not in due_ids:
                del self._missed[reminder_id]

    def _record_report(self, reminder: Reminder) -> None:
        occurrence, count = self._missed.get(reminder.id, (reminder.next_occurrence_at, 0))
        if occurrence != reminder.next_occurrence_at:
            count = 0
        self._missed[reminder.id] = (reminder.next_occurrence_at, count + 1)

    def _should_auto_dismiss(self, reminder: Reminder) -> bool:
        if self.auto_dismiss_after_missed_ticks is None:
            return False
        occurrence, count = self._missed.get(reminder.id, (None, 0))
        return occurrence == reminder.next_occurrence_at and count >= self.auto_dismiss_after_missed_ticks

    def _auto_dismiss(self, store: ReminderStore, reminder: Reminder) -> None:
        reminder_id = reminder.id
        ticks = self.auto_dismiss_after_missed_ticks
        self._missed.pop(reminder_id, None)
        try:
            ReminderScheduler(store, self.clock).log_action(
                reminder_id,
                ReminderLogStatus.DISMISSED,
                notes=f"auto-dismissed after {ticks} missed ticks",
                user_id=reminder.user_id
            )
            logger.info(f"Auto-dismissed reminder {reminder_id} after {ticks} missed ticks")
        except Exception as e:
            logger.error(f"Error auto-dismissing reminder {reminder_id}: {str(e)}", exc_info=True)


# Global scheduler instance
scheduler = AsyncIOScheduler()

# Global poller instance, kept across ticks for missed-tick counting
poller = DueOccurrencePoller(
    notifier=LineNotifier(),
    auto_dismiss_after_missed_ticks=settings.auto_dismiss_after_missed_ticks
)


def check_due_reminders() -> int:
    """
    Poll for due reminders and deliver them.

    This function is called by the scheduler on every tick. It creates a
    database session, runs one polling cycle and closes the session.
    Undelivered reminders stay due and are picked up again on the next tick.
    Failures are logged and never propagate, so the next tick
    runs normally.

    Returns:
        Number of reminders delivered
    """
    delivered = 0
    db = None
    try:
        db = SessionLocal()
        delivered = poller.poll_once(SQLReminderStore(db))

    except Exception as e:
        logger.error(f"Error during due reminder poll: {str(e)}", exc_info=True)
    finally:
        if db is not None:
            db.close()

    return delivered


def start_scheduler():
    """
    Start the due reminder poller.

    Runs ``check_due_reminders`` every ``settings.poll_interval_seconds``.
    Ticks do not overlap; missed ticks are coalesced into one.
    """
    scheduler.add_job(
        check_due_reminders,
        trigger=IntervalTrigger(seconds=settings.poll_interval_seconds),
        id='due_reminder_poll',
        name='Due Reminder Poll',
        max_instances=1,
        coalesce=True,
        replace_existing=True
    )

    logger.info(f"Due reminder poller configured to run every {settings.poll_interval_seconds} seconds")

    scheduler.start()
    logger.info("Due reminder poller started")


def stop_scheduler():
    """
    Stop the due reminder poller.

    This should be called during application shutdown to gracefully
    stop the scheduler and any running jobs.
    """
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Due reminder poller stopped")
    else:
        logger.info("Due reminder poller was not running")
