"""Reminder scheduler: CRUD and action orchestration for care reminders."""
from datetime import datetime
from typing import Callable, List, Optional
import uuid
import logging

from app.clock import Clock, SystemClock
from app.config import settings
from app.exceptions import (
    ConcurrentModificationError,
    InvalidRangeError,
    InvalidScheduleError,
    MissingFieldError,
    NotFoundError,
    ValidationError,
)
from app.models.reminder import Reminder, ReminderFrequency, Weekday
from app.models.reminder_log import ReminderLog, ReminderLogStatus
from app.schemas.reminder import (
    SCHEDULE_FIELDS,
    ReminderCreate,
    ReminderFilter,
    ReminderUpdate,
    ScheduleSpec,
)
from app.services.recurrence import compute_next_occurrence, compute_snooze_until
from app.store.base import ReminderStore


# Configure logging
logger = logging.getLogger(__name__)

# Fields that may not be cleared by an update
REQUIRED_FIELDS = ("subject_id", "type", "title", "frequency", "time_of_day")


def validate_schedule(spec: ScheduleSpec) -> ScheduleSpec:
    """Validate a schedule and drop empty fields that its frequency does not use.

    Args:
        spec: Schedule to validate

    Returns:
        The normalized schedule

    Raises:
        MissingFieldError: If a field required by the frequency is absent
        InvalidRangeError: If a weekday ordinal or the interval is out of range
        InvalidScheduleError: If a field is set that the frequency does not use
    """
    frequency = spec.frequency.value
    days = spec.days_of_week
    interval = spec.custom_interval_days

    if spec.frequency == ReminderFrequency.WEEKLY:
        if not days:
            raise MissingFieldError("days_of_week")
        for day in sorted(days):
            if not Weekday.SUNDAY <= day <= Weekday.SATURDAY:
                raise InvalidRangeError("days_of_week", day, 0, 6)
    elif days:
        raise InvalidScheduleError(frequency, "days_of_week")

    if spec.frequency == ReminderFrequency.CUSTOM:
        if interval is None:
            raise MissingFieldError("custom_interval_days")
        if interval < 1:
            raise InvalidRangeError("custom_interval_days", interval, 1)
    elif interval is not None:
        raise InvalidScheduleError(frequency, "custom_interval_days")

    if spec.frequency != ReminderFrequency.WEEKLY and days is not None:
        spec = spec.model_copy(update={"days_of_week": None})
    return spec


def validate_title(title: Optional[str]) -> str:
    """Return the stripped title, rejecting blank ones."""
    if title is None or not title.strip():
        raise MissingFieldError("title")
    return title.strip()


class ReminderScheduler:
    """Service that creates, edits and advances care reminders.

    Every change to the schedule re-derives ``next_occurrence_at`` from the
    clock. Writes go through the store's optimistic-concurrency check and are
    retried once on conflict.
    """

    def __init__(self, store: ReminderStore, clock: Optional[Clock] = None):
        """Initialize reminder scheduler.

        Args:
            store: Reminder storage
            clock: Source of the current instant (defaults to wall-clock time)
        """
        self.store = store
        self.clock = clock or SystemClock()

    def _get_owned(self, reminder_id: str, user_id: Optional[str]) -> Reminder:
        reminder = self.store.get(reminder_id)
        if reminder is None or (user_id is not None and reminder.user_id != user_id):
            raise NotFoundError("reminder", reminder_id)
        return reminder

    def _modify(
        self,
        reminder_id: str,
        user_id: Optional[str],
        mutate: Callable[[Reminder, datetime], Optional[ReminderLog]]
    ) -> Reminder:
        """Read a reminder, apply a mutation and save it.

        A log returned by the mutation is written in the same transaction as
        the reminder.

        A version conflict triggers one retry against a fresh read; a second
        conflict is raised to the caller.
        """
        for attempt in range(2):
            reminder = self._get_owned(reminder_id, user_id)
            now = self.clock.now()
            log = mutate(reminder, now)
            reminder.updated_at = now
            try:
                return self.store.save(reminder, log=log)
            except ConcurrentModificationError:
                if attempt:
                    logger.error(f"Giving up on reminder {reminder_id} after repeated conflicts")
                    raise
                logger.warning(f"Conflict on reminder {reminder_id}, retrying with a fresh read")

    def create_reminder(self, user_id: str, data: ReminderCreate) -> Reminder:
        """Create a new reminder and schedule its first occurrence.

        Args:
            user_id: ID of the owning user
            data: Reminder fields and schedule

        Returns:
            Newly created Reminder object

        Raises:
            MissingFieldError: If user, subject or title is missing
            ValidationError: If the schedule is malformed
        """
        if not user_id:
            raise MissingFieldError("user_id")
        if not data.subject_id:
            raise MissingFieldError("subject_id")
        title = validate_title(data.title)
        spec = validate_schedule(data.schedule)

        now = self.clock.now()
        reminder = Reminder(
            id=str(uuid.uuid4()),
            user_id=user_id,
            subject_id=data.subject_id,
            type=data.type,
            title=title,
            description=data.description,
            notification_id=data.notification_id,
            is_active=True,
            next_occurrence_at=compute_next_occurrence(spec, now),
            created_at=now,
            updated_at=now
        )
        reminder.apply_schedule(spec)
        reminder.validate()
        reminder = self.store.save(reminder)

        logger.info(
            f"Created {spec.frequency.value} reminder {reminder.id} for user {user_id}, "
            f"next occurrence {reminder.next_occurrence_at}"
        )
        return reminder

    def update_reminder(self, reminder_id: str, user_id: str, patch: ReminderUpdate) -> Reminder:
        """Apply a partial update to a reminder.

        Editing any schedule field re-anchors the next occurrence to "now";
        other edits leave it untouched.

        Args:
            reminder_id: ID of the reminder
            user_id: ID of the requesting user
            patch: Fields to change

        Returns:
            Updated Reminder object

        Raises:
            NotFoundError: If the reminder does not exist or is not owned by the user
            ValidationError: If the merged reminder is invalid
        """
        changes = patch.model_dump(exclude_unset=True)
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise MissingFieldError(field)
        if "subject_id" in changes and not changes["subject_id"]:
            raise MissingFieldError("subject_id")
        if "title" in changes:
            changes["title"] = validate_title(changes["title"])

        schedule_changes = {}
        if patch.touches_schedule():
            schedule_changes = {
                field: changes.pop(field) for field in SCHEDULE_FIELDS if field in changes
            }

        def mutate(reminder: Reminder, now: datetime) -> None:
            spec = None
            if schedule_changes:
                spec = self._merge_schedule(reminder.schedule, schedule_changes)

            for field, value in changes.items():
                setattr(reminder, field, value)

            if spec is not None:
                reminder.apply_schedule(spec)
                reminder.next_occurrence_at = compute_next_occurrence(spec, now)

        reminder = self._modify(reminder_id, user_id, mutate)

        if schedule_changes:
            logger.info(
                f"Rescheduled reminder {reminder_id}, next occurrence {reminder.next_occurrence_at}"
            )
        else:
            logger.info(f"Updated reminder {reminder_id}")
        return reminder

    @staticmethod
    def _merge_schedule(current: ScheduleSpec, schedule_changes: dict) -> ScheduleSpec:
        merged = current.model_dump()
        merged.update(schedule_changes)

        # Switching frequency clears stored fields the new frequency ignores
        if "frequency" in schedule_changes:
            if merged["frequency"] != ReminderFrequency.WEEKLY and "days_of_week" not in schedule_changes:
                merged["days_of_week"] = None
            if merged["frequency"] != ReminderFrequency.CUSTOM and "custom_interval_days" not in schedule_changes:
                merged["custom_interval_days"] = None

        return validate_schedule(ScheduleSpec(**merged))

    def toggle_reminder(
        self,
        reminder_id: str,
        is_active: bool,
        user_id: Optional[str] = None
    ) -> Reminder:
        """Activate or deactivate a reminder.

        Deactivation keeps ``next_occurrence_at``. Reactivation recomputes it
        from now only when the stored occurrence has already passed, so a
        long-dormant reminder does not fire as overdue.

        Raises:
            NotFoundError: If the reminder does not exist or is not owned by the user
        """
        def mutate(reminder: Reminder, now: datetime) -> None:
            reactivating = is_active and not reminder.is_active
            reminder.is_active = is_active
            if reactivating and reminder.next_occurrence_at <= now:
                reminder.next_occurrence_at = compute_next_occurrence(reminder.schedule, now)

        reminder = self._modify(reminder_id, user_id, mutate)
        logger.info(
            f"Reminder {reminder_id} {'activated' if is_active else 'deactivated'}, "
            f"next occurrence {reminder.next_occurrence_at}"
        )
        return reminder

    def delete_reminder(self, reminder_id: str, user_id: Optional[str] = None) -> None:
        """Delete a reminder.

        Raises:
            NotFoundError: If the reminder does not exist or is not owned by the user
        """
        self._get_owned(reminder_id, user_id)
        if not self.store.delete(reminder_id):
            raise NotFoundError("reminder", reminder_id)
        logger.info(f"Deleted reminder {reminder_id}")

    def log_action(
        self,
        reminder_id: str,
        status: ReminderLogStatus,
        notes: Optional[str] = None,
        snooze_minutes: Optional[int] = None,
        user_id: Optional[str] = None
    ) -> ReminderLog:
        """Record the outcome of the current occurrence and advance the schedule.

        Completed and dismissed occurrences recompute the next occurrence from
        the recurrence rule. A snooze overrides it with ``now + snooze_minutes``
        until the snoozed occurrence is itself completed or dismissed.

        Args:
            reminder_id: ID of the reminder
            status: Outcome to record
            notes: Optional free-text notes
            snooze_minutes: Deferral in minutes, required for snoozes
            user_id: ID of the requesting user, checked for ownership when given

        Returns:
            The appended ReminderLog

        Raises:
            NotFoundError: If the reminder does not exist or is not owned by the user
            ValidationError: If a snooze has no positive duration
        """
        status = ReminderLogStatus(status)
        if status == ReminderLogStatus.SNOOZED:
            if snooze_minutes is None:
                raise MissingFieldError("snooze_minutes")
            if snooze_minutes <= 0:
                raise InvalidRangeError("snooze_minutes", snooze_minutes, 1)
        elif snooze_minutes is not None:
            raise ValidationError(
                "A snooze duration can only be given when snoozing.",
                details={"status": status.value, "snooze_minutes": snooze_minutes}
            )

        outcome = {}

        def mutate(reminder: Reminder, now: datetime) -> ReminderLog:
            snoozed_until = None
            if status == ReminderLogStatus.SNOOZED:
                snoozed_until = compute_snooze_until(now, snooze_minutes)
                reminder.next_occurrence_at = snoozed_until
            else:
                reminder.last_reminded_at = now
                reminder.next_occurrence_at = compute_next_occurrence(reminder.schedule, now)

            log = ReminderLog(
                id=str(uuid.uuid4()),
                reminder_id=reminder_id,
                reminded_at=now,
                status=status,
                notes=notes,
                snoozed_until=snoozed_until,
                created_at=now
            )
            log.validate()
            outcome["log"] = log
            return log

        reminder = self._modify(reminder_id, user_id, mutate)
        log = outcome["log"]

        logger.info(
            f"Logged {status.value} for reminder {reminder_id}, "
            f"next occurrence {reminder.next_occurrence_at}"
        )
        return log

    def get_reminder(self, reminder_id: str, user_id: Optional[str] = None) -> Reminder:
        """Get a single reminder.

        Raises:
            NotFoundError: If the reminder does not exist or is not owned by the user
        """
        return self._get_owned(reminder_id, user_id)

    def list_for_user(
        self,
        user_id: str,
        subject_id: Optional[str] = None,
        active_only: bool = False,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Reminder]:
        """List a user's reminders ordered by next occurrence ascending.

        Args:
            user_id: ID of the owning user
            subject_id: Restrict to one pet (optional)
            active_only: Exclude inactive reminders
            limit: Page size, capped at ``settings.max_page_size`` (optional)
            offset: Number of reminders to skip

        Returns:
            List of Reminder objects
        """
        if limit is not None:
            if limit < 1:
                raise InvalidRangeError("limit", limit, 1, settings.max_page_size)
            limit = min(limit, settings.max_page_size)
        if offset < 0:
            raise InvalidRangeError("offset", offset, 0)

        return self.store.list_by_user(
            user_id,
            ReminderFilter(
                subject_id=subject_id,
                active_only=active_only,
                limit=limit,
                offset=offset
            )
        )

    def list_logs(self, reminder_id: str, user_id: Optional[str] = None) -> List[ReminderLog]:
        """List the action history of a reminder, most recent first.

        Raises:
            NotFoundError: If the reminder does not exist or is not owned by the user
        """
        self._get_owned(reminder_id, user_id)
        return self.store.list_logs(reminder_id)
