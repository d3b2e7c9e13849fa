"""Next-occurrence arithmetic for recurring reminders.

These functions are pure: they never read the clock, so callers pass the
reference instant explicitly. All datetimes are naive local wall-clock time.
The result of ``compute_next_occurrence`` is always strictly after the
reference instant.
"""
from datetime import date, datetime, time, timedelta
from dateutil.relativedelta import relativedelta

from app.models.reminder import ReminderFrequency, Weekday
from app.schemas.reminder import ScheduleSpec


def _at_time_of_day(day: date, time_of_day: time) -> datetime:
    """Combine a calendar date with the hour and minute of a schedule."""
    return datetime.combine(day, time(time_of_day.hour, time_of_day.minute))


def _next_daily(slot_today: datetime, reference: datetime) -> datetime:
    if slot_today > reference:
        return slot_today
    return slot_today + timedelta(days=1)


def _next_weekly(spec: ScheduleSpec, slot_today: datetime, reference: datetime) -> datetime:
    days = spec.days_of_week or frozenset()

    # Today only qualifies while its slot is still ahead
    start = 0 if slot_today > reference else 1
    for offset in range(start, start + 7):
        candidate = slot_today + timedelta(days=offset)
        if Weekday.of(candidate) in days:
            return candidate

    # No usable weekday in the set
    return _next_daily(slot_today, reference)


def _next_monthly(slot_today: datetime, reference: datetime) -> datetime:
    if slot_today > reference:
        return slot_today
    # relativedelta clamps to the last day of shorter months (Jan 31 -> Feb 29)
    return slot_today + relativedelta(months=1)


def _next_custom(spec: ScheduleSpec, slot_today: datetime, reference: datetime) -> datetime:
    if slot_today > reference:
        return slot_today
    return slot_today + timedelta(days=spec.custom_interval_days or 1)


def compute_next_occurrence(spec: ScheduleSpec, reference: datetime) -> datetime:
    """Compute the next occurrence of a schedule after a reference instant.

    Args:
        spec: Validated recurrence rule
        reference: Instant to compute from (usually "now")

    Returns:
        The first qualifying instant strictly after ``reference``
    """
    slot_today = _at_time_of_day(reference.date(), spec.time_of_day)

    if spec.frequency == ReminderFrequency.WEEKLY:
        return _next_weekly(spec, slot_today, reference)
    if spec.frequency == ReminderFrequency.MONTHLY:
        return _next_monthly(slot_today, reference)
    if spec.frequency == ReminderFrequency.CUSTOM:
        return _next_custom(spec, slot_today, reference)
    return _next_daily(slot_today, reference)


def compute_snooze_until(reference: datetime, minutes: int) -> datetime:
    """Instant a snoozed occurrence comes due again, independent of the schedule."""
    return reference + timedelta(minutes=minutes)
