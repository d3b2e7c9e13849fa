"""Reminder model for recurring pet-care tasks."""
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, Time, Enum
from sqlalchemy.orm import relationship
from datetime import datetime, time
from typing import FrozenSet, Iterable, List, Optional
import enum

from app.database import Base


class ReminderType(str, enum.Enum):
    """Kind of care task. Informational, does not affect scheduling."""
    FEEDING = "feeding"
    MEDICINE = "medicine"
    HEALTH_CHECK = "health_check"
    BATHING = "bathing"
    VACCINATION = "vaccination"
    EXERCISE = "exercise"


class ReminderFrequency(str, enum.Enum):
    """Recurrence frequency enumeration."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class Weekday(enum.IntEnum):
    """Weekday ordinals, Sunday first."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def of(cls, value: datetime) -> "Weekday":
        """Weekday of a date or datetime (Python counts Monday as 0)."""
        return cls((value.weekday() + 1) % 7)


def weekdays_to_mask(days: Optional[Iterable[int]]) -> Optional[int]:
    """Pack weekday ordinals into a 7-bit mask."""
    if days is None:
        return None
    mask = 0
    for day in days:
        mask |= 1 << int(day)
    return mask


def mask_to_weekdays(mask: Optional[int]) -> Optional[FrozenSet[int]]:
    """Unpack a 7-bit mask into weekday ordinals."""
    if mask is None:
        return None
    return frozenset(day for day in Weekday if mask & (1 << day))


class Reminder(Base):
    """Reminder model representing a recurring care task for a pet."""

    __tablename__ = "reminders"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)
    subject_id = Column(String(36), nullable=False, index=True)
    type = Column(Enum(ReminderType), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Schedule
    frequency = Column(Enum(ReminderFrequency), nullable=False)
    time_of_day = Column(Time, nullable=False)
    days_of_week_mask = Column(Integer, nullable=True)
    custom_interval_days = Column(Integer, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    next_occurrence_at = Column(DateTime, nullable=False, index=True)
    last_reminded_at = Column(DateTime, nullable=True)
    notification_id = Column(String(255), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    logs = relationship(
        "ReminderLog",
        back_populates="reminder",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return (
            f"<Reminder(id={self.id}, title={self.title}, frequency={self.frequency}, "
            f"next={self.next_occurrence_at})>"
        )

    @property
    def days_of_week(self) -> Optional[List[int]]:
        """Weekday ordinals of a weekly schedule, ascending."""
        days = mask_to_weekdays(self.days_of_week_mask)
        if days is None:
            return None
        return sorted(int(day) for day in days)

    @property
    def schedule(self):
        """The embedded schedule as a ``ScheduleSpec``."""
        from app.schemas.reminder import ScheduleSpec

        return ScheduleSpec(
            frequency=self.frequency,
            time_of_day=self.time_of_day,
            days_of_week=mask_to_weekdays(self.days_of_week_mask),
            custom_interval_days=self.custom_interval_days
        )

    def apply_schedule(self, spec) -> None:
        """Copy a ``ScheduleSpec`` onto the schedule columns."""
        self.frequency = spec.frequency
        self.time_of_day = time(spec.time_of_day.hour, spec.time_of_day.minute)
        self.days_of_week_mask = weekdays_to_mask(spec.days_of_week)
        self.custom_interval_days = spec.custom_interval_days

    def validate(self) -> None:
        """Validate reminder data."""
        if not self.id:
            raise ValueError("Reminder ID is required")
        if not self.user_id:
            raise ValueError("User ID is required")
        if not self.subject_id:
            raise ValueError("Subject ID is required")
        if not self.title or not self.title.strip():
            raise ValueError("Title is required")
        if self.time_of_day is None:
            raise ValueError("Time of day is required")
        if self.next_occurrence_at is None:
            raise ValueError("Next occurrence is required")
        if self.frequency == ReminderFrequency.WEEKLY and not self.days_of_week_mask:
            raise ValueError("Weekly reminders need at least one weekday")
        if self.frequency == ReminderFrequency.CUSTOM and (
            self.custom_interval_days is None or self.custom_interval_days < 1
        ):
            raise ValueError("Custom interval must be at least 1 day")
