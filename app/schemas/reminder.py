"""Pydantic schemas for reminder schedules, requests and responses."""
from datetime import datetime, time
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.reminder import ReminderFrequency, ReminderType
from app.models.reminder_log import ReminderLogStatus


# Fields whose change forces recomputation of the next occurrence
SCHEDULE_FIELDS = ("frequency", "time_of_day", "days_of_week", "custom_interval_days")


class ScheduleSpec(BaseModel):
    """Recurrence rule attached to a reminder."""

    model_config = ConfigDict(frozen=True)

    frequency: ReminderFrequency
    time_of_day: time
    days_of_week: Optional[FrozenSet[int]] = None
    custom_interval_days: Optional[int] = None


class ReminderCreate(BaseModel):
    """Request body for creating a reminder."""

    subject_id: str
    type: ReminderType
    title: str
    description: Optional[str] = None
    frequency: ReminderFrequency
    time_of_day: time
    days_of_week: Optional[FrozenSet[int]] = None
    custom_interval_days: Optional[int] = None
    notification_id: Optional[str] = None

    @property
    def schedule(self) -> ScheduleSpec:
        return ScheduleSpec(
            frequency=self.frequency,
            time_of_day=self.time_of_day,
            days_of_week=self.days_of_week,
            custom_interval_days=self.custom_interval_days
        )


class ReminderUpdate(BaseModel):
    """Partial update of a reminder. Only fields that are set are applied."""

    subject_id: Optional[str] = None
    type: Optional[ReminderType] = None
    title: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[ReminderFrequency] = None
    time_of_day: Optional[time] = None
    days_of_week: Optional[FrozenSet[int]] = None
    custom_interval_days: Optional[int] = None
    notification_id: Optional[str] = None

    def touches_schedule(self) -> bool:
        return any(field in self.model_fields_set for field in SCHEDULE_FIELDS)


class ReminderToggle(BaseModel):
    is_active: bool


class ReminderActionCreate(BaseModel):
    """Request body for recording an action on the current occurrence."""

    status: ReminderLogStatus
    notes: Optional[str] = None
    snooze_minutes: Optional[int] = None


class ReminderFilter(BaseModel):
    """Filter and page options for listing a user's reminders."""

    subject_id: Optional[str] = None
    active_only: bool = False
    limit: Optional[int] = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)


class ReminderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    subject_id: str
    type: ReminderType
    title: str
    description: Optional[str] = None
    frequency: ReminderFrequency
    time_of_day: time
    days_of_week: Optional[List[int]] = None
    custom_interval_days: Optional[int] = None
    is_active: bool
    next_occurrence_at: datetime
    last_reminded_at: Optional[datetime] = None
    notification_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ReminderLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    reminder_id: str
    reminded_at: datetime
    status: ReminderLogStatus
    notes: Optional[str] = None
    snoozed_until: Optional[datetime] = None
    created_at: datetime
