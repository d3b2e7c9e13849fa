"""ReminderLog model for the per-occurrence outcome history."""
from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey, event
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.database import Base


class ReminderLogStatus(str, enum.Enum):
    """Outcome of one reminder occurrence."""
    COMPLETED = "completed"
    SNOOZED = "snoozed"
    DISMISSED = "dismissed"


class ReminderLog(Base):
    """ReminderLog model recording the action taken on a reminder occurrence.

    Rows are append-only: once flushed, a log is never updated.
    """

    __tablename__ = "reminder_logs"

    id = Column(String(36), primary_key=True)
    reminder_id = Column(
        String(36),
        ForeignKey("reminders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    reminded_at = Column(DateTime, nullable=False, index=True)
    status = Column(Enum(ReminderLogStatus), nullable=False)
    notes = Column(Text, nullable=True)
    snoozed_until = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    # Relationships
    reminder = relationship("Reminder", back_populates="logs")

    def __repr__(self) -> str:
        return f"<ReminderLog(id={self.id}, reminder_id={self.reminder_id}, status={self.status})>"

    def validate(self) -> None:
        """Validate reminder log data."""
        if not self.id:
            raise ValueError("ReminderLog ID is required")
        if not self.reminder_id:
            raise ValueError("Reminder ID is required")
        if not self.reminded_at:
            raise ValueError("Reminded at is required")
        if not self.status:
            raise ValueError("Status is required")
        if self.status == ReminderLogStatus.SNOOZED:
            if self.snoozed_until is None:
                raise ValueError("Snoozed logs must have a snoozed_until timestamp")
            if self.snoozed_until <= self.reminded_at:
                raise ValueError("Snoozed until must be after reminded at")
        elif self.snoozed_until is not None:
            raise ValueError("Only snoozed logs may have a snoozed_until timestamp")


@event.listens_for(ReminderLog, "before_update")
def _reject_log_update(mapper, connection, target: ReminderLog) -> None:
    raise ValueError(f"ReminderLog {target.id} is append-only and cannot be modified")
