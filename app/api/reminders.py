"""Reminder API routes."""
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional

from app.clock import Clock, SystemClock
from app.config import settings
from app.database import get_db
from app.schemas.reminder import (
    ReminderActionCreate,
    ReminderCreate,
    ReminderLogResponse,
    ReminderResponse,
    ReminderToggle,
    ReminderUpdate,
)
from app.services.reminder_scheduler import ReminderScheduler
from app.store.sql_store import SQLReminderStore


# Create router
router = APIRouter(prefix=settings.reminders_prefix, tags=["reminders"])


def get_clock() -> Clock:
    """Clock dependency, overridden in tests."""
    return SystemClock()


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    Get the calling user's ID from the ``X-User-Id`` header.

    Raises:
        HTTPException: If the header is missing
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return x_user_id


def get_reminder_scheduler(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
) -> ReminderScheduler:
    return ReminderScheduler(SQLReminderStore(db), clock)


@router.post("", response_model=ReminderResponse, status_code=201)
def create_reminder(
    data: ReminderCreate,
    user_id: str = Depends(get_current_user_id),
    reminder_scheduler: ReminderScheduler = Depends(get_reminder_scheduler)
):
    """Create a reminder and schedule its first occurrence."""
    return reminder_scheduler.create_reminder(user_id, data)


@router.get("", response_model=List[ReminderResponse])
def list_reminders(
    subject_id: Optional[str] = Query(None),
    active_only: bool = Query(False),
    limit: int = Query(settings.default_page_size, ge=1),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    reminder_scheduler: ReminderScheduler = Depends(get_reminder_scheduler)
):
    """List the caller's reminders, soonest first."""
    return reminder_scheduler.list_for_user(
        user_id,
        subject_id=subject_id,
        active_only=active_only,
        limit=limit,
        offset=offset
    )


@router.get("/{reminder_id}", response_model=ReminderResponse)
def get_reminder(
    reminder_id: str,
    user_id: str = Depends(get_current_user_id),
    reminder_scheduler: ReminderScheduler = Depends(get_reminder_scheduler)
):
    return reminder_scheduler.get_reminder(reminder_id, user_id)


@router.patch("/{reminder_id}", response_model=ReminderResponse)
def update_reminder(
    reminder_id: str,
    patch: ReminderUpdate,
    user_id: str = Depends(get_current_user_id),
    reminder_scheduler: ReminderScheduler = Depends(get_reminder_scheduler)
):
    """Edit a reminder. Schedule edits re-anchor the next occurrence to now."""
    return reminder_scheduler.update_reminder(reminder_id, user_id, patch)


@router.post("/{reminder_id}/toggle", response_model=ReminderResponse)
def toggle_reminder(
    reminder_id: str,
    body: ReminderToggle,
    user_id: str = Depends(get_current_user_id),
    reminder_scheduler: ReminderScheduler = Depends(get_reminder_scheduler)
):
    return reminder_scheduler.toggle_reminder(reminder_id, body.is_active, user_id=user_id)


@router.delete("/{reminder_id}", status_code=204)
def delete_reminder(
    reminder_id: str,
    user_id: str = Depends(get_current_user_id),
    reminder_scheduler: ReminderScheduler = Depends(get_reminder_scheduler)
):
    reminder_scheduler.delete_reminder(reminder_id, user_id=user_id)
    return Response(status_code=204)


@router.post("/{reminder_id}/actions", response_model=ReminderLogResponse, status_code=201)
def log_action(
    reminder_id: str,
    body: ReminderActionCreate,
    user_id: str = Depends(get_current_user_id),
    reminder_scheduler: ReminderScheduler = Depends(get_reminder_scheduler)
):
    """Record completed, snoozed or dismissed for the current occurrence."""
    return reminder_scheduler.log_action(
        reminder_id,
        body.status,
        notes=body.notes,
        snooze_minutes=body.snooze_minutes,
        user_id=user_id
    )


@router.get("/{reminder_id}/logs", response_model=List[ReminderLogResponse])
def list_logs(
    reminder_id: str,
    user_id: str = Depends(get_current_user_id),
    reminder_scheduler: ReminderScheduler = Depends(get_reminder_scheduler)
):
    """Action history of a reminder, most recent first."""
    return reminder_scheduler.list_logs(reminder_id, user_id=user_id)
