"""Custom exceptions and error handling for the care reminder engine.

Every error carries a user-facing message, a machine-readable code and
optional details so API handlers can render a consistent JSON body.
"""
from typing import Optional, Dict, Any


class ReminderError(Exception):
    """Base class for reminder engine errors with user-friendly messages."""

    def __init__(self, message: str, error_code: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize reminder error.

        Args:
            message: User-friendly error message
            error_code: Machine-readable error code
            details: Optional additional error details
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary format for API responses.

        Returns:
            Dictionary with error information
        """
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


class ValidationError(ReminderError):
    """Error raised when a reminder, schedule or action is malformed."""

    def __init__(
        self,
        message: str,
        error_code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, error_code=error_code, details=details)


class MissingFieldError(ValidationError):
    """Error raised when a required field is missing."""

    def __init__(self, field_name: str):
        """
        Initialize missing field error.

        Args:
            field_name: Name of the missing field
        """
        field_names = {
            "title": "Title",
            "days_of_week": "Days of week",
            "custom_interval_days": "Custom interval",
            "snooze_minutes": "Snooze duration",
            "user_id": "User ID",
            "subject_id": "Pet",
        }

        field_display = field_names.get(field_name, field_name)
        super().__init__(
            message=f"{field_display} is required.",
            error_code="MISSING_FIELD",
            details={"field_name": field_name}
        )


class InvalidRangeError(ValidationError):
    """Error raised when a value is outside the valid range."""

    def __init__(self, field_name: str, value: Any, min_value: Any, max_value: Any = None):
        """
        Initialize invalid range error.

        Args:
            field_name: Name of the field
            value: The invalid value
            min_value: Minimum valid value
            max_value: Maximum valid value (None when unbounded)
        """
        if max_value is None:
            message = f"{field_name} must be at least {min_value} (got {value})."
        else:
            message = f"{field_name} must be between {min_value} and {max_value} (got {value})."

        super().__init__(
            message=message,
            error_code="INVALID_RANGE",
            details={
                "field_name": field_name,
                "value": value,
                "min_value": min_value,
                "max_value": max_value
            }
        )


class InvalidScheduleError(ValidationError):
    """Error raised when a schedule carries fields its frequency does not use."""

    def __init__(self, frequency: str, field_name: str):
        """
        Initialize invalid schedule error.

        Args:
            frequency: Frequency of the schedule
            field_name: Field that does not apply to the frequency
        """
        super().__init__(
            message=f"{field_name} cannot be set for a {frequency} schedule.",
            error_code="INVALID_SCHEDULE",
            details={
                "frequency": frequency,
                "field_name": field_name
            }
        )


class NotFoundError(ReminderError):
    """Error raised when a reminder is unknown or not owned by the caller."""

    def __init__(self, resource_type: str, resource_id: str):
        """
        Initialize not found error.

        Args:
            resource_type: Type of resource (e.g., "reminder")
            resource_id: ID of the resource
        """
        super().__init__(
            message=f"{resource_type.capitalize()} not found (ID: {resource_id}).",
            error_code="RESOURCE_NOT_FOUND",
            details={
                "resource_type": resource_type,
                "resource_id": resource_id
            }
        )


class ConcurrentModificationError(ReminderError):
    """Error raised when a reminder was changed by another writer."""

    def __init__(self, reminder_id: str):
        """
        Initialize concurrent modification error.

        Args:
            reminder_id: ID of the reminder whose write conflicted
        """
        super().__init__(
            message=(
                f"Reminder {reminder_id} was modified by another request. "
                f"Reload it and try again."
            ),
            error_code="CONCURRENT_MODIFICATION",
            details={"reminder_id": reminder_id}
        )


def format_error_for_api(error: ReminderError) -> Dict[str, Any]:
    """
    Format reminder error for API response.

    Args:
        error: Reminder error to format

    Returns:
        Dictionary suitable for JSON API response
    """
    return error.to_dict()
