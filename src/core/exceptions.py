"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_EVENT = "INVALID_EVENT"

    # Email transport errors
    EMAIL_NOT_CONFIGURED = "EMAIL_NOT_CONFIGURED"
    EMAIL_SEND_FAILED = "EMAIL_SEND_FAILED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class InvalidEventError(AppException):
    """An event is missing data its resolution rule needs."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_EVENT,
            message=message,
            status_code=400,
            details={"field": field} if field else None,
        )


class EmailNotConfiguredError(AppException):
    """Email transport is missing required settings."""

    def __init__(self, setting: str) -> None:
        super().__init__(
            error_code=ErrorCode.EMAIL_NOT_CONFIGURED,
            message=f"Email transport is not configured: {setting} is empty",
            status_code=500,
            details={"setting": setting},
        )


class EmailSendError(AppException):
    """The email transport failed to deliver a message."""

    def __init__(self, recipient: str, reason: str) -> None:
        super().__init__(
            error_code=ErrorCode.EMAIL_SEND_FAILED,
            message=f"Failed to send email to {recipient}: {reason}",
            status_code=502,
            details={"recipient": recipient},
        )


class EventNotStoredError(AppException):
    """An activity event could not be written to the activity log."""

    def __init__(self, event_type: str) -> None:
        super().__init__(
            error_code=ErrorCode.DATABASE_ERROR,
            message=f"Activity event {event_type} could not be stored",
            status_code=500,
            details={"event_type": event_type},
        )
