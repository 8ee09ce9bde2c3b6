"""Custom exceptions, error kinds and error codes."""

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Coarse failure categories reported across the public boundary."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PREFERENCE = "INVALID_PREFERENCE"
    INVALID_ESCALATION_LEVEL = "INVALID_ESCALATION_LEVEL"
    INVALID_DIGEST_WINDOW = "INVALID_DIGEST_WINDOW"

    # Not found errors (404)
    NOTIFICATION_NOT_FOUND = "NOTIFICATION_NOT_FOUND"
    ESCALATION_NOT_FOUND = "ESCALATION_NOT_FOUND"

    # Conflict errors (409)
    ESCALATION_LEVEL_CONFLICT = "ESCALATION_LEVEL_CONFLICT"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500/503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        kind: ErrorKind = ErrorKind.VALIDATION,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.kind = kind
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    """A required field is missing or malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
            kind=ErrorKind.VALIDATION,
            details={"field": field} if field else None,
        )


class InvalidPreferenceError(AppException):
    """A preference value failed validation at write time."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_PREFERENCE,
            message=f"Invalid value for {field}: {reason}",
            status_code=400,
            kind=ErrorKind.VALIDATION,
            details={"field": field, "value": str(value)},
        )


class InvalidEscalationLevelError(AppException):
    """Escalation level outside the permitted range."""

    def __init__(self, level: int, maximum: int) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ESCALATION_LEVEL,
            message=f"Escalation level must be between 1 and {maximum}, got {level}",
            status_code=400,
            kind=ErrorKind.VALIDATION,
            details={"level": level, "max_level": maximum},
        )


class InvalidDigestWindowError(AppException):
    """Digest window end does not come after its start."""

    def __init__(self, start: str, end: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_DIGEST_WINDOW,
            message="Digest window end must be after its start",
            status_code=400,
            kind=ErrorKind.VALIDATION,
            details={"start": start, "end": end},
        )


class NotificationNotFoundError(AppException):
    """Notification not found."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOTIFICATION_NOT_FOUND,
            message=f"Notification not found: {notification_id}",
            status_code=404,
            kind=ErrorKind.NOT_FOUND,
            details={"notification_id": notification_id},
        )


class EscalationNotFoundError(AppException):
    """Escalation not found."""

    def __init__(self, escalation_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ESCALATION_NOT_FOUND,
            message=f"Escalation not found: {escalation_id}",
            status_code=404,
            kind=ErrorKind.NOT_FOUND,
            details={"escalation_id": escalation_id},
        )


class EscalationLevelConflictError(AppException):
    """Escalation level does not exceed the chain's current level."""

    def __init__(self, notification_id: str, level: int, current_level: int) -> None:
        super().__init__(
            error_code=ErrorCode.ESCALATION_LEVEL_CONFLICT,
            message=(
                f"Escalation level {level} must be greater than the current "
                f"level {current_level}"
            ),
            status_code=409,
            kind=ErrorKind.CONFLICT,
            details={
                "original_notification_id": notification_id,
                "level": level,
                "current_level": current_level,
            },
        )


class StoreUnavailableError(AppException):
    """The backing store failed or did not answer in time."""

    def __init__(self, message: str = "Notification store unavailable") -> None:
        super().__init__(
            error_code=ErrorCode.STORE_UNAVAILABLE,
            message=message,
            status_code=503,
            kind=ErrorKind.INTERNAL,
        )
