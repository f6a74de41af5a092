"""Domain error codes for the events module."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    INVALID_EVENT_ID = "INVALID_EVENT_ID"
    ACCESS_DENIED = "ACCESS_DENIED"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    ALREADY_WAITLISTED = "ALREADY_WAITLISTED"
    EVENT_FULL = "EVENT_FULL"
    NOT_REGISTERED = "NOT_REGISTERED"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    CHECK_IN_NOT_YET_OPEN = "CHECK_IN_NOT_YET_OPEN"
    NOT_ATTENDED = "NOT_ATTENDED"
    INVALID_RATING = "INVALID_RATING"
    EVENT_CLOSED = "EVENT_CLOSED"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    EVENT_HAS_ATTENDEES = "EVENT_HAS_ATTENDEES"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


class DenyReason(Enum):
    """Why the access policy refused a registration."""

    EVENT_NOT_PUBLISHED = "EVENT_NOT_PUBLISHED"
    OUTSIDE_REGISTRATION_WINDOW = "OUTSIDE_REGISTRATION_WINDOW"
    TRACK_RESTRICTED = "TRACK_RESTRICTED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    retryable: ClassVar[bool] = False

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class InvalidEventIdError(DomainError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_EVENT_ID,
            message="Invalid event ID format",
        )


_DENY_MESSAGES = {
    DenyReason.EVENT_NOT_PUBLISHED: "Registration is not open for this event",
    DenyReason.OUTSIDE_REGISTRATION_WINDOW: "Registration is not open for this event",
    DenyReason.TRACK_RESTRICTED: "This event requires a matching subscription",
}


class AccessDeniedError(DomainError):
    """Raised when the access policy refuses a registration."""

    def __init__(self, reason: DenyReason) -> None:
        super().__init__(
            code=ErrorCode.ACCESS_DENIED,
            message=_DENY_MESSAGES[reason],
        )
        self.reason = reason


class AlreadyRegisteredError(DomainError):
    def __init__(self, principal_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_REGISTERED,
            message="Already registered for this event",
        )
        self.principal_id = principal_id


class AlreadyWaitlistedError(DomainError):
    def __init__(self, principal_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_WAITLISTED,
            message="Already on the waitlist for this event",
        )
        self.principal_id = principal_id


class EventFullError(DomainError):
    """Raised when an event is at capacity and has no waitlist."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_FULL,
            message="Event is full and waitlist is disabled",
        )
        self.event_id = event_id


class NotRegisteredError(DomainError):
    def __init__(self, principal_id: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_REGISTERED,
            message="You are not registered for this event",
        )
        self.principal_id = principal_id


class AlreadyCheckedInError(DomainError):
    def __init__(self, principal_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_CHECKED_IN,
            message="You have already checked in",
        )
        self.principal_id = principal_id


class CheckInNotYetOpenError(DomainError):
    """Raised when check-in is attempted outside the check-in window."""

    def __init__(self, opens_at: datetime, closes_at: datetime, closed: bool = False) -> None:
        super().__init__(
            code=ErrorCode.CHECK_IN_NOT_YET_OPEN,
            message="Check-in has closed" if closed else "Check-in is not available yet",
        )
        self.opens_at = opens_at
        self.closes_at = closes_at


class NotAttendedError(DomainError):
    def __init__(self, principal_id: str) -> None:
        super().__init__(
            code=ErrorCode.NOT_ATTENDED,
            message="Feedback can only be submitted after checking in",
        )
        self.principal_id = principal_id


class InvalidRatingError(DomainError):
    def __init__(self, rating: object) -> None:
        super().__init__(
            code=ErrorCode.INVALID_RATING,
            message="Rating must be an integer between 1 and 5",
        )
        self.rating = rating


class EventClosedError(DomainError):
    """Raised when attendee state of a finished event would change."""

    def __init__(self, event_id: str, status: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_CLOSED,
            message=f"Event is {status}",
        )
        self.event_id = event_id


class InvalidStatusTransitionError(DomainError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            message=f"Cannot change event status from {current} to {target}",
        )
        self.current = current
        self.target = target


class EventHasAttendeesError(DomainError):
    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_HAS_ATTENDEES,
            message="Cannot delete event with registered attendees",
        )
        self.event_id = event_id


class InvariantViolationError(DomainError):
    """Raised when a computed event state would break an aggregate invariant."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            code=ErrorCode.INVARIANT_VIOLATION,
            message="Event state is inconsistent",
        )
        self.detail = detail


class VersionConflictError(DomainError):
    """Raised when the stored event changed since it was loaded."""

    retryable = True

    def __init__(self, event_id: str, expected_version: int) -> None:
        super().__init__(
            code=ErrorCode.VERSION_CONFLICT,
            message="Event was modified concurrently, please retry",
        )
        self.event_id = event_id
        self.expected_version = expected_version


class StoreUnavailableError(DomainError):
    """Raised when the event store cannot be reached in time."""

    retryable = True

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="Event store is temporarily unavailable",
        )
