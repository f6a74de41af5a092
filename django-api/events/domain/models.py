"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in events/models.py (persistence layer).

The Event aggregate owns its attendees and waitlist. Every instance is
immutable; mutations produce a new Event through ``replace`` and the
structural invariants are checked on construction, so a state that
breaks them can never be built, let alone persisted.
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from typing import Self

from events.domain.errors import InvariantViolationError
from events.domain.value_objects import (
    STAFF_ROLES,
    AttendeeStatus,
    Capacity,
    EventId,
    EventStatus,
    PrincipalId,
    Role,
    Schedule,
    TimeWindow,
    Track,
)

RATING_MIN = 1
RATING_MAX = 5


@dataclass(frozen=True)
class Principal:
    """An authenticated caller as seen by the registration subsystem."""

    id: PrincipalId
    role: Role = Role.MEMBER
    subscription: str | None = None

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


@dataclass(frozen=True)
class Feedback:
    rating: int
    comment: str = ""

    def __post_init__(self) -> None:
        if not RATING_MIN <= self.rating <= RATING_MAX:
            raise ValueError("Rating must be between 1 and 5")


@dataclass(frozen=True)
class Attendee:
    """A principal holding a seat at an event."""

    principal_id: PrincipalId
    registered_at: datetime
    status: AttendeeStatus = AttendeeStatus.REGISTERED
    checked_in_at: datetime | None = None
    feedback: Feedback | None = None


@dataclass(frozen=True)
class WaitlistEntry:
    principal_id: PrincipalId
    joined_at: datetime


@dataclass(frozen=True)
class Analytics:
    """Derived per-event metrics. attendance_rate is a percentage."""

    registrations: int = 0
    attendance_rate: float = 0.0
    average_rating: float = 0.0


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event aggregate."""

    id: EventId
    title: str
    description: str
    category: str
    track: Track
    schedule: Schedule
    registration_window: TimeWindow
    capacity: Capacity | None = None
    waitlist_enabled: bool = True
    status: EventStatus = EventStatus.DRAFT
    location: str = ""
    attendees: tuple[Attendee, ...] = ()
    waitlist: tuple[WaitlistEntry, ...] = ()
    analytics: Analytics = field(default_factory=Analytics)
    version: int = 0
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self._check_structure()

    def replace(self, **changes) -> Self:
        return dataclasses.replace(self, **changes)

    def check_invariants(self) -> None:
        """Verify every aggregate invariant, including derived analytics."""
        self._check_structure()
        if self.analytics.registrations != len(self.attendees):
            raise InvariantViolationError("analytics.registrations does not match attendees")

    def _check_structure(self) -> None:
        attendee_ids = [a.principal_id for a in self.attendees]
        waitlist_ids = [w.principal_id for w in self.waitlist]
        if len(set(attendee_ids)) != len(attendee_ids):
            raise InvariantViolationError("principal registered twice")
        if len(set(waitlist_ids)) != len(waitlist_ids):
            raise InvariantViolationError("principal waitlisted twice")
        if set(attendee_ids) & set(waitlist_ids):
            raise InvariantViolationError("principal both registered and waitlisted")
        if self.capacity is not None and len(self.attendees) > self.capacity.value:
            raise InvariantViolationError("attendees exceed capacity")
        if any(a.status is AttendeeStatus.CANCELLED for a in self.attendees):
            raise InvariantViolationError("cancelled attendees must be removed")
        joined = [w.joined_at for w in self.waitlist]
        if joined != sorted(joined):
            raise InvariantViolationError("waitlist is not ordered by joined_at")

    def find_attendee(self, principal_id: PrincipalId) -> Attendee | None:
        return next((a for a in self.attendees if a.principal_id == principal_id), None)

    def is_registered(self, principal_id: PrincipalId) -> bool:
        return self.find_attendee(principal_id) is not None

    def is_waitlisted(self, principal_id: PrincipalId) -> bool:
        return any(w.principal_id == principal_id for w in self.waitlist)

    def waitlist_position(self, principal_id: PrincipalId) -> int | None:
        """1-based position on the waitlist, or None when not waitlisted."""
        for position, entry in enumerate(self.waitlist, start=1):
            if entry.principal_id == principal_id:
                return position
        return None

    def with_attendee(self, attendee: Attendee) -> Self:
        """Return a copy with the attendee of the same principal replaced in place."""
        return self.replace(
            attendees=tuple(
                attendee if a.principal_id == attendee.principal_id else a
                for a in self.attendees
            )
        )

    @property
    def attendee_count(self) -> int:
        return len(self.attendees)

    @property
    def waitlist_count(self) -> int:
        return len(self.waitlist)

    @property
    def available_spots(self) -> int | None:
        if self.capacity is None:
            return None
        return self.capacity.remaining(self.attendee_count)

    @property
    def has_room(self) -> bool:
        return self.capacity is None or self.capacity.has_room(self.attendee_count)

    @property
    def is_full(self) -> bool:
        return not self.has_room

    def is_registration_open(self, now: datetime) -> bool:
        return self.status is EventStatus.PUBLISHED and self.registration_window.contains(now)
