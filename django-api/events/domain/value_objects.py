"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class PrincipalId:
    """Opaque identifier of an authenticated principal."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("Principal id cannot be empty")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Capacity:
    """Positive integer limiting the number of attendees."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 1:
            raise ValueError("Capacity must be at least 1")

    def has_room(self, occupied: int) -> bool:
        return occupied < self.value

    def remaining(self, occupied: int) -> int:
        return max(0, self.value - occupied)


@dataclass(frozen=True)
class TimeWindow:
    """Closed interval [opens_at, closes_at]."""

    opens_at: datetime
    closes_at: datetime

    def __post_init__(self) -> None:
        if self.closes_at < self.opens_at:
            raise ValueError("Window cannot close before it opens")

    def contains(self, moment: datetime) -> bool:
        return self.opens_at <= moment <= self.closes_at


@dataclass(frozen=True)
class Schedule:
    """When an event takes place."""

    starts_at: datetime
    ends_at: datetime

    def __post_init__(self) -> None:
        if self.ends_at <= self.starts_at:
            raise ValueError("End date must be after start date")


class Track(Enum):
    """Subscription tier gating who may view or register for an event."""

    ALL = "all"
    ACADEMY = "academy"
    COACHLAB = "coachlab"
    LEADERSHIP = "leadership"
    BUILDER = "builder"


class Role(Enum):
    MEMBER = "member"
    COACH = "coach"
    ADMIN = "admin"
    MODERATOR = "moderator"


STAFF_ROLES = frozenset({Role.ADMIN, Role.MODERATOR})
ORGANIZER_ROLES = frozenset({Role.ADMIN, Role.MODERATOR, Role.COACH})


class EventStatus(Enum):
    """Lifecycle status of an event."""

    DRAFT = "draft"
    PUBLISHED = "published"
    LIVE = "live"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def can_transition_to(self, target: "EventStatus") -> bool:
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.DRAFT: frozenset({EventStatus.PUBLISHED, EventStatus.CANCELLED}),
    EventStatus.PUBLISHED: frozenset(
        {EventStatus.LIVE, EventStatus.COMPLETED, EventStatus.CANCELLED}
    ),
    EventStatus.LIVE: frozenset({EventStatus.COMPLETED, EventStatus.CANCELLED}),
    EventStatus.COMPLETED: frozenset(),
    EventStatus.CANCELLED: frozenset(),
}


class AttendeeStatus(Enum):
    REGISTERED = "registered"
    ATTENDED = "attended"
    NO_SHOW = "no-show"
    CANCELLED = "cancelled"
