from events.domain.models import (
    Analytics,
    Attendee,
    Event,
    Feedback,
    Principal,
    WaitlistEntry,
)
from events.domain.queries import EventFilter, EventPage
from events.domain.value_objects import (
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

__all__ = [
    "Event",
    "Attendee",
    "WaitlistEntry",
    "Feedback",
    "Analytics",
    "Principal",
    "EventFilter",
    "EventPage",
    "EventId",
    "PrincipalId",
    "Capacity",
    "TimeWindow",
    "Schedule",
    "Track",
    "Role",
    "EventStatus",
    "AttendeeStatus",
]
