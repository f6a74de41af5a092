"""Read-side query objects used by event listings."""

from dataclasses import dataclass
from datetime import datetime

from events.domain.models import Event
from events.domain.value_objects import EventStatus, Track


@dataclass(frozen=True)
class EventFilter:
    """Criteria for listing events. Unset fields do not filter."""

    status: EventStatus | None = EventStatus.PUBLISHED
    track: Track | None = None
    category: str | None = None
    starts_after: datetime | None = None


@dataclass(frozen=True)
class EventPage:
    """One page of events ordered by start time."""

    items: tuple[Event, ...]
    page: int
    page_size: int
    total: int

    @property
    def has_next(self) -> bool:
        return self.page * self.page_size < self.total
