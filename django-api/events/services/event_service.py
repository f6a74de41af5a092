"""Event service - read-side queries over the event store.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

from datetime import datetime
from uuid import UUID

from events.conf import registration_setting
from events.domain import (
    Event,
    EventFilter,
    EventId,
    EventPage,
    EventStatus,
    Principal,
    Track,
)
from events.domain.errors import EventNotFoundError, InvalidEventIdError
from events.services.clock import Clock, SystemClock
from events.stores.interfaces import EventStore


def parse_event_id(event_id: str) -> EventId:
    """Parse an event id received from a caller.

    Raises:
        InvalidEventIdError: If the event_id is not a valid UUID.
    """
    try:
        return EventId(value=UUID(event_id))
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidEventIdError() from exc


class EventService:
    """Service for event catalog operations."""

    def __init__(self, store: EventStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def list_events(
        self,
        status: EventStatus | None = EventStatus.PUBLISHED,
        track: Track | None = None,
        category: str | None = None,
        upcoming: bool = True,
        page: int = 1,
        page_size: int | None = None,
    ) -> EventPage:
        """Return one page of events ordered by start time.

        A track of ALL does not filter. ``upcoming`` keeps events that have
        not started yet.
        """
        criteria = EventFilter(
            status=status,
            track=track if track is not Track.ALL else None,
            category=category,
            starts_after=self._clock.now() if upcoming else None,
        )
        return self._store.list_events(criteria, max(page, 1), self._page_size(page_size))

    def list_by_category(self, category: str, limit: int = 10) -> list[Event]:
        """Return the next published events in a category."""
        page = self.list_events(category=category, page_size=limit)
        return list(page.items)

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self._store.get_event(parse_event_id(event_id))
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def registered_events(self, principal: Principal, upcoming: bool = True) -> list[Event]:
        """Return the events the principal holds a seat at."""
        starts_after: datetime | None = self._clock.now() if upcoming else None
        return self._store.events_for_principal(principal.id, starts_after=starts_after)

    def _page_size(self, requested: int | None) -> int:
        if requested is None:
            return registration_setting("PAGE_SIZE")
        return max(1, min(requested, registration_setting("MAX_PAGE_SIZE")))
