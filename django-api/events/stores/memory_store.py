"""In-process EventStore.

Aggregates are immutable, so the store keeps references and swaps them
under a lock. State lives in the instance, so a single-process deployment
relies on ``get_event_store`` handing every request the same one. Each
write sends ``event_changed`` so cached reads are invalidated as they are
for the database store.
"""

import threading
from datetime import datetime

from django.utils import timezone

from events.dispatch import event_changed
from events.domain import Event, EventFilter, EventId, EventPage, PrincipalId
from events.domain.errors import EventNotFoundError, VersionConflictError
from events.stores.interfaces import EventStore


class InMemoryEventStore(EventStore):
    """Thread-safe dictionary-backed event store with compare-and-swap writes."""

    def __init__(self, events: list[Event] | None = None) -> None:
        self._events: dict[EventId, Event] = {}
        self._lock = threading.Lock()
        for event in events or []:
            self.add_event(event)

    def list_events(self, criteria: EventFilter, page: int, page_size: int) -> EventPage:
        with self._lock:
            matches = [e for e in self._events.values() if _matches(e, criteria)]
        matches.sort(key=lambda e: e.schedule.starts_at)
        start = (page - 1) * page_size
        return EventPage(
            items=tuple(matches[start : start + page_size]),
            page=page,
            page_size=page_size,
            total=len(matches),
        )

    def get_event(self, event_id: EventId) -> Event | None:
        with self._lock:
            return self._events.get(event_id)

    def add_event(self, event: Event) -> Event:
        now = timezone.now()
        stored = event.replace(
            version=1,
            created_at=event.created_at or now,
            updated_at=now,
        )
        with self._lock:
            self._events[stored.id] = stored
        self._announce(stored.id)
        return stored

    def save_event(self, event: Event, expected_version: int) -> Event:
        with self._lock:
            current = self._events.get(event.id)
            if current is None:
                raise EventNotFoundError(str(event.id))
            if current.version != expected_version:
                raise VersionConflictError(str(event.id), expected_version)
            stored = event.replace(version=expected_version + 1, updated_at=timezone.now())
            self._events[event.id] = stored
        self._announce(event.id)
        return stored

    def delete_event(self, event_id: EventId, expected_version: int) -> None:
        with self._lock:
            current = self._events.get(event_id)
            if current is None:
                raise EventNotFoundError(str(event_id))
            if current.version != expected_version:
                raise VersionConflictError(str(event_id), expected_version)
            del self._events[event_id]
        self._announce(event_id)

    def _announce(self, event_id: EventId) -> None:
        event_changed.send(sender=self.__class__, event_id=str(event_id))

    def events_for_principal(
        self, principal_id: PrincipalId, starts_after: datetime | None = None
    ) -> list[Event]:
        with self._lock:
            events = [e for e in self._events.values() if e.is_registered(principal_id)]
        if starts_after is not None:
            events = [e for e in events if e.schedule.starts_at >= starts_after]
        return sorted(events, key=lambda e: e.schedule.starts_at)


def _matches(event: Event, criteria: EventFilter) -> bool:
    if criteria.status is not None and event.status is not criteria.status:
        return False
    if criteria.track is not None and event.track is not criteria.track:
        return False
    if criteria.category is not None and event.category != criteria.category:
        return False
    if criteria.starts_after is not None and event.schedule.starts_at < criteria.starts_after:
        return False
    return True
