"""Organizer-side event lifecycle: creation, status changes, deletion."""

import uuid
from datetime import datetime

import structlog

from events.domain import (
    Capacity,
    Event,
    EventId,
    EventStatus,
    Schedule,
    TimeWindow,
    Track,
)
from events.domain.errors import (
    EventHasAttendeesError,
    InvalidStatusTransitionError,
)
from events.services.analytics import AnalyticsAggregator
from events.services.clock import Clock, SystemClock
from events.services.event_service import EventService
from events.stores.interfaces import EventStore

logger = structlog.get_logger(__name__)


class EventLifecycleService:
    """Creates events and moves them through draft, published, live, completed, cancelled."""

    def __init__(
        self,
        store: EventStore,
        clock: Clock | None = None,
        aggregator: AnalyticsAggregator | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._aggregator = aggregator or AnalyticsAggregator()
        self._events = EventService(store, clock=self._clock)

    def create_event(
        self,
        *,
        title: str,
        description: str,
        category: str,
        starts_at: datetime,
        ends_at: datetime,
        track: Track = Track.ALL,
        location: str = "",
        capacity: int | None = None,
        waitlist_enabled: bool = True,
        registration_opens_at: datetime | None = None,
        registration_deadline: datetime | None = None,
    ) -> Event:
        """Create a draft event.

        Registration opens now unless told otherwise and closes at the
        deadline, or when the event starts.

        Raises:
            ValueError: If the schedule, window or capacity is invalid.
        """
        schedule = Schedule(starts_at=starts_at, ends_at=ends_at)
        closes_at = registration_deadline or starts_at
        if closes_at > starts_at:
            raise ValueError("Registration deadline cannot be after the event starts")
        window = TimeWindow(
            opens_at=min(registration_opens_at or self._clock.now(), closes_at),
            closes_at=closes_at,
        )
        event = Event(
            id=EventId(value=uuid.uuid4()),
            title=title,
            description=description,
            category=category,
            location=location,
            track=track,
            schedule=schedule,
            registration_window=window,
            capacity=Capacity(capacity) if capacity is not None else None,
            waitlist_enabled=waitlist_enabled,
        )
        created = self._store.add_event(event)
        logger.info("event_created", event_id=str(created.id), track=track.value)
        return created

    def change_status(self, event_id: str, status: EventStatus) -> Event:
        """Move an event to a new lifecycle status.

        Publishing stamps published_at the first time. Completing runs the
        final analytics computation.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            InvalidStatusTransitionError: If the transition is not allowed.
            VersionConflictError: If the event changed concurrently.
        """
        event = self._events.get_event(event_id)
        if not event.status.can_transition_to(status):
            raise InvalidStatusTransitionError(event.status.value, status.value)

        updated = event.replace(status=status)
        if status is EventStatus.PUBLISHED and updated.published_at is None:
            updated = updated.replace(published_at=self._clock.now())
        updated = self._aggregator.recompute(updated)
        updated.check_invariants()

        saved = self._store.save_event(updated, expected_version=event.version)
        logger.info(
            "event_status_changed",
            event_id=event_id,
            previous=event.status.value,
            status=status.value,
        )
        return saved

    def delete_event(self, event_id: str) -> None:
        """Delete an event nobody is registered for.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            EventHasAttendeesError: If anybody holds a seat.
        """
        event = self._events.get_event(event_id)
        if event.attendees:
            raise EventHasAttendeesError(event_id)
        self._store.delete_event(event.id, expected_version=event.version)
        logger.info("event_deleted", event_id=event_id)
