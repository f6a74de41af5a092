"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Every write of an
Event replaces the whole aggregate and is guarded by its version.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from events.domain import Event, EventFilter, EventId, EventPage, PrincipalId


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def list_events(self, criteria: EventFilter, page: int, page_size: int) -> EventPage:
        """Return one page of events matching criteria, ordered by starts_at ascending."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def add_event(self, event: Event) -> Event:
        """Store a new event and return it at version 1."""
        ...

    @abstractmethod
    def save_event(self, event: Event, expected_version: int) -> Event:
        """Atomically replace the stored aggregate if its version still matches.

        Returns the event at its new version.

        Raises:
            VersionConflictError: If the stored version differs from expected_version.
            EventNotFoundError: If the event no longer exists.
            StoreUnavailableError: If the store cannot be reached in time.
        """
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId, expected_version: int) -> None:
        """Delete an event if its version still matches."""
        ...

    @abstractmethod
    def events_for_principal(
        self, principal_id: PrincipalId, starts_after: datetime | None = None
    ) -> list[Event]:
        """Return events the principal is registered for, ordered by starts_at ascending."""
        ...
