"""Django ORM implementation of the EventStore.

An aggregate is the Event row plus its attendee and waitlist rows. Writes
run in one transaction: the Event row is updated only where its version
still matches, then the child rows are replaced. Database errors, including
lock and statement timeouts, surface as StoreUnavailableError.
"""

from datetime import datetime
from functools import wraps

import structlog
from django.core.paginator import Paginator
from django.db import DatabaseError, transaction
from django.db.models import F, QuerySet
from django.utils import timezone

from events import models as orm
from events.dispatch import event_changed
from events.domain import (
    Analytics,
    Attendee,
    AttendeeStatus,
    Capacity,
    Event,
    EventFilter,
    EventId,
    EventPage,
    EventStatus,
    Feedback,
    PrincipalId,
    Schedule,
    TimeWindow,
    Track,
    WaitlistEntry,
)
from events.domain.errors import (
    EventNotFoundError,
    StoreUnavailableError,
    VersionConflictError,
)
from events.stores.interfaces import EventStore

logger = structlog.get_logger(__name__)


def _translate_database_errors(method):
    @wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except DatabaseError as exc:
            logger.error(
                "event_store_unavailable",
                operation=method.__name__,
                error=str(exc),
            )
            raise StoreUnavailableError() from exc

    return wrapper


class DjangoEventStore(EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    @_translate_database_errors
    def list_events(self, criteria: EventFilter, page: int, page_size: int) -> EventPage:
        queryset = self._aggregates().order_by("starts_at", "id")
        if criteria.status is not None:
            queryset = queryset.filter(status=criteria.status.value)
        if criteria.track is not None:
            queryset = queryset.filter(track=criteria.track.value)
        if criteria.category is not None:
            queryset = queryset.filter(category=criteria.category)
        if criteria.starts_after is not None:
            queryset = queryset.filter(starts_at__gte=criteria.starts_after)

        paginator = Paginator(queryset, page_size)
        if page > paginator.num_pages:
            return EventPage(items=(), page=page, page_size=page_size, total=paginator.count)
        return EventPage(
            items=tuple(_to_domain(row) for row in paginator.page(page)),
            page=page,
            page_size=page_size,
            total=paginator.count,
        )

    @_translate_database_errors
    def get_event(self, event_id: EventId) -> Event | None:
        row = self._aggregates().filter(id=event_id.value).first()
        return _to_domain(row) if row is not None else None

    @_translate_database_errors
    def add_event(self, event: Event) -> Event:
        with transaction.atomic():
            row = orm.Event.objects.create(id=event.id.value, version=1, **_event_fields(event))
            self._write_children(row.pk, event)
        self._announce(event.id)
        return self.get_event(event.id)

    @_translate_database_errors
    def save_event(self, event: Event, expected_version: int) -> Event:
        updated_at = timezone.now()
        with transaction.atomic():
            updated = orm.Event.objects.filter(
                id=event.id.value, version=expected_version
            ).update(
                version=F("version") + 1,
                updated_at=updated_at,
                **_event_fields(event),
            )
            if not updated:
                self._raise_write_failure(event.id, expected_version)
            orm.Attendee.objects.filter(event_id=event.id.value).delete()
            orm.WaitlistEntry.objects.filter(event_id=event.id.value).delete()
            self._write_children(event.id.value, event)
        self._announce(event.id)
        return event.replace(version=expected_version + 1, updated_at=updated_at)

    @_translate_database_errors
    def delete_event(self, event_id: EventId, expected_version: int) -> None:
        with transaction.atomic():
            deleted, _ = orm.Event.objects.filter(
                id=event_id.value, version=expected_version
            ).delete()
            if not deleted:
                self._raise_write_failure(event_id, expected_version)
        self._announce(event_id)

    @_translate_database_errors
    def events_for_principal(
        self, principal_id: PrincipalId, starts_after: datetime | None = None
    ) -> list[Event]:
        queryset = self._aggregates().filter(attendees__principal_id=principal_id.value)
        if starts_after is not None:
            queryset = queryset.filter(starts_at__gte=starts_after)
        return [_to_domain(row) for row in queryset.order_by("starts_at").distinct()]

    def _aggregates(self) -> QuerySet:
        return orm.Event.objects.prefetch_related("attendees", "waitlist_entries")

    def _raise_write_failure(self, event_id: EventId, expected_version: int) -> None:
        if orm.Event.objects.filter(id=event_id.value).exists():
            raise VersionConflictError(str(event_id), expected_version)
        raise EventNotFoundError(str(event_id))

    def _write_children(self, event_pk, event: Event) -> None:
        orm.Attendee.objects.bulk_create(
            [
                orm.Attendee(
                    event_id=event_pk,
                    principal_id=attendee.principal_id.value,
                    position=position,
                    registered_at=attendee.registered_at,
                    status=attendee.status.value,
                    checked_in_at=attendee.checked_in_at,
                    rating=attendee.feedback.rating if attendee.feedback else None,
                    comment=attendee.feedback.comment if attendee.feedback else "",
                )
                for position, attendee in enumerate(event.attendees)
            ]
        )
        orm.WaitlistEntry.objects.bulk_create(
            [
                orm.WaitlistEntry(
                    event_id=event_pk,
                    principal_id=entry.principal_id.value,
                    position=position,
                    joined_at=entry.joined_at,
                )
                for position, entry in enumerate(event.waitlist)
            ]
        )

    def _announce(self, event_id: EventId) -> None:
        transaction.on_commit(
            lambda: event_changed.send(sender=self.__class__, event_id=str(event_id))
        )


def _event_fields(event: Event) -> dict:
    return {
        "title": event.title,
        "description": event.description,
        "category": event.category,
        "location": event.location,
        "track": event.track.value,
        "status": event.status.value,
        "capacity": event.capacity.value if event.capacity else None,
        "waitlist_enabled": event.waitlist_enabled,
        "starts_at": event.schedule.starts_at,
        "ends_at": event.schedule.ends_at,
        "registration_opens_at": event.registration_window.opens_at,
        "registration_closes_at": event.registration_window.closes_at,
        "published_at": event.published_at,
        "registrations": event.analytics.registrations,
        "attendance_rate": event.analytics.attendance_rate,
        "average_rating": event.analytics.average_rating,
    }


def _to_domain(row: orm.Event) -> Event:
    return Event(
        id=EventId(value=row.id),
        title=row.title,
        description=row.description,
        category=row.category,
        location=row.location,
        track=Track(row.track),
        status=EventStatus(row.status),
        capacity=Capacity(row.capacity) if row.capacity is not None else None,
        waitlist_enabled=row.waitlist_enabled,
        schedule=Schedule(starts_at=row.starts_at, ends_at=row.ends_at),
        registration_window=TimeWindow(
            opens_at=row.registration_opens_at,
            closes_at=row.registration_closes_at,
        ),
        attendees=tuple(
            Attendee(
                principal_id=PrincipalId(a.principal_id),
                registered_at=a.registered_at,
                status=AttendeeStatus(a.status),
                checked_in_at=a.checked_in_at,
                feedback=Feedback(rating=a.rating, comment=a.comment)
                if a.rating is not None
                else None,
            )
            for a in row.attendees.all()
        ),
        waitlist=tuple(
            WaitlistEntry(principal_id=PrincipalId(w.principal_id), joined_at=w.joined_at)
            for w in row.waitlist_entries.all()
        ),
        analytics=Analytics(
            registrations=row.registrations,
            attendance_rate=row.attendance_rate,
            average_rating=row.average_rating,
        ),
        version=row.version,
        published_at=row.published_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
