"""Integration tests for DjangoEventStore.

Run with: pytest tests/test_django_store.py -v
"""

from datetime import timedelta
from unittest import mock

import pytest
from django.db import OperationalError

from events import models as orm
from events.dispatch import event_changed
from events.domain import EventFilter, EventStatus, PrincipalId, Track
from events.domain.errors import (
    EventNotFoundError,
    StoreUnavailableError,
    VersionConflictError,
)
from events.services import RegistrationEngine
from events.stores.django_store import DjangoEventStore

from conftest import EVENT_START, REGISTRATION_OPEN


@pytest.fixture
def store() -> DjangoEventStore:
    return DjangoEventStore()


def _with_registrations(event, principals, engine=None):
    engine = engine or RegistrationEngine()
    for offset, principal in enumerate(principals):
        event = engine.register(principal, event, REGISTRATION_OPEN + timedelta(seconds=offset)).event
    return event


@pytest.mark.django_db
class TestAggregateRoundTrip:
    """An aggregate comes back from the database exactly as it was saved."""

    def test_add_event_starts_at_version_one(self, store, make_event):
        """add_event stores the event with version 1."""
        stored = store.add_event(make_event(title="Olympic Lifting Basics"))

        assert stored.version == 1
        assert stored.title == "Olympic Lifting Basics"
        assert stored.created_at is not None
        assert orm.Event.objects.filter(id=stored.id.value).exists()

    def test_get_event_missing_returns_none(self, store, make_event):
        """get_event returns None for an unknown id."""
        assert store.get_event(make_event().id) is None

    def test_attendees_and_waitlist_keep_order(self, store, make_event, make_principal):
        """Attendees and waitlist entries are restored in order with their details."""
        event = store.add_event(make_event(capacity=2))
        names = ["alice", "bob", "carol", "dave"]
        updated = _with_registrations(event, [make_principal(n) for n in names])
        engine = RegistrationEngine()
        updated = engine.check_in(make_principal("alice"), updated, EVENT_START).event
        updated = engine.submit_feedback(make_principal("alice"), updated, 4, "Solid coaching").event

        store.save_event(updated, expected_version=event.version)
        loaded = store.get_event(event.id)

        assert [str(a.principal_id) for a in loaded.attendees] == ["alice", "bob"]
        assert [str(w.principal_id) for w in loaded.waitlist] == ["carol", "dave"]
        alice = loaded.find_attendee(PrincipalId("alice"))
        assert alice.checked_in_at == EVENT_START
        assert alice.feedback.rating == 4
        assert alice.feedback.comment == "Solid coaching"
        assert loaded.analytics.registrations == 2
        assert loaded.version == 2


@pytest.mark.django_db
class TestOptimisticConcurrency:
    """Tests for versioned writes."""

    def test_save_with_current_version_bumps_version(self, store, make_event, make_principal):
        """A write with the current version succeeds and increments it."""
        event = store.add_event(make_event())
        updated = _with_registrations(event, [make_principal()])

        saved = store.save_event(updated, expected_version=1)

        assert saved.version == 2
        assert store.get_event(event.id).version == 2

    def test_stale_version_raises_conflict(self, store, make_event, make_principal):
        """A write based on an old version is rejected and changes nothing."""
        event = store.add_event(make_event())
        store.save_event(_with_registrations(event, [make_principal("alice")]), expected_version=1)

        with pytest.raises(VersionConflictError):
            store.save_event(_with_registrations(event, [make_principal("bob")]), expected_version=1)

        loaded = store.get_event(event.id)
        assert loaded.is_registered(PrincipalId("alice"))
        assert not loaded.is_registered(PrincipalId("bob"))

    def test_save_missing_event_raises_not_found(self, store, make_event):
        """Saving an event that was never added raises EventNotFoundError."""
        with pytest.raises(EventNotFoundError):
            store.save_event(make_event(), expected_version=1)

    def test_delete_with_stale_version(self, store, make_event):
        """delete_event honours the expected version."""
        event = store.add_event(make_event())

        with pytest.raises(VersionConflictError):
            store.delete_event(event.id, expected_version=7)
        store.delete_event(event.id, expected_version=1)

        assert store.get_event(event.id) is None


@pytest.mark.django_db
class TestQueries:
    def test_list_events_filters_and_paginates(self, store, make_event):
        """list_events applies the filter and pages by start time."""
        first = store.add_event(make_event(track=Track.ACADEMY))
        second = store.add_event(make_event(track=Track.ACADEMY, starts_at=EVENT_START + timedelta(days=1)))
        store.add_event(make_event(track=Track.COACHLAB))
        store.add_event(make_event(track=Track.ACADEMY, status=EventStatus.DRAFT))

        criteria = EventFilter(track=Track.ACADEMY, starts_after=REGISTRATION_OPEN)
        page_one = store.list_events(criteria, page=1, page_size=1)
        page_two = store.list_events(criteria, page=2, page_size=1)
        past_end = store.list_events(criteria, page=5, page_size=1)

        assert [e.id for e in page_one.items] == [first.id]
        assert [e.id for e in page_two.items] == [second.id]
        assert page_one.total == 2 and page_one.has_next
        assert not page_two.has_next
        assert past_end.items == ()

    def test_events_for_principal(self, store, make_event, make_principal):
        """events_for_principal lists events with a seat, not a waitlist place."""
        seated = store.add_event(make_event(capacity=1))
        store.save_event(_with_registrations(seated, [make_principal("alice")]), expected_version=1)
        queued = store.add_event(make_event(capacity=1))
        store.save_event(
            _with_registrations(queued, [make_principal("bob"), make_principal("alice")]),
            expected_version=1,
        )

        events = store.events_for_principal(PrincipalId("alice"))

        assert [e.id for e in events] == [seated.id]


@pytest.mark.django_db
class TestDatabaseErrors:
    def test_database_error_becomes_store_unavailable(self, store, make_event):
        """Lock timeouts and connection failures surface as StoreUnavailableError."""
        with mock.patch.object(
            DjangoEventStore, "_aggregates", side_effect=OperationalError("database is locked")
        ):
            with pytest.raises(StoreUnavailableError):
                store.get_event(make_event().id)

    def test_write_announces_change_on_commit(self, store, make_event, django_capture_on_commit_callbacks):
        """A committed write sends event_changed."""
        received = []

        def receiver(sender, event_id, **kwargs):
            received.append(event_id)

        event_changed.connect(receiver)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                event = store.add_event(make_event())
        finally:
            event_changed.disconnect(receiver)

        assert received == [str(event.id)]
