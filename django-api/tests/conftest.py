"""Pytest configuration and shared fixtures."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from django.utils import timezone as django_timezone
from rest_framework.test import APIClient

from events.domain import (
    Capacity,
    Event,
    EventId,
    EventStatus,
    Principal,
    PrincipalId,
    Role,
    Schedule,
    TimeWindow,
    Track,
)
from events.handlers.authentication import SignedTokenPrincipalProvider
from events.stores import InMemoryEventStore
from events.stores.django_store import DjangoEventStore

# Start of the event most unit tests revolve around.
EVENT_START = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)
# A moment when registration for that event is open.
REGISTRATION_OPEN = EVENT_START - timedelta(days=1)


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


def build_principal(
    name: str = "alice", role: Role = Role.MEMBER, subscription: str | None = None
) -> Principal:
    return Principal(id=PrincipalId(name), role=role, subscription=subscription)


def build_event(
    *,
    starts_at: datetime = EVENT_START,
    duration: timedelta = timedelta(hours=2),
    opens_at: datetime | None = None,
    closes_at: datetime | None = None,
    capacity: int | None = 2,
    waitlist_enabled: bool = True,
    status: EventStatus = EventStatus.PUBLISHED,
    track: Track = Track.ALL,
    category: str = "Academy",
    title: str = "Strength Masterclass",
    **overrides,
) -> Event:
    return Event(
        id=overrides.pop("id", EventId(value=uuid.uuid4())),
        title=title,
        description="Programming heavy compound lifts for intermediate athletes.",
        category=category,
        track=track,
        schedule=Schedule(starts_at=starts_at, ends_at=starts_at + duration),
        registration_window=TimeWindow(
            opens_at=opens_at or starts_at - timedelta(days=7),
            closes_at=closes_at or starts_at,
        ),
        capacity=Capacity(capacity) if capacity is not None else None,
        waitlist_enabled=waitlist_enabled,
        status=status,
        **overrides,
    )


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_principal():
    return build_principal


@pytest.fixture
def make_event():
    return build_event


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(REGISTRATION_OPEN)


@pytest.fixture
def memory_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def auth_client():
    """Return an APIClient authenticated as the given principal."""
    provider = SignedTokenPrincipalProvider()

    def _client(principal: Principal) -> APIClient:
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {provider.issue(principal)}")
        return client

    return _client


@pytest.fixture
def live_event_times():
    """Times relative to the wall clock, for tests that go through HTTP."""
    now = django_timezone.now()
    return {
        "now": now,
        "opens_at": now - timedelta(days=1),
        "starts_soon": now + timedelta(minutes=10),
        "starts_later": now + timedelta(days=2),
    }


@pytest.fixture
def stored_event(make_event, live_event_times):
    """Persist an event through the ORM store, scheduled relative to now."""
    store = DjangoEventStore()

    def _create(**overrides) -> Event:
        overrides.setdefault("starts_at", live_event_times["starts_later"])
        overrides.setdefault("opens_at", live_event_times["opens_at"])
        return store.add_event(make_event(**overrides))

    return _create
