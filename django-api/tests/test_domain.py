"""Unit tests for domain primitives and the Event aggregate.

These test invariants that must hold at construction time.
Run with: pytest tests/test_domain.py -v
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from events.domain import (
    Analytics,
    Attendee,
    AttendeeStatus,
    Capacity,
    EventId,
    EventStatus,
    Feedback,
    PrincipalId,
    Role,
    Schedule,
    TimeWindow,
    WaitlistEntry,
)
from events.domain.errors import InvariantViolationError

T0 = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)


def _attendee(name: str, status: AttendeeStatus = AttendeeStatus.REGISTERED) -> Attendee:
    return Attendee(principal_id=PrincipalId(name), registered_at=T0, status=status)


def _entry(name: str, minutes: int = 0) -> WaitlistEntry:
    return WaitlistEntry(principal_id=PrincipalId(name), joined_at=T0 + timedelta(minutes=minutes))


class TestCapacity:
    """Tests for Capacity value object."""

    def test_capacity_accepts_positive_value(self):
        """Capacity can be created with positive value."""
        assert Capacity(1).value == 1

    def test_capacity_rejects_zero(self):
        """Capacity raises ValueError for zero."""
        with pytest.raises(ValueError):
            Capacity(0)

    def test_capacity_rejects_negative_value(self):
        """Capacity raises ValueError for negative value."""
        with pytest.raises(ValueError):
            Capacity(-3)

    def test_has_room_until_value_reached(self):
        """has_room is true below the limit and false at it."""
        capacity = Capacity(2)
        assert capacity.has_room(1)
        assert not capacity.has_room(2)
        assert capacity.remaining(2) == 0


class TestEventId:
    """Tests for EventId value object."""

    def test_from_string_valid_uuid(self):
        """EventId.from_string parses valid UUID."""
        raw = uuid.uuid4()
        assert EventId.from_string(str(raw)).value == raw

    def test_from_string_invalid_uuid(self):
        """EventId.from_string raises ValueError for invalid UUID."""
        with pytest.raises(ValueError):
            EventId.from_string("not-a-uuid")

    def test_str_is_canonical_uuid(self):
        """str(EventId) is the hyphenated UUID."""
        raw = uuid.uuid4()
        assert str(EventId(value=raw)) == str(raw)


class TestPrincipalId:
    def test_rejects_blank(self):
        """PrincipalId cannot be blank."""
        with pytest.raises(ValueError):
            PrincipalId("  ")


class TestTimeWindow:
    """Tests for TimeWindow value object."""

    def test_bounds_are_inclusive(self):
        """Both opens_at and closes_at are inside the window."""
        window = TimeWindow(opens_at=T0, closes_at=T0 + timedelta(hours=1))
        assert window.contains(T0)
        assert window.contains(T0 + timedelta(hours=1))
        assert not window.contains(T0 - timedelta(seconds=1))
        assert not window.contains(T0 + timedelta(hours=1, seconds=1))

    def test_rejects_inverted_window(self):
        """A window cannot close before it opens."""
        with pytest.raises(ValueError):
            TimeWindow(opens_at=T0, closes_at=T0 - timedelta(minutes=1))


class TestSchedule:
    def test_end_must_be_after_start(self):
        """Schedule raises ValueError when ends_at is not after starts_at."""
        with pytest.raises(ValueError, match="End date must be after start date"):
            Schedule(starts_at=T0, ends_at=T0)


class TestFeedback:
    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, rating):
        """Feedback only holds ratings from 1 to 5."""
        with pytest.raises(ValueError):
            Feedback(rating=rating)


class TestEventStatus:
    """Tests for lifecycle transitions."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (EventStatus.DRAFT, EventStatus.PUBLISHED),
            (EventStatus.PUBLISHED, EventStatus.LIVE),
            (EventStatus.PUBLISHED, EventStatus.COMPLETED),
            (EventStatus.LIVE, EventStatus.COMPLETED),
            (EventStatus.LIVE, EventStatus.CANCELLED),
        ],
    )
    def test_allowed_transitions(self, current, target):
        """Forward transitions are allowed."""
        assert current.can_transition_to(target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (EventStatus.DRAFT, EventStatus.COMPLETED),
            (EventStatus.COMPLETED, EventStatus.PUBLISHED),
            (EventStatus.CANCELLED, EventStatus.PUBLISHED),
            (EventStatus.LIVE, EventStatus.DRAFT),
        ],
    )
    def test_rejected_transitions(self, current, target):
        """Finished events stay finished and nothing goes back to draft."""
        assert not current.can_transition_to(target)


class TestEventInvariants:
    """Structural invariants are checked whenever an Event is built."""

    def test_rejects_principal_registered_twice(self, make_event):
        """The same principal cannot hold two seats."""
        with pytest.raises(InvariantViolationError):
            make_event(attendees=(_attendee("alice"), _attendee("alice")))

    def test_rejects_principal_waitlisted_twice(self, make_event):
        """The same principal cannot hold two waitlist places."""
        with pytest.raises(InvariantViolationError):
            make_event(waitlist=(_entry("alice"), _entry("alice", 1)))

    def test_rejects_principal_in_both_lists(self, make_event):
        """A principal is either an attendee or waitlisted, never both."""
        with pytest.raises(InvariantViolationError):
            make_event(attendees=(_attendee("alice"),), waitlist=(_entry("alice"),))

    def test_rejects_attendees_over_capacity(self, make_event):
        """Attendees never exceed capacity."""
        with pytest.raises(InvariantViolationError):
            make_event(
                capacity=1, attendees=(_attendee("alice"), _attendee("bob"))
            )

    def test_rejects_cancelled_attendee(self, make_event):
        """Cancelled registrations are removed, not kept with a status."""
        with pytest.raises(InvariantViolationError):
            make_event(attendees=(_attendee("alice", AttendeeStatus.CANCELLED),))

    def test_rejects_unordered_waitlist(self, make_event):
        """The waitlist is ordered by joined_at."""
        with pytest.raises(InvariantViolationError):
            make_event(waitlist=(_entry("alice", 5), _entry("bob", 1)))

    def test_unlimited_capacity_accepts_any_number(self, make_event):
        """An event without capacity never fills up."""
        event = make_event(
            capacity=None, attendees=tuple(_attendee(f"p{i}") for i in range(50))
        )
        assert event.has_room
        assert event.available_spots is None

    def test_check_invariants_compares_analytics(self, make_event):
        """check_invariants rejects analytics that disagree with the attendee list."""
        event = make_event(attendees=(_attendee("alice"),), analytics=Analytics(registrations=0))
        with pytest.raises(InvariantViolationError):
            event.check_invariants()

    def test_replace_keeps_original_untouched(self, make_event):
        """replace returns a new aggregate."""
        event = make_event()
        updated = event.replace(attendees=(_attendee("alice"),))
        assert event.attendees == ()
        assert updated.is_registered(PrincipalId("alice"))


class TestEventQueries:
    def test_waitlist_position_is_one_based(self, make_event):
        """waitlist_position counts from 1 in joined order."""
        event = make_event(waitlist=(_entry("alice", 1), _entry("bob", 2)))
        assert event.waitlist_position(PrincipalId("alice")) == 1
        assert event.waitlist_position(PrincipalId("bob")) == 2
        assert event.waitlist_position(PrincipalId("carol")) is None

    def test_is_full_and_available_spots(self, make_event):
        """available_spots counts down to zero as seats are taken."""
        event = make_event(capacity=2, attendees=(_attendee("alice"),))
        assert event.available_spots == 1
        assert not event.is_full
        full = event.replace(attendees=event.attendees + (_attendee("bob"),))
        assert full.available_spots == 0
        assert full.is_full

    def test_registration_open_requires_published_status(self, make_event):
        """Registration is open only for published events inside the window."""
        event = make_event(status=EventStatus.DRAFT)
        moment = event.registration_window.opens_at
        assert not event.is_registration_open(moment)
        assert event.replace(status=EventStatus.PUBLISHED).is_registration_open(moment)


class TestPrincipal:
    @pytest.mark.parametrize(
        "role,expected",
        [(Role.ADMIN, True), (Role.MODERATOR, True), (Role.COACH, False), (Role.MEMBER, False)],
    )
    def test_is_staff(self, make_principal, role, expected):
        """Admins and moderators are staff."""
        assert make_principal(role=role).is_staff is expected
