"""Unit tests for AccessPolicy.

Run with: pytest tests/test_access_policy.py -v
"""

from datetime import timedelta

import pytest

from events.domain import EventStatus, Role, Track
from events.domain.errors import DenyReason
from events.services import AccessPolicy

from conftest import EVENT_START, REGISTRATION_OPEN


class TestCanRegister:
    """Tests for AccessPolicy.can_register."""

    @pytest.mark.parametrize(
        "track,role,subscription,allowed",
        [
            (Track.ALL, Role.MEMBER, None, True),
            (Track.ACADEMY, Role.MEMBER, "academy", True),
            (Track.ACADEMY, Role.MEMBER, "coachlab", False),
            (Track.ACADEMY, Role.MEMBER, None, False),
            (Track.LEADERSHIP, Role.COACH, None, False),
            (Track.LEADERSHIP, Role.ADMIN, None, True),
            (Track.BUILDER, Role.MODERATOR, "academy", True),
        ],
    )
    def test_track_access(self, make_event, make_principal, track, role, subscription, allowed):
        """Track ALL is open to everyone; other tracks need the subscription or a staff role."""
        decision = AccessPolicy().can_register(
            make_principal(role=role, subscription=subscription),
            make_event(track=track),
            REGISTRATION_OPEN,
        )
        assert decision.allowed is allowed
        if not allowed:
            assert decision.reason is DenyReason.TRACK_RESTRICTED

    @pytest.mark.parametrize(
        "status", [EventStatus.DRAFT, EventStatus.LIVE, EventStatus.COMPLETED, EventStatus.CANCELLED]
    )
    def test_requires_published_status(self, make_event, make_principal, status):
        """Only published events accept registrations."""
        decision = AccessPolicy().can_register(
            make_principal(), make_event(status=status), REGISTRATION_OPEN
        )
        assert decision.reason is DenyReason.EVENT_NOT_PUBLISHED

    @pytest.mark.parametrize(
        "offset,allowed",
        [
            (timedelta(days=-7, seconds=-1), False),
            (timedelta(days=-7), True),
            (timedelta(0), True),
            (timedelta(seconds=1), False),
        ],
    )
    def test_registration_window_is_inclusive(self, make_event, make_principal, offset, allowed):
        """Registration is allowed from opens_at through closes_at inclusive."""
        decision = AccessPolicy().can_register(
            make_principal(), make_event(), EVENT_START + offset
        )
        assert decision.allowed is allowed
        if not allowed:
            assert decision.reason is DenyReason.OUTSIDE_REGISTRATION_WINDOW

    def test_status_checked_before_window_and_track(self, make_event, make_principal):
        """A draft event is reported as not published even outside the window."""
        decision = AccessPolicy().can_register(
            make_principal(),
            make_event(status=EventStatus.DRAFT, track=Track.ACADEMY),
            EVENT_START + timedelta(days=1),
        )
        assert decision.reason is DenyReason.EVENT_NOT_PUBLISHED


class TestCanView:
    def test_restricted_track_hidden_from_other_subscribers(self, make_event, make_principal):
        """A principal without the track subscription only gets the summary."""
        event = make_event(track=Track.COACHLAB)
        assert not AccessPolicy().can_view(make_principal(subscription="academy"), event)
        assert AccessPolicy().can_view(make_principal(subscription="coachlab"), event)

    def test_view_ignores_status_and_window(self, make_event, make_principal):
        """Viewing depends only on track access."""
        event = make_event(status=EventStatus.COMPLETED)
        assert AccessPolicy().can_view(make_principal(), event)
