"""Registration state machine for a single Event aggregate.

The engine never touches a store. Each operation takes the aggregate in
hand and returns an outcome carrying the new aggregate, with analytics
recomputed and every invariant verified. A failing operation raises a
DomainError and leaves the input untouched.
"""

import bisect
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from events.domain import (
    Attendee,
    AttendeeStatus,
    Event,
    EventStatus,
    Feedback,
    Principal,
    PrincipalId,
    WaitlistEntry,
)
from events.domain.errors import (
    AccessDeniedError,
    AlreadyCheckedInError,
    AlreadyRegisteredError,
    AlreadyWaitlistedError,
    CheckInNotYetOpenError,
    EventClosedError,
    EventFullError,
    InvalidRatingError,
    NotAttendedError,
    NotRegisteredError,
)
from events.domain.models import RATING_MAX, RATING_MIN
from events.services.access_policy import AccessPolicy
from events.services.analytics import AnalyticsAggregator

# Check-in opens this long before the event starts.
CHECK_IN_LEAD_TIME = timedelta(minutes=30)


class RegistrationStatus(Enum):
    REGISTERED = "registered"
    WAITLISTED = "waitlisted"


class RemovedFrom(Enum):
    ATTENDEES = "attendees"
    WAITLIST = "waitlist"


@dataclass(frozen=True)
class RegistrationOutcome:
    status: RegistrationStatus
    event: Event
    waitlist_position: int | None = None


@dataclass(frozen=True)
class CancellationOutcome:
    removed_from: RemovedFrom
    event: Event
    promoted: PrincipalId | None = None


@dataclass(frozen=True)
class CheckInOutcome:
    checked_in_at: datetime
    event: Event


@dataclass(frozen=True)
class FeedbackOutcome:
    feedback: Feedback
    event: Event


class RegistrationEngine:
    """Registers, cancels, promotes, checks in and records feedback."""

    def __init__(
        self,
        policy: AccessPolicy | None = None,
        aggregator: AnalyticsAggregator | None = None,
    ) -> None:
        self._policy = policy or AccessPolicy()
        self._aggregator = aggregator or AnalyticsAggregator()

    def register(self, principal: Principal, event: Event, now: datetime) -> RegistrationOutcome:
        """Give the principal a seat, or a waitlist place when the event is full.

        Raises:
            AccessDeniedError: If the access policy refuses the principal.
            AlreadyRegisteredError: If the principal already holds a seat.
            AlreadyWaitlistedError: If the principal is already waiting.
            EventFullError: If there is no seat and the waitlist is disabled.
        """
        decision = self._policy.can_register(principal, event, now)
        if not decision.allowed:
            raise AccessDeniedError(decision.reason)
        if event.is_registered(principal.id):
            raise AlreadyRegisteredError(str(principal.id))
        if event.is_waitlisted(principal.id):
            raise AlreadyWaitlistedError(str(principal.id))

        if event.has_room:
            attendee = Attendee(principal_id=principal.id, registered_at=now)
            updated = self._commit(event.replace(attendees=event.attendees + (attendee,)))
            return RegistrationOutcome(status=RegistrationStatus.REGISTERED, event=updated)

        if not event.waitlist_enabled:
            raise EventFullError(str(event.id))

        entry = WaitlistEntry(principal_id=principal.id, joined_at=now)
        updated = self._commit(event.replace(waitlist=_enqueue(event.waitlist, entry)))
        return RegistrationOutcome(
            status=RegistrationStatus.WAITLISTED,
            event=updated,
            waitlist_position=updated.waitlist_position(principal.id),
        )

    def cancel(self, principal: Principal, event: Event, now: datetime) -> CancellationOutcome:
        """Remove the principal's seat or waitlist place.

        Freeing a seat promotes at most one waitlisted principal, the one
        who joined earliest; their registration time is ``now``.

        Raises:
            EventClosedError: If the event is completed or cancelled.
            NotRegisteredError: If the principal holds neither a seat nor a place.
        """
        if event.status in (EventStatus.COMPLETED, EventStatus.CANCELLED):
            raise EventClosedError(str(event.id), event.status.value)

        if event.is_registered(principal.id):
            attendees = tuple(a for a in event.attendees if a.principal_id != principal.id)
            waitlist = event.waitlist
            promoted = None
            if waitlist and (event.capacity is None or event.capacity.has_room(len(attendees))):
                # The waitlist is kept sorted by joined_at, insertion order on ties.
                head, waitlist = waitlist[0], waitlist[1:]
                attendees += (Attendee(principal_id=head.principal_id, registered_at=now),)
                promoted = head.principal_id
            updated = self._commit(event.replace(attendees=attendees, waitlist=waitlist))
            return CancellationOutcome(
                removed_from=RemovedFrom.ATTENDEES, event=updated, promoted=promoted
            )

        if event.is_waitlisted(principal.id):
            waitlist = tuple(w for w in event.waitlist if w.principal_id != principal.id)
            updated = self._commit(event.replace(waitlist=waitlist))
            return CancellationOutcome(removed_from=RemovedFrom.WAITLIST, event=updated)

        raise NotRegisteredError(str(principal.id))

    def check_in(self, principal: Principal, event: Event, now: datetime) -> CheckInOutcome:
        """Mark the principal as attended.

        Check-in is open from CHECK_IN_LEAD_TIME before the start until the
        end of the event, both bounds inclusive.

        Raises:
            EventClosedError: If the event was cancelled.
            NotRegisteredError: If the principal holds no seat.
            AlreadyCheckedInError: If the principal already checked in.
            CheckInNotYetOpenError: If now is outside the check-in window.
        """
        if event.status is EventStatus.CANCELLED:
            raise EventClosedError(str(event.id), event.status.value)
        attendee = event.find_attendee(principal.id)
        if attendee is None:
            raise NotRegisteredError(str(principal.id))
        if attendee.status is AttendeeStatus.ATTENDED:
            raise AlreadyCheckedInError(str(principal.id))

        opens_at = event.schedule.starts_at - CHECK_IN_LEAD_TIME
        closes_at = event.schedule.ends_at
        if now < opens_at or now > closes_at:
            raise CheckInNotYetOpenError(opens_at, closes_at, closed=now > closes_at)

        checked_in = replace(attendee, status=AttendeeStatus.ATTENDED, checked_in_at=now)
        updated = self._commit(event.with_attendee(checked_in))
        return CheckInOutcome(checked_in_at=now, event=updated)

    def submit_feedback(
        self, principal: Principal, event: Event, rating: int, comment: str = ""
    ) -> FeedbackOutcome:
        """Record or replace the principal's rating and comment.

        Raises:
            EventClosedError: If the event was cancelled.
            NotAttendedError: If the principal has not checked in.
            InvalidRatingError: If rating is not an integer from 1 to 5.
        """
        if event.status is EventStatus.CANCELLED:
            raise EventClosedError(str(event.id), event.status.value)
        attendee = event.find_attendee(principal.id)
        if attendee is None or attendee.status is not AttendeeStatus.ATTENDED:
            raise NotAttendedError(str(principal.id))
        if (
            isinstance(rating, bool)
            or not isinstance(rating, int)
            or not RATING_MIN <= rating <= RATING_MAX
        ):
            raise InvalidRatingError(rating)

        feedback = Feedback(rating=rating, comment=comment)
        rated = replace(attendee, feedback=feedback)
        updated = self._commit(event.with_attendee(rated))
        return FeedbackOutcome(feedback=feedback, event=updated)

    def _commit(self, event: Event) -> Event:
        recomputed = self._aggregator.recompute(event)
        recomputed.check_invariants()
        return recomputed


def _enqueue(waitlist: tuple[WaitlistEntry, ...], entry: WaitlistEntry) -> tuple[WaitlistEntry, ...]:
    entries = list(waitlist)
    bisect.insort_right(entries, entry, key=lambda w: w.joined_at)
    return tuple(entries)
