"""Access rules for viewing and registering for events.

Pure functions of their inputs: no I/O, no clock reads.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Self

from events.domain import Event, EventStatus, Principal, Track
from events.domain.errors import DenyReason


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a policy check; reason is set only when denied."""

    reason: DenyReason | None = None

    @property
    def allowed(self) -> bool:
        return self.reason is None

    @classmethod
    def allow(cls) -> Self:
        return cls()

    @classmethod
    def deny(cls, reason: DenyReason) -> Self:
        return cls(reason=reason)


class AccessPolicy:
    """Decides whether a principal may register for or fully view an event."""

    def can_register(self, principal: Principal, event: Event, now: datetime) -> AccessDecision:
        if event.status is not EventStatus.PUBLISHED:
            return AccessDecision.deny(DenyReason.EVENT_NOT_PUBLISHED)
        if not event.registration_window.contains(now):
            return AccessDecision.deny(DenyReason.OUTSIDE_REGISTRATION_WINDOW)
        if not self.has_track_access(principal, event):
            return AccessDecision.deny(DenyReason.TRACK_RESTRICTED)
        return AccessDecision.allow()

    def can_view(self, principal: Principal, event: Event) -> bool:
        """Whether the principal sees full event details rather than a summary."""
        return self.has_track_access(principal, event)

    def has_track_access(self, principal: Principal, event: Event) -> bool:
        return (
            event.track is Track.ALL
            or principal.subscription == event.track.value
            or principal.is_staff
        )
