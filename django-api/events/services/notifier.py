"""Notification of principals affected by registration changes."""

from abc import ABC, abstractmethod

import structlog

from events.dispatch import waitlist_promoted
from events.domain import Event, PrincipalId

logger = structlog.get_logger(__name__)


class Notifier(ABC):
    """Fire-and-forget notifications. Implementations may fail; callers never roll back."""

    @abstractmethod
    def waitlist_promoted(self, event: Event, principal_id: PrincipalId) -> None:
        """Tell a principal they moved from the waitlist to the attendee list."""
        ...


class SignalNotifier(Notifier):
    """Publishes promotions as the ``waitlist_promoted`` Django signal."""

    def waitlist_promoted(self, event: Event, principal_id: PrincipalId) -> None:
        responses = waitlist_promoted.send_robust(
            sender=self.__class__,
            event_id=str(event.id),
            principal_id=str(principal_id),
        )
        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.warning(
                    "waitlist_promotion_receiver_failed",
                    event_id=str(event.id),
                    principal_id=str(principal_id),
                    receiver=getattr(receiver, "__qualname__", repr(receiver)),
                    error=str(response),
                )
