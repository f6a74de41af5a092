"""Registration service - load, mutate and persist one event aggregate.

Services:
- Depend only on interfaces (stores, notifier, clock)
- Delegate every state change to the RegistrationEngine
- Persist with the version read at load time, retrying on conflict
- Return outcomes or raise domain errors
"""

import time
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import TypeVar

import structlog

from events.conf import registration_setting
from events.domain import Event, Principal
from events.domain.errors import EventNotFoundError, VersionConflictError
from events.services.clock import Clock, SystemClock
from events.services.event_service import parse_event_id
from events.services.notifier import Notifier
from events.services.registration_engine import (
    CancellationOutcome,
    CheckInOutcome,
    FeedbackOutcome,
    RegistrationEngine,
    RegistrationOutcome,
)
from events.stores.interfaces import EventStore

logger = structlog.get_logger(__name__)

Outcome = TypeVar(
    "Outcome", RegistrationOutcome, CancellationOutcome, CheckInOutcome, FeedbackOutcome
)


class RegistrationService:
    """Entry point for register, cancel, check-in and feedback."""

    def __init__(
        self,
        store: EventStore,
        engine: RegistrationEngine | None = None,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._store = store
        self._engine = engine or RegistrationEngine()
        self._notifier = notifier
        self._clock = clock or SystemClock()
        self._max_attempts = max_attempts or registration_setting("MAX_ATTEMPTS")
        self._backoff_seconds = (
            backoff_seconds
            if backoff_seconds is not None
            else registration_setting("RETRY_BACKOFF_SECONDS")
        )
        self._sleep = sleep

    def register(
        self, principal: Principal, event_id: str, now: datetime | None = None
    ) -> RegistrationOutcome:
        now = now or self._clock.now()
        outcome = self._mutate(
            event_id,
            "register",
            lambda event: self._engine.register(principal, event, now),
        )
        logger.info(
            "registration_recorded",
            event_id=event_id,
            principal_id=str(principal.id),
            outcome=outcome.status.value,
        )
        return outcome

    def cancel(
        self, principal: Principal, event_id: str, now: datetime | None = None
    ) -> CancellationOutcome:
        now = now or self._clock.now()
        outcome = self._mutate(
            event_id,
            "cancel",
            lambda event: self._engine.cancel(principal, event, now),
        )
        logger.info(
            "registration_cancelled",
            event_id=event_id,
            principal_id=str(principal.id),
            removed_from=outcome.removed_from.value,
            promoted=str(outcome.promoted) if outcome.promoted else None,
        )
        if outcome.promoted is not None:
            self._notify_promotion(outcome.event, outcome)
        return outcome

    def check_in(
        self, principal: Principal, event_id: str, now: datetime | None = None
    ) -> CheckInOutcome:
        now = now or self._clock.now()
        outcome = self._mutate(
            event_id,
            "check_in",
            lambda event: self._engine.check_in(principal, event, now),
        )
        logger.info("attendee_checked_in", event_id=event_id, principal_id=str(principal.id))
        return outcome

    def submit_feedback(
        self, principal: Principal, event_id: str, rating: int, comment: str = ""
    ) -> FeedbackOutcome:
        outcome = self._mutate(
            event_id,
            "submit_feedback",
            lambda event: self._engine.submit_feedback(principal, event, rating, comment),
        )
        logger.info(
            "feedback_recorded",
            event_id=event_id,
            principal_id=str(principal.id),
            rating=outcome.feedback.rating,
        )
        return outcome

    def _mutate(self, event_id: str, operation: str, apply: Callable[[Event], Outcome]) -> Outcome:
        """Run one load-mutate-persist cycle, repeating it on version conflicts.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            VersionConflictError: If every attempt lost a concurrent write.
        """
        parsed_id = parse_event_id(event_id)
        attempt = 1
        while True:
            event = self._store.get_event(parsed_id)
            if event is None:
                raise EventNotFoundError(event_id)
            outcome = apply(event)
            try:
                saved = self._store.save_event(outcome.event, expected_version=event.version)
            except VersionConflictError:
                if attempt >= self._max_attempts:
                    logger.warning(
                        "registration_conflict_exhausted",
                        event_id=event_id,
                        operation=operation,
                        attempts=attempt,
                    )
                    raise
                delay = self._backoff_seconds * 2 ** (attempt - 1)
                logger.warning(
                    "registration_conflict_retry",
                    event_id=event_id,
                    operation=operation,
                    attempt=attempt,
                    delay=delay,
                )
                self._sleep(delay)
                attempt += 1
                continue
            return replace(outcome, event=saved)

    def _notify_promotion(self, event: Event, outcome: CancellationOutcome) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier.waitlist_promoted(event, outcome.promoted)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "waitlist_promotion_notify_failed",
                event_id=str(event.id),
                principal_id=str(outcome.promoted),
                error=str(exc),
            )
