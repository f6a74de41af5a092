from events.services.access_policy import AccessDecision, AccessPolicy
from events.services.analytics import AnalyticsAggregator
from events.services.clock import Clock, SystemClock
from events.services.event_service import EventService, parse_event_id
from events.services.lifecycle import EventLifecycleService
from events.services.notifier import Notifier, SignalNotifier
from events.services.registration_engine import (
    CHECK_IN_LEAD_TIME,
    CancellationOutcome,
    CheckInOutcome,
    FeedbackOutcome,
    RegistrationEngine,
    RegistrationOutcome,
    RegistrationStatus,
    RemovedFrom,
)
from events.services.registration_service import RegistrationService

__all__ = [
    "AccessDecision",
    "AccessPolicy",
    "AnalyticsAggregator",
    "Clock",
    "SystemClock",
    "EventService",
    "EventLifecycleService",
    "parse_event_id",
    "Notifier",
    "SignalNotifier",
    "CHECK_IN_LEAD_TIME",
    "RegistrationEngine",
    "RegistrationService",
    "RegistrationOutcome",
    "RegistrationStatus",
    "CancellationOutcome",
    "CheckInOutcome",
    "FeedbackOutcome",
    "RemovedFrom",
]
