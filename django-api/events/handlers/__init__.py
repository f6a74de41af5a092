from events.handlers.views import (
    CancelRegistrationView,
    CategoryEventListView,
    CheckInView,
    EventDetailView,
    EventListView,
    EventStatusView,
    FeedbackView,
    RegisteredEventListView,
    RegisterView,
)

__all__ = [
    "EventListView",
    "EventDetailView",
    "EventStatusView",
    "CategoryEventListView",
    "RegisteredEventListView",
    "RegisterView",
    "CancelRegistrationView",
    "CheckInView",
    "FeedbackView",
]
