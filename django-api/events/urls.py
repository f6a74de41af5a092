from django.urls import path

from events.handlers import (
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

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/my/registered", RegisteredEventListView.as_view(), name="my-registered-events"),
    path(
        "events/category/<str:category>",
        CategoryEventListView.as_view(),
        name="category-event-list",
    ),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("events/<str:event_id>/status", EventStatusView.as_view(), name="event-status"),
    path("events/<str:event_id>/register", RegisterView.as_view(), name="event-register"),
    path("events/<str:event_id>/cancel", CancelRegistrationView.as_view(), name="event-cancel"),
    path("events/<str:event_id>/checkin", CheckInView.as_view(), name="event-checkin"),
    path("events/<str:event_id>/feedback", FeedbackView.as_view(), name="event-feedback"),
]
