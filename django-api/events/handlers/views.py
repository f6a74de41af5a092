"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain error mapping to the exception handler
- Never contain business logic
- Never expose internal error details
"""

from django.core.cache import cache
from django.utils import timezone
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events.cache import event_detail_key, event_list_key
from events.conf import get_event_store, get_notifier, registration_setting
from events.domain import Event, EventPage, EventStatus, Principal, Track
from events.handlers.permissions import IsOrganizer, IsStaff
from events.handlers.serializers import (
    CancellationOutcomeSerializer,
    CheckInOutcomeSerializer,
    EventCreateSerializer,
    EventListQuerySerializer,
    EventPageSerializer,
    EventSerializer,
    EventSummarySerializer,
    FeedbackOutcomeSerializer,
    FeedbackSerializer,
    RegistrationOutcomeSerializer,
    StatusChangeSerializer,
)
from events.services import (
    AccessPolicy,
    EventLifecycleService,
    EventService,
    RegistrationService,
)

DEFAULT_CATEGORY_LIMIT = 10


def _principal(request: Request) -> Principal:
    return request.user.principal


def _event_service() -> EventService:
    return EventService(store=get_event_store())


def _lifecycle_service() -> EventLifecycleService:
    return EventLifecycleService(store=get_event_store())


def _registration_service() -> RegistrationService:
    return RegistrationService(store=get_event_store(), notifier=get_notifier())


def _list_cache_timeout(page: EventPage, upcoming: bool) -> int:
    """Upcoming listings expire no later than their earliest event starts."""
    timeout = registration_setting("CACHE_TIMEOUT_SECONDS")
    if not upcoming:
        return timeout
    timeout = min(timeout, registration_setting("UPCOMING_CACHE_TIMEOUT_SECONDS"))
    if page.items:
        earliest = min(event.schedule.starts_at for event in page.items)
        timeout = min(timeout, (earliest - timezone.now()).total_seconds())
    return max(1, int(timeout))


def _viewer_registration(event: Event, principal: Principal) -> dict | None:
    attendee = event.find_attendee(principal.id)
    if attendee is not None:
        return {
            "status": attendee.status.value,
            "registered_at": attendee.registered_at,
            "checked_in_at": attendee.checked_in_at,
        }
    position = event.waitlist_position(principal.id)
    if position is not None:
        return {"status": "waitlisted", "waitlist_position": position}
    return None


class EventListView(APIView):
    """Handler for GET/POST /api/events"""

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated(), IsOrganizer()]
        return super().get_permissions()

    def get(self, request: Request) -> Response:
        query = EventListQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        params = query.validated_data

        key = event_list_key(params)
        payload = cache.get(key)
        if payload is None:
            page = _event_service().list_events(
                status=EventStatus(params["status"]),
                track=Track(params["track"]) if "track" in params else None,
                category=params.get("category"),
                upcoming=params["upcoming"],
                page=params["page"],
                page_size=params.get("page_size"),
            )
            payload = EventPageSerializer(page).data
            cache.set(key, payload, _list_cache_timeout(page, params["upcoming"]))
        return Response(payload)

    def post(self, request: Request) -> Response:
        serializer = EventCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        event = _lifecycle_service().create_event(
            title=data["title"],
            description=data["description"],
            category=data["category"],
            location=data["location"],
            track=Track(data["track"]),
            starts_at=data["starts_at"],
            ends_at=data["ends_at"],
            capacity=data["capacity"],
            waitlist_enabled=data["waitlist_enabled"],
            registration_deadline=data["registration_deadline"],
        )
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(APIView):
    """Handler for GET/DELETE /api/events/{event_id}"""

    def get_permissions(self):
        if self.request.method == "DELETE":
            return [IsAuthenticated(), IsStaff()]
        return super().get_permissions()

    def get(self, request: Request, event_id: str) -> Response:
        key = event_detail_key(event_id)
        event = cache.get(key)
        if event is None:
            event = _event_service().get_event(event_id)
            cache.set(key, event, registration_setting("CACHE_TIMEOUT_SECONDS"))

        principal = _principal(request)
        if not AccessPolicy().can_view(principal, event):
            data = dict(EventSummarySerializer(event).data)
            data["requires_subscription"] = True
            return Response(data)

        data = dict(EventSerializer(event).data)
        data["requires_subscription"] = False
        data["registration"] = _viewer_registration(event, principal)
        return Response(data)

    def delete(self, request: Request, event_id: str) -> Response:
        _lifecycle_service().delete_event(event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EventStatusView(APIView):
    """Handler for POST /api/events/{event_id}/status"""

    permission_classes = [IsAuthenticated, IsOrganizer]

    def post(self, request: Request, event_id: str) -> Response:
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = _lifecycle_service().change_status(
            event_id, EventStatus(serializer.validated_data["status"])
        )
        return Response(EventSerializer(event).data)


class CategoryEventListView(APIView):
    """Handler for GET /api/events/category/{category}"""

    def get(self, request: Request, category: str) -> Response:
        try:
            limit = int(request.query_params.get("limit", DEFAULT_CATEGORY_LIMIT))
        except ValueError:
            limit = DEFAULT_CATEGORY_LIMIT
        events = _event_service().list_by_category(category, limit=limit)
        return Response(
            {
                "events": EventSerializer(events, many=True).data,
                "category": category,
                "total": len(events),
            }
        )


class RegisteredEventListView(APIView):
    """Handler for GET /api/events/my/registered"""

    def get(self, request: Request) -> Response:
        principal = _principal(request)
        upcoming = request.query_params.get("upcoming", "true").lower() != "false"
        events = _event_service().registered_events(principal, upcoming=upcoming)
        items = []
        for event in events:
            data = dict(EventSerializer(event).data)
            data["registration"] = _viewer_registration(event, principal)
            items.append(data)
        return Response({"events": items, "total": len(items)})


class RegisterView(APIView):
    """Handler for POST /api/events/{event_id}/register"""

    def post(self, request: Request, event_id: str) -> Response:
        outcome = _registration_service().register(_principal(request), event_id)
        return Response(RegistrationOutcomeSerializer(outcome).data)


class CancelRegistrationView(APIView):
    """Handler for POST /api/events/{event_id}/cancel"""

    def post(self, request: Request, event_id: str) -> Response:
        outcome = _registration_service().cancel(_principal(request), event_id)
        return Response(CancellationOutcomeSerializer(outcome).data)


class CheckInView(APIView):
    """Handler for POST /api/events/{event_id}/checkin"""

    def post(self, request: Request, event_id: str) -> Response:
        outcome = _registration_service().check_in(_principal(request), event_id)
        return Response(CheckInOutcomeSerializer(outcome).data)


class FeedbackView(APIView):
    """Handler for POST /api/events/{event_id}/feedback"""

    def post(self, request: Request, event_id: str) -> Response:
        serializer = FeedbackSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        outcome = _registration_service().submit_feedback(
            _principal(request),
            event_id,
            rating=serializer.validated_data["rating"],
            comment=serializer.validated_data["comment"],
        )
        return Response(FeedbackOutcomeSerializer(outcome).data)
