"""Serializers for transforming domain models to API responses and parsing input."""

from rest_framework import serializers

from events.domain import EventStatus, Track


class AnalyticsSerializer(serializers.Serializer):
    registrations = serializers.IntegerField()
    attendance_rate = serializers.FloatField()
    average_rating = serializers.FloatField()


class EventSummarySerializer(serializers.Serializer):
    """Limited view shown to principals without access to the event's track."""

    id = serializers.CharField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    category = serializers.CharField()
    track = serializers.CharField(source="track.value")
    starts_at = serializers.DateTimeField(source="schedule.starts_at")
    ends_at = serializers.DateTimeField(source="schedule.ends_at")


class EventSerializer(EventSummarySerializer):
    """Serializer for Event domain model."""

    location = serializers.CharField()
    status = serializers.CharField(source="status.value")
    capacity = serializers.SerializerMethodField()
    waitlist_enabled = serializers.BooleanField()
    registration_opens_at = serializers.DateTimeField(source="registration_window.opens_at")
    registration_closes_at = serializers.DateTimeField(source="registration_window.closes_at")
    attendee_count = serializers.IntegerField()
    waitlist_count = serializers.IntegerField()
    available_spots = serializers.IntegerField(allow_null=True)
    is_full = serializers.BooleanField()
    published_at = serializers.DateTimeField(allow_null=True)
    analytics = AnalyticsSerializer()
    version = serializers.IntegerField()

    def get_capacity(self, event) -> int | None:
        return event.capacity.value if event.capacity is not None else None


class EventPageSerializer(serializers.Serializer):
    events = EventSerializer(many=True, source="items")
    page = serializers.IntegerField()
    page_size = serializers.IntegerField()
    total = serializers.IntegerField()
    has_next = serializers.BooleanField()


class RegistrationOutcomeSerializer(serializers.Serializer):
    status = serializers.CharField(source="status.value")
    waitlist_position = serializers.IntegerField(allow_null=True)
    event = EventSerializer()


class CancellationOutcomeSerializer(serializers.Serializer):
    status = serializers.SerializerMethodField()
    removed_from = serializers.CharField(source="removed_from.value")
    promoted = serializers.SerializerMethodField()
    event = EventSerializer()

    def get_status(self, outcome) -> str:
        return "cancelled"

    def get_promoted(self, outcome) -> str | None:
        return str(outcome.promoted) if outcome.promoted is not None else None


class CheckInOutcomeSerializer(serializers.Serializer):
    checked_in_at = serializers.DateTimeField()
    event = EventSerializer()


class FeedbackOutcomeSerializer(serializers.Serializer):
    rating = serializers.IntegerField(source="feedback.rating")
    comment = serializers.CharField(source="feedback.comment")
    event = EventSerializer()


class EventListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[s.value for s in EventStatus], default=EventStatus.PUBLISHED.value
    )
    track = serializers.ChoiceField(choices=[t.value for t in Track], required=False)
    category = serializers.CharField(max_length=100, required=False)
    upcoming = serializers.BooleanField(default=True)
    page = serializers.IntegerField(min_value=1, default=1)
    page_size = serializers.IntegerField(min_value=1, required=False)


class EventCreateSerializer(serializers.Serializer):
    title = serializers.CharField(min_length=3, max_length=200)
    description = serializers.CharField(min_length=10, max_length=2000)
    category = serializers.CharField(max_length=100)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    track = serializers.ChoiceField(choices=[t.value for t in Track], default=Track.ALL.value)
    starts_at = serializers.DateTimeField()
    ends_at = serializers.DateTimeField()
    capacity = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    waitlist_enabled = serializers.BooleanField(default=True)
    registration_deadline = serializers.DateTimeField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs["ends_at"] <= attrs["starts_at"]:
            raise serializers.ValidationError({"ends_at": "End date must be after start date"})
        deadline = attrs.get("registration_deadline")
        if deadline is not None and deadline > attrs["starts_at"]:
            raise serializers.ValidationError(
                {"registration_deadline": "Registration deadline cannot be after the event starts"}
            )
        return attrs


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[s.value for s in EventStatus])


class FeedbackSerializer(serializers.Serializer):
    # Bounds are enforced by the registration engine.
    rating = serializers.IntegerField()
    comment = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
