from django import forms
from django.contrib import admin
from django.db.models import F

from events.domain import Capacity, Schedule, TimeWindow
from events.models import Attendee, Event, WaitlistEntry


class ReadOnlyInline(admin.TabularInline):
    """Attendee state changes only through the registration service."""

    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class AttendeeInline(ReadOnlyInline):
    model = Attendee
    fields = ["position", "principal_id", "status", "registered_at", "checked_in_at", "rating"]


class WaitlistEntryInline(ReadOnlyInline):
    model = WaitlistEntry
    fields = ["position", "principal_id", "joined_at"]


class EventAdminForm(forms.ModelForm):
    """Rejects edits the Event aggregate could not be rebuilt from."""

    class Meta:
        model = Event
        fields = "__all__"

    def clean(self):
        cleaned = super().clean()
        starts_at, ends_at = cleaned.get("starts_at"), cleaned.get("ends_at")
        if starts_at and ends_at:
            try:
                Schedule(starts_at=starts_at, ends_at=ends_at)
            except ValueError as exc:
                self.add_error("ends_at", str(exc))

        opens_at = cleaned.get("registration_opens_at")
        closes_at = cleaned.get("registration_closes_at")
        if opens_at and closes_at:
            try:
                TimeWindow(opens_at=opens_at, closes_at=closes_at)
            except ValueError as exc:
                self.add_error("registration_closes_at", str(exc))

        capacity = cleaned.get("capacity")
        if capacity is not None:
            try:
                Capacity(capacity)
            except ValueError as exc:
                self.add_error("capacity", str(exc))
            else:
                attendees = 0 if self.instance._state.adding else self.instance.attendees.count()
                if capacity < attendees:
                    self.add_error(
                        "capacity",
                        f"Capacity cannot be lower than the {attendees} registered attendees",
                    )
        return cleaned


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    form = EventAdminForm
    list_display = ["title", "category", "track", "status", "starts_at", "registrations", "capacity"]
    list_filter = ["status", "track", "category"]
    search_fields = ["title", "location"]
    readonly_fields = [
        "status",
        "registrations",
        "attendance_rate",
        "average_rating",
        "version",
        "published_at",
    ]
    inlines = [AttendeeInline, WaitlistEntryInline]

    def save_model(self, request, obj, form, change):
        if change:
            obj.version = F("version") + 1
        super().save_model(request, obj, form, change)
        obj.refresh_from_db(fields=["version"])
