"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
One Event row plus its attendee and waitlist rows form one aggregate; the
row's ``version`` guards every write of the aggregate.
"""

import uuid

from django.db import models


class Event(models.Model):
    """Persistence model for events."""

    class Track(models.TextChoices):
        ALL = "all"
        ACADEMY = "academy"
        COACHLAB = "coachlab"
        LEADERSHIP = "leadership"
        BUILDER = "builder"

    class Status(models.TextChoices):
        DRAFT = "draft"
        PUBLISHED = "published"
        LIVE = "live"
        COMPLETED = "completed"
        CANCELLED = "cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=2000)
    category = models.CharField(max_length=100)
    location = models.CharField(max_length=255, blank=True)
    track = models.CharField(max_length=20, choices=Track.choices, default=Track.ALL)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    capacity = models.PositiveIntegerField(blank=True, null=True)
    waitlist_enabled = models.BooleanField(default=True)
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField()
    registration_opens_at = models.DateTimeField()
    registration_closes_at = models.DateTimeField()
    published_at = models.DateTimeField(blank=True, null=True)
    registrations = models.PositiveIntegerField(default=0)
    attendance_rate = models.FloatField(default=0.0)
    average_rating = models.FloatField(default=0.0)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["starts_at"]
        indexes = [
            models.Index(fields=["status", "starts_at"]),
            models.Index(fields=["category", "track"]),
        ]

    def __str__(self) -> str:
        return self.title


class Attendee(models.Model):
    """Persistence model for a registered principal."""

    class Status(models.TextChoices):
        REGISTERED = "registered"
        ATTENDED = "attended"
        NO_SHOW = "no-show"
        CANCELLED = "cancelled"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="attendees")
    principal_id = models.CharField(max_length=64)
    position = models.PositiveIntegerField()
    registered_at = models.DateTimeField()
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.REGISTERED
    )
    checked_in_at = models.DateTimeField(blank=True, null=True)
    rating = models.PositiveSmallIntegerField(blank=True, null=True)
    comment = models.TextField(blank=True)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "principal_id"], name="unique_attendee_per_event"
            ),
        ]
        indexes = [
            models.Index(fields=["principal_id"]),
        ]

    def __str__(self) -> str:
        return f"{self.principal_id} @ {self.event_id}"


class WaitlistEntry(models.Model):
    """Persistence model for a waitlisted principal."""

    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="waitlist_entries"
    )
    principal_id = models.CharField(max_length=64)
    position = models.PositiveIntegerField()
    joined_at = models.DateTimeField()

    class Meta:
        ordering = ["position"]
        verbose_name_plural = "waitlist entries"
        constraints = [
            models.UniqueConstraint(
                fields=["event", "principal_id"], name="unique_waitlist_entry_per_event"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.principal_id} waiting for {self.event_id}"
