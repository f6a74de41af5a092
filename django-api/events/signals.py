"""Django signal receivers for cache invalidation.

Aggregate writes go through queryset updates and bulk inserts, which do not
send post_save, so the store announces them with ``event_changed``. Edits
made through the ORM directly (admin) are caught by post_save/post_delete.
"""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from events.cache import invalidate_event
from events.dispatch import event_changed
from events.models import Attendee, Event, WaitlistEntry


@receiver(event_changed)
def invalidate_changed_event(sender, event_id, **kwargs):
    """Invalidate caches after an aggregate write commits."""
    invalidate_event(event_id)


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate caches when an event is saved or deleted."""
    invalidate_event(str(instance.pk))


@receiver([post_save, post_delete], sender=Attendee)
def invalidate_attendee_cache(sender, instance, **kwargs):
    """Invalidate caches when an attendee is saved or deleted."""
    invalidate_event(str(instance.event_id))


@receiver([post_save, post_delete], sender=WaitlistEntry)
def invalidate_waitlist_cache(sender, instance, **kwargs):
    """Invalidate caches when a waitlist entry is saved or deleted."""
    invalidate_event(str(instance.event_id))
