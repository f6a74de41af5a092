"""Signals sent by the registration subsystem.

Kept free of ORM imports so services and stores can send them without
depending on the persistence layer.
"""

from django.dispatch import Signal

# Sent after an aggregate write commits. Arguments: event_id.
event_changed = Signal()

# Sent when a cancellation promotes a waitlisted principal.
# Arguments: event_id, principal_id.
waitlist_promoted = Signal()
