from rest_framework.permissions import BasePermission

from events.domain.value_objects import ORGANIZER_ROLES


class IsOrganizer(BasePermission):
    """Admins, moderators and coaches may create events and change their status."""

    message = "Only organizers may manage events."

    def has_permission(self, request, view):
        return request.user.principal.role in ORGANIZER_ROLES


class IsStaff(BasePermission):
    message = "Only admins and moderators may delete events."

    def has_permission(self, request, view):
        return request.user.principal.is_staff
