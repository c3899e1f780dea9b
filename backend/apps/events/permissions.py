"""
Custom permissions for Events app.
"""

from rest_framework import permissions


class IsEventHostOrReadOnly(permissions.BasePermission):
    """
    Permission class that allows:
    - Read access to all users
    - Lifecycle actions only to the event host
    """

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj.host_id == request.user.pk
