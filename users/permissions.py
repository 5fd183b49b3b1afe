from rest_framework import permissions


class IsHR(permissions.BasePermission):
    """
    Allows access only to HR users or superusers.
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_hr())


class IsOwnerOrHR(permissions.BasePermission):
    """
    Object-level permission: the row's user may act on it, HR may act on any.
    """
    def has_object_permission(self, request, view, obj):
        return bool(
            request.user
            and request.user.is_authenticated
            and (request.user.is_hr() or getattr(obj, "user_id", None) == request.user.pk)
        )
