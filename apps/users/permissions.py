"""Role based permission classes shared by the API views."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_platform_admin(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    return bool(getattr(user, "is_superuser", False) or (hasattr(user, "is_admin") and user.is_admin()))


class IsPlatformAdmin(permissions.BasePermission):
    """Only platform administrators."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_platform_admin(request.user)


class IsOwnerOrAdmin(permissions.BasePermission):
    """Property owners and administrators may write, any authenticated user may read."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_platform_admin(user) or (hasattr(user, "is_owner") and user.is_owner())
