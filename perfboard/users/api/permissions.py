"""Role-gated permission classes shared by the perfboard APIs."""

from collections.abc import Iterable

from rest_framework.permissions import SAFE_METHODS
from rest_framework.permissions import BasePermission

from perfboard.users.roles import ORGANISATION_WIDE_ROLES


def _user_has_role(user, roles: Iterable[str]) -> bool:
    return getattr(user, "role", None) in set(roles)


def is_organisation_wide(user) -> bool:
    """Superusers and admin/hr roles see the whole business."""
    return bool(getattr(user, "is_superuser", False)) or _user_has_role(
        user, ORGANISATION_WIDE_ROLES
    )


class _RolePermission(BasePermission):
    """Base helper to gate access by role values."""

    allowed_roles: tuple[str, ...] = ()
    allow_superuser: bool = True

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if not (user and getattr(user, "is_authenticated", False)):
            return False
        if self.allow_superuser and getattr(user, "is_superuser", False):
            return True
        return _user_has_role(user, self.allowed_roles)


class IsAdminOrHR(_RolePermission):
    allowed_roles = tuple(ORGANISATION_WIDE_ROLES)


class IsAdminOrHRCanWrite(BasePermission):
    """Any authenticated user may read; only admin/hr may write."""

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not (user and getattr(user, "is_authenticated", False)):
            return False
        if request.method in SAFE_METHODS:
            return True
        return is_organisation_wide(user)
