from rest_framework.permissions import BasePermission

from perfboard.org.accessors import load_tree
from perfboard.users.api.permissions import is_organisation_wide
from perfboard.users.roles import Role


def can_allocate_for(user, department_id) -> bool:
    """Admin/hr, or a head manager whose home department is ``department_id``
    or one of its ancestors."""
    if not (user and getattr(user, "is_authenticated", False)):
        return False
    if is_organisation_wide(user):
        return True
    if getattr(user, "role", None) != Role.HEAD_MANAGER:
        return False
    home = getattr(user, "home_department_id", None)
    if home is None:
        return False
    return home == department_id or load_tree().is_descendant(department_id, home)


class CanAllocateDepartmentBonus(BasePermission):
    message = "You cannot manage bonus allocations for this department."

    def has_permission(self, request, view):
        return can_allocate_for(request.user, view.kwargs.get("department_id"))
