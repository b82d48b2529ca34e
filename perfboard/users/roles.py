from django.db import models
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    """Closed set of organisational roles.

    The values double as the wire format used by the API and stored on
    ``User.role``.
    """

    ADMIN = "admin", _("Admin")
    HR = "hr", _("HR")
    HEAD_MANAGER = "head-manager", _("Head Manager")
    MANAGER = "manager", _("Manager")
    SUPERVISOR = "supervisor", _("Supervisor")
    EMPLOYEE = "employee", _("Employee")


# Roles that see the whole business regardless of the department tree.
ORGANISATION_WIDE_ROLES = frozenset({Role.ADMIN, Role.HR})

# Strictly junior roles a line role may evaluate inside its own department.
JUNIOR_ROLES: dict[str, frozenset[str]] = {
    Role.MANAGER: frozenset({Role.SUPERVISOR, Role.EMPLOYEE}),
    Role.SUPERVISOR: frozenset({Role.EMPLOYEE}),
}
