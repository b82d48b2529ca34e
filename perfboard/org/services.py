from __future__ import annotations

import logging

from django.db import transaction

from perfboard.users.accessors import load_team_members

from .accessors import load_departments
from .models import Department
from .tree import check_deactivation
from .tree import check_reparent
from .tree import employee_counts

logger = logging.getLogger(__name__)


@transaction.atomic
def sync_employee_counts() -> int:
    """Recompute ``employee_count`` from active members. Returns rows changed."""

    counts = employee_counts(load_team_members())
    changed = 0
    for dept in Department.objects.select_for_update():
        value = counts.get(dept.pk, 0)
        if dept.employee_count != value:
            dept.employee_count = value
            dept.save(update_fields=["employee_count", "updated_at"])
            changed += 1
    if changed:
        logger.info("Employee counts refreshed for %s department(s)", changed)
    return changed


def validate_parent(department_id, new_parent_id) -> None:
    """Raise a ``StructureError`` if the re-parenting would break the tree."""

    check_reparent(load_departments(), department_id, new_parent_id)


def ensure_can_deactivate(department_id) -> None:
    """Raise ``DepartmentInUseError`` while members or active children remain."""

    check_deactivation(load_departments(), load_team_members(), department_id)


@transaction.atomic
def deactivate_department(department: Department) -> Department:
    """Logical delete. Raises ``DepartmentInUseError`` while still in use."""

    ensure_can_deactivate(department.pk)
    department.is_active = False
    department.save(update_fields=["is_active", "updated_at"])
    logger.info("Department %s deactivated", department.pk)
    return department
