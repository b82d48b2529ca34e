from __future__ import annotations

from .models import Department
from .tree import DepartmentRecord
from .tree import DepartmentTree
from .tree import build_tree


def to_record(department: Department) -> DepartmentRecord:
    return DepartmentRecord(
        id=department.pk,
        name=department.name,
        parent_id=department.parent_id,
        manager_id=department.manager_id,
        is_active=department.is_active,
        employee_count=department.employee_count,
    )


def load_departments(*, active_only: bool = False) -> list[DepartmentRecord]:
    """All departments of the business, ordered by name."""

    qs = Department.objects.order_by("name", "pk")
    if active_only:
        qs = qs.filter(is_active=True)
    return [to_record(d) for d in qs]


def load_tree() -> DepartmentTree:
    return build_tree(load_departments())
