"""Structural errors raised by the department hierarchy."""

from __future__ import annotations


class StructureError(Exception):
    """Base class for hierarchy and assignment integrity violations."""


class DepartmentCycleError(StructureError):
    """A department's ancestor chain loops back on itself."""

    def __init__(self, department_id, chain: tuple = ()) -> None:
        self.department_id = department_id
        self.chain = tuple(chain)
        path = " -> ".join(str(d) for d in self.chain) or str(department_id)
        super().__init__(
            f"Department {department_id!r} is part of a parent cycle: {path}"
        )


class UnknownDepartmentError(StructureError):
    """A parent reference points at a department that does not exist."""

    def __init__(self, department_id) -> None:
        self.department_id = department_id
        super().__init__(f"Department {department_id!r} does not exist")


class DepartmentInUseError(StructureError):
    """Logical deletion refused while members or active children remain."""

    def __init__(
        self,
        department_id,
        *,
        active_employees: int = 0,
        active_children: int = 0,
    ) -> None:
        self.department_id = department_id
        self.active_employees = active_employees
        self.active_children = active_children
        reasons = []
        if active_employees:
            reasons.append(f"{active_employees} active employee(s)")
        if active_children:
            reasons.append(f"{active_children} active child department(s)")
        super().__init__(
            f"Cannot deactivate department {department_id!r}: "
            f"it still has {' and '.join(reasons)}"
        )
