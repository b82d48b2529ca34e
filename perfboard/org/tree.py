"""
Department hierarchy: construction, validation, flattening and traversal.

Pure data structures over ``DepartmentRecord`` views. Nothing in this module
touches the ORM; ``perfboard.org.accessors`` converts model rows first.

Two notions of "parent" exist:

* the *declared* parent (``DepartmentRecord.parent_id``), used by
  ``validate_hierarchy`` and ``check_reparent`` to judge whether data or an
  edit is acceptable;
* the *attached* parent inside a built ``DepartmentTree``. A department whose
  declared parent is missing or inactive is attached as a root so its members
  never drop out of view.

Rendering (``roots``, ``node``, ``flatten``) follows attached links. Traversal
(``is_descendant``, ``descendants``, ``subtree``) follows declared links, so an
active department under an inactive one still belongs to every ancestor above.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field

from .exceptions import DepartmentCycleError
from .exceptions import DepartmentInUseError
from .exceptions import UnknownDepartmentError

logger = logging.getLogger(__name__)

# Connector glyphs for selection widgets that cannot render a tree control.
GLYPH_TEE = "├── "
GLYPH_ELBOW = "└── "
GLYPH_PIPE = "│   "
GLYPH_BLANK = "    "
INACTIVE_SUFFIX = " (Inactive)"


@dataclass(frozen=True)
class DepartmentRecord:
    """Read-only view of a department."""

    id: int
    name: str
    parent_id: int | None = None
    manager_id: int | None = None
    is_active: bool = True
    employee_count: int = 0


@dataclass
class DepartmentNode:
    department: DepartmentRecord
    children: list[DepartmentNode] = field(default_factory=list)

    @property
    def id(self) -> int:
        return self.department.id


@dataclass(frozen=True)
class FlatDepartment:
    """One row of a flattened tree.

    ``lineage`` holds, for every ancestor between the root (exclusive) and this
    row (exclusive), whether that ancestor was the last of its siblings. With
    ``is_last`` it is everything a presentation layer needs to draw connectors.
    """

    department: DepartmentRecord
    level: int
    is_last: bool
    lineage: tuple[bool, ...] = ()


class DepartmentTree:
    """A built department forest with traversal helpers."""

    def __init__(
        self,
        roots: list[DepartmentNode],
        nodes: dict[int, DepartmentNode],
        parent_of: dict[int, int | None],
        declared_parent_of: dict[int, int | None] | None = None,
    ) -> None:
        self._roots = roots
        self._nodes = nodes
        self._parent_of = parent_of
        self._declared_parent_of = (
            dict(parent_of) if declared_parent_of is None else declared_parent_of
        )
        self._declared_children: dict[int, list[int]] = {}
        for dept_id, parent_id in self._declared_parent_of.items():
            if parent_id is not None:
                self._declared_children.setdefault(parent_id, []).append(dept_id)

    # -- Access -------------------------------------------------------------

    @property
    def roots(self) -> list[DepartmentNode]:
        return list(self._roots)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, department_id) -> bool:
        return department_id in self._nodes

    def get(self, department_id) -> DepartmentRecord | None:
        node = self._nodes.get(department_id)
        return node.department if node else None

    def node(self, department_id) -> DepartmentNode | None:
        return self._nodes.get(department_id)

    def parent_id(self, department_id) -> int | None:
        """Attached parent of ``department_id`` (``None`` for roots)."""
        return self._parent_of.get(department_id)

    # -- Flattening ---------------------------------------------------------

    def flatten(self, exclude_id=None) -> list[FlatDepartment]:
        """
        Depth-first, parent-before-children listing of every department.

        ``exclude_id`` drops that department together with its whole subtree,
        which keeps an edited department's own descendants out of its
        parent choices.
        """
        result: list[FlatDepartment] = []
        roots = [r for r in self._roots if r.id != exclude_id]
        stack: list[tuple[DepartmentNode, int, bool, tuple[bool, ...]]] = []
        for idx in range(len(roots) - 1, -1, -1):
            stack.append((roots[idx], 0, idx == len(roots) - 1, ()))

        while stack:
            node, level, is_last, lineage = stack.pop()
            result.append(
                FlatDepartment(
                    department=node.department,
                    level=level,
                    is_last=is_last,
                    lineage=lineage,
                )
            )
            children = [c for c in node.children if c.id != exclude_id]
            child_lineage = (*lineage, is_last) if level > 0 else ()
            for idx in range(len(children) - 1, -1, -1):
                stack.append(
                    (
                        children[idx],
                        level + 1,
                        idx == len(children) - 1,
                        child_lineage,
                    )
                )
        return result

    # -- Traversal ----------------------------------------------------------

    def is_descendant(self, candidate_id, ancestor_id) -> bool:
        """True if ``ancestor_id`` appears on ``candidate_id``'s declared parent
        chain, whatever the active flags along the way.

        A department is not its own descendant.
        """
        if candidate_id not in self._nodes or ancestor_id not in self._nodes:
            return False
        seen = {candidate_id}
        current = self._declared_parent_of.get(candidate_id)
        while current is not None and current not in seen:
            if current == ancestor_id:
                return True
            seen.add(current)
            current = self._declared_parent_of.get(current)
        return False

    def descendants(self, department_id) -> set[int]:
        """Every department below ``department_id`` (the department excluded)."""
        if department_id not in self._nodes:
            return set()
        found: set[int] = set()
        queue = deque(self._declared_children.get(department_id, ()))
        while queue:
            dept_id = queue.popleft()
            if dept_id in found or dept_id == department_id:
                continue
            found.add(dept_id)
            queue.extend(self._declared_children.get(dept_id, ()))
        return found

    def subtree(self, department_id) -> set[int]:
        """``department_id`` plus its descendants; empty if unknown."""
        if department_id not in self._nodes:
            return set()
        return {department_id, *self.descendants(department_id)}


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def build_tree(departments: Iterable[DepartmentRecord]) -> DepartmentTree:
    """
    Build a ``DepartmentTree`` from flat records, preserving input order.

    Roots are departments without a parent or whose parent is missing or
    inactive. Departments trapped in a parent loop are promoted to roots (one
    per loop) and logged; ``validate_hierarchy`` is the gate that rejects such
    data.
    """
    by_id: dict[int, DepartmentRecord] = {}
    for dept in departments:
        if dept.id in by_id:
            logger.warning("Duplicate department id %r ignored", dept.id)
            continue
        by_id[dept.id] = dept

    attach: dict[int, int | None] = {}
    declared: dict[int, int | None] = {}
    for dept in by_id.values():
        parent = by_id.get(dept.parent_id) if dept.parent_id is not None else None
        if parent is None or parent.id == dept.id:
            declared[dept.id] = None
        else:
            declared[dept.id] = parent.id
        # Inactive parents keep the declared link but are not rendered above
        attach[dept.id] = declared[dept.id] if parent and parent.is_active else None

    for breaker in _loop_breakers(attach, list(by_id)):
        logger.warning(
            "Department %r sits on a parent cycle; promoted to a root", breaker
        )
        attach[breaker] = None

    nodes = {dept_id: DepartmentNode(dept) for dept_id, dept in by_id.items()}
    roots: list[DepartmentNode] = []
    for dept_id, node in nodes.items():
        parent_id = attach[dept_id]
        if parent_id is None:
            roots.append(node)
        else:
            nodes[parent_id].children.append(node)
    return DepartmentTree(roots, nodes, attach, declared)


def _loop_breakers(attach: dict[int, int | None], order: list[int]) -> list[int]:
    """One department per parent loop: the earliest in input order."""
    position = {dept_id: idx for idx, dept_id in enumerate(order)}
    done: set[int] = set()
    breakers: list[int] = []
    for start in order:
        if start in done:
            continue
        path: list[int] = []
        index: dict[int, int] = {}
        current: int | None = start
        while current is not None and current not in done:
            if current in index:
                loop = path[index[current] :]
                breakers.append(min(loop, key=position.__getitem__))
                break
            index[current] = len(path)
            path.append(current)
            current = attach.get(current)
        done.update(path)
    return breakers


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_hierarchy(departments: Iterable[DepartmentRecord]) -> None:
    """
    Walk every declared ancestor chain. Raises ``DepartmentCycleError`` for
    the first department whose chain revisits a node before reaching a root
    or a missing parent.
    """
    parents = {d.id: d.parent_id for d in departments}
    cleared: set[int] = set()
    for dept_id in parents:
        chain = [dept_id]
        seen = {dept_id}
        current = parents[dept_id]
        while current is not None and current in parents and current not in cleared:
            if current in seen:
                chain.append(current)
                raise DepartmentCycleError(dept_id, tuple(chain))
            seen.add(current)
            chain.append(current)
            current = parents[current]
        cleared.update(seen)


def check_reparent(
    departments: Iterable[DepartmentRecord],
    department_id,
    new_parent_id,
) -> None:
    """
    Refuse an edit that would give ``department_id`` the parent
    ``new_parent_id`` when that closes a loop or points nowhere.
    """
    if new_parent_id is None:
        return
    parents = {d.id: d.parent_id for d in departments}
    if new_parent_id not in parents:
        raise UnknownDepartmentError(new_parent_id)
    if new_parent_id == department_id:
        raise DepartmentCycleError(department_id, (department_id, department_id))

    chain = [department_id, new_parent_id]
    seen = {new_parent_id}
    current = parents.get(new_parent_id)
    while current is not None and current not in seen:
        chain.append(current)
        if current == department_id:
            raise DepartmentCycleError(department_id, tuple(chain))
        seen.add(current)
        current = parents.get(current)


def check_deactivation(
    departments: Iterable[DepartmentRecord],
    members: Iterable,
    department_id,
) -> None:
    """
    Raise ``DepartmentInUseError`` while ``department_id`` still has active
    members or active child departments. ``members`` are the active users
    (anything with a ``home_department_id``).
    """
    active_children = sum(
        1 for d in departments if d.parent_id == department_id and d.is_active
    )
    active_employees = sum(
        1 for m in members if m.home_department_id == department_id
    )
    if active_children or active_employees:
        raise DepartmentInUseError(
            department_id,
            active_employees=active_employees,
            active_children=active_children,
        )


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------


def render_label(entry: FlatDepartment) -> str:
    """Draw the connector-prefixed label for a flattened row."""
    if entry.level == 0:
        prefix = ""
    else:
        prefix = "".join(GLYPH_BLANK if last else GLYPH_PIPE for last in entry.lineage)
        prefix += GLYPH_ELBOW if entry.is_last else GLYPH_TEE
    label = f"{prefix}{entry.department.name}"
    if not entry.department.is_active:
        label += INACTIVE_SUFFIX
    return label


def employee_counts(members: Iterable) -> dict[int, int]:
    """Count members per home department."""
    counts: dict[int, int] = {}
    for member in members:
        dept_id = member.home_department_id
        if dept_id is not None:
            counts[dept_id] = counts.get(dept_id, 0) + 1
    return counts
