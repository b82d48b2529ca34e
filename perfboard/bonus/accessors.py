from __future__ import annotations

from collections.abc import Mapping

from perfboard.assignments.accessors import load_registry
from perfboard.assignments.registry import AssignmentKind
from perfboard.evaluations.accessors import load_evaluations
from perfboard.evaluations.scoring import ScoredMember
from perfboard.evaluations.scoring import score_team
from perfboard.org.accessors import load_tree
from perfboard.users.accessors import load_salaries
from perfboard.users.accessors import load_team_members
from perfboard.users.accessors import to_team_member
from perfboard.users.records import TeamMember
from perfboard.visibility import VisibilityMode
from perfboard.visibility import compute_team

from .records import AllocationEntry
from .services import neutral_weight


def load_allocation_team(user, department_id, *, as_of=None) -> list[TeamMember]:
    """
    Members ``user`` may allocate to within ``department_id``'s subtree, plus
    the recipients explicitly assigned to ``user``.
    """
    tree = load_tree()
    registry = load_registry(kind=AssignmentKind.BONUS, as_of=as_of)
    actor = to_team_member(user)
    visible = compute_team(
        actor, load_team_members(), tree, registry, VisibilityMode.BONUS
    )
    scope = tree.subtree(department_id) or {department_id}
    assigned = set(registry.targets_for(actor.id, AssignmentKind.BONUS))
    return [m for m in visible if m.home_department_id in scope or m.id in assigned]


def load_scored_team(
    members: list[TeamMember],
    allocations: Mapping[int, AllocationEntry],
) -> list[ScoredMember]:
    """Score ``members``; draft salaries win over the salary on record."""
    ids = [m.id for m in members]
    salaries = load_salaries(ids)
    for user_id, entry in allocations.items():
        if entry.monthly_salary is not None:
            salaries[user_id] = entry.monthly_salary
    return score_team(ids, load_evaluations(ids), salaries, default=neutral_weight())
