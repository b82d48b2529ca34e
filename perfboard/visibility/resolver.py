from __future__ import annotations

import logging
from collections.abc import Sequence

from perfboard.assignments.registry import AssignmentKind
from perfboard.assignments.registry import AssignmentRegistry
from perfboard.org.tree import DepartmentTree
from perfboard.users.records import TeamMember
from perfboard.users.roles import Role

from .rules import VISIBILITY_RULES
from .rules import VisibilityMode
from .rules import nobody

logger = logging.getLogger(__name__)


def compute_team(
    actor: TeamMember,
    all_users: Sequence[TeamMember],
    tree: DepartmentTree,
    assignments: AssignmentRegistry,
    mode: VisibilityMode,
) -> list[TeamMember]:
    """
    The users ``actor`` may evaluate (``mode=EVALUATION``) or allocate a bonus
    to (``mode=BONUS``).

    Hierarchy-implied visibility comes from ``VISIBILITY_RULES``; active
    assignments of the matching kind are added on top. The actor is never part
    of their own team. The result keeps the order of ``all_users`` and holds
    each user once.
    """
    mode = VisibilityMode(mode)
    rule = VISIBILITY_RULES.get(Role(actor.role), nobody)
    visible = {u.id for u in rule(actor, all_users, tree, mode)}

    known = {u.id for u in all_users}
    kind = AssignmentKind(mode.value)
    for target_id in assignments.targets_for(actor.id, kind):
        if target_id not in known:
            logger.warning(
                "Assignment target %s of user %s is not a known user; skipped",
                target_id,
                actor.id,
            )
            continue
        visible.add(target_id)

    visible.discard(actor.id)
    team = []
    seen = set()
    for user in all_users:
        if user.id in visible and user.id not in seen:
            seen.add(user.id)
            team.append(user)
    return team


def can_view(
    actor: TeamMember,
    target_id,
    all_users: Sequence[TeamMember],
    tree: DepartmentTree,
    assignments: AssignmentRegistry,
    mode: VisibilityMode,
) -> bool:
    if target_id == actor.id:
        return False
    team = compute_team(actor, all_users, tree, assignments, mode)
    return any(member.id == target_id for member in team)
