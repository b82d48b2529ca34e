"""
Hierarchy-implied visibility, one rule per role.

Each rule receives the actor, every user of the business, the department tree
and the visibility mode, and returns the users the org chart alone lets the
actor see. Assignments are layered on top by ``resolver.compute_team``.
"""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Sequence

from django.db import models

from perfboard.org.tree import DepartmentTree
from perfboard.users.records import TeamMember
from perfboard.users.roles import JUNIOR_ROLES
from perfboard.users.roles import Role


class VisibilityMode(models.TextChoices):
    EVALUATION = "evaluation", "Evaluation"
    BONUS = "bonus", "Bonus"


Rule = Callable[
    [TeamMember, Sequence[TeamMember], DepartmentTree, VisibilityMode],
    list[TeamMember],
]


def everyone(actor, users, tree, mode) -> list[TeamMember]:
    return list(users)


def department_subtree(actor, users, tree, mode) -> list[TeamMember]:
    """Members of the actor's home department and every department below it."""
    home = actor.home_department_id
    if home is None:
        return []
    scope = tree.subtree(home) or {home}
    return [u for u in users if u.home_department_id in scope]


def junior_colleagues(actor, users, tree, mode) -> list[TeamMember]:
    # Line roles only evaluate; bonus allocation needs an explicit assignment
    if mode != VisibilityMode.EVALUATION:
        return []
    home = actor.home_department_id
    if home is None:
        return []
    juniors = JUNIOR_ROLES.get(actor.role, frozenset())
    return [u for u in users if u.home_department_id == home and u.role in juniors]


def nobody(actor, users, tree, mode) -> list[TeamMember]:
    return []


VISIBILITY_RULES: dict[Role, Rule] = {
    Role.ADMIN: everyone,
    Role.HR: everyone,
    Role.HEAD_MANAGER: department_subtree,
    Role.MANAGER: junior_colleagues,
    Role.SUPERVISOR: junior_colleagues,
    Role.EMPLOYEE: nobody,
}
