from __future__ import annotations

from decimal import Decimal

from .models import User
from .records import TeamMember
from .roles import Role


def to_team_member(user: User) -> TeamMember:
    return TeamMember(
        id=user.pk,
        role=Role(user.role),
        home_department_id=user.home_department_id,
        name=user.display_name,
    )


def load_team_members(*, active_only: bool = True) -> list[TeamMember]:
    """Return every user of the business as a ``TeamMember`` view."""

    qs = User.objects.order_by("pk")
    if active_only:
        qs = qs.filter(is_active=True)
    return [to_team_member(u) for u in qs]


def load_salaries(user_ids) -> dict[int, Decimal]:
    """Monthly salaries on record for ``user_ids`` (users without one are omitted)."""

    rows = User.objects.filter(pk__in=list(user_ids), monthly_salary__isnull=False)
    return {pk: salary for pk, salary in rows.values_list("pk", "monthly_salary")}
