from __future__ import annotations

from perfboard.assignments.accessors import load_registry
from perfboard.org.accessors import load_tree
from perfboard.users.accessors import load_team_members
from perfboard.users.accessors import to_team_member

from .resolver import can_view
from .resolver import compute_team
from .rules import VisibilityMode


def team_for(user, mode: VisibilityMode, *, as_of=None):
    """Load the org state and resolve ``user``'s team in one go."""

    mode = VisibilityMode(mode)
    return compute_team(
        to_team_member(user),
        load_team_members(),
        load_tree(),
        load_registry(kind=mode.value, as_of=as_of),
        mode,
    )


def user_can_view(user, target_id, mode: VisibilityMode, *, as_of=None) -> bool:
    mode = VisibilityMode(mode)
    return can_view(
        to_team_member(user),
        target_id,
        load_team_members(),
        load_tree(),
        load_registry(kind=mode.value, as_of=as_of),
        mode,
    )
