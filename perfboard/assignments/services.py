from __future__ import annotations

from django.utils import timezone

from perfboard.users.accessors import load_team_members

from .accessors import load_assignments
from .registry import AssignmentRegistry


def check_targets() -> None:
    """Raise ``DanglingAssignmentError`` if a row names a user who is gone.

    Deactivated users count as gone; their rows should be closed or removed.
    """
    registry = AssignmentRegistry(load_assignments(), timezone.localdate())
    registry.validate_targets(m.id for m in load_team_members())
