from __future__ import annotations

from dataclasses import dataclass

from .roles import Role


@dataclass(frozen=True)
class TeamMember:
    """Read-only view of a user as seen by the visibility rules."""

    id: int
    role: Role
    home_department_id: int | None = None
    name: str = ""
