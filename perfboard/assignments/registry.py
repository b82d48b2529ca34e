"""
In-memory index over evaluator and bonus-allocator assignments.

An assignment is the only thing that grants visibility outside the
department hierarchy. Lookups ignore inactive rows and temporary rows whose
``expires_date`` is before the reference date; nothing is ever deleted here.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from django.db import models

from perfboard.org.exceptions import StructureError

logger = logging.getLogger(__name__)


class AssignmentKind(models.TextChoices):
    EVALUATION = "evaluation", "Evaluation"
    BONUS = "bonus", "Bonus"


class AssignmentType(models.TextChoices):
    PERMANENT = "permanent", "Permanent"
    TEMPORARY = "temporary", "Temporary"
    PROJECT = "project", "Project"


class DanglingAssignmentError(StructureError):
    """Assignments reference users that do not exist."""

    def __init__(self, assignment_ids, missing_user_ids) -> None:
        self.assignment_ids = tuple(assignment_ids)
        self.missing_user_ids = tuple(sorted(missing_user_ids))
        super().__init__(
            f"Assignments {list(self.assignment_ids)} reference unknown "
            f"users {list(self.missing_user_ids)}"
        )


@dataclass(frozen=True)
class AssignmentRecord:
    id: int
    kind: AssignmentKind
    source_id: int
    target_id: int
    assignment_type: AssignmentType = AssignmentType.PERMANENT
    expires_date: date | None = None
    active: bool = True

    def is_effective(self, as_of: date) -> bool:
        if not self.active:
            return False
        if self.assignment_type == AssignmentType.TEMPORARY and self.expires_date:
            return self.expires_date >= as_of
        return True


class AssignmentRegistry:
    """Lookups over the assignments effective on ``as_of``."""

    def __init__(self, assignments: Iterable[AssignmentRecord], as_of: date) -> None:
        self.as_of = as_of
        self._all = list(assignments)
        self._by_source: dict[tuple[AssignmentKind, int], list[AssignmentRecord]] = (
            defaultdict(list)
        )
        self._by_target: dict[tuple[AssignmentKind, int], list[AssignmentRecord]] = (
            defaultdict(list)
        )
        for record in self._all:
            if not record.is_effective(as_of):
                continue
            kind = AssignmentKind(record.kind)
            self._by_source[(kind, record.source_id)].append(record)
            self._by_target[(kind, record.target_id)].append(record)

    def __iter__(self):
        return iter(self._all)

    def by_evaluator(self, source_id) -> list[AssignmentRecord]:
        return list(self._by_source.get((AssignmentKind.EVALUATION, source_id), ()))

    def by_allocator(self, source_id) -> list[AssignmentRecord]:
        return list(self._by_source.get((AssignmentKind.BONUS, source_id), ()))

    def by_evaluatee(self, target_id) -> list[AssignmentRecord]:
        return list(self._by_target.get((AssignmentKind.EVALUATION, target_id), ()))

    def by_recipient(self, target_id) -> list[AssignmentRecord]:
        return list(self._by_target.get((AssignmentKind.BONUS, target_id), ()))

    def targets_for(self, source_id, kind) -> list[int]:
        """Distinct target ids for ``source_id``, in assignment order."""
        records = self._by_source.get((AssignmentKind(kind), source_id), ())
        return list(dict.fromkeys(r.target_id for r in records))

    def validate_targets(self, user_ids) -> None:
        """Raise ``DanglingAssignmentError`` if any row names an unknown user.

        Every row is checked, including inactive and expired ones.
        """
        known = set(user_ids)
        bad_rows = []
        missing: set[int] = set()
        for record in self._all:
            unknown = {record.source_id, record.target_id} - known
            if unknown:
                bad_rows.append(record.id)
                missing |= unknown
        if bad_rows:
            logger.warning(
                "%s assignment(s) reference unknown users %s", len(bad_rows), missing
            )
            raise DanglingAssignmentError(bad_rows, missing)
