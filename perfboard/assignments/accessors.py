from __future__ import annotations

from django.utils import timezone

from .models import Assignment
from .registry import AssignmentKind
from .registry import AssignmentRecord
from .registry import AssignmentRegistry
from .registry import AssignmentType


def to_record(assignment: Assignment) -> AssignmentRecord:
    return AssignmentRecord(
        id=assignment.pk,
        kind=AssignmentKind(assignment.kind),
        source_id=assignment.source_id,
        target_id=assignment.target_id,
        assignment_type=AssignmentType(assignment.assignment_type),
        expires_date=assignment.expires_date,
        active=assignment.active,
    )


def load_assignments(kind=None) -> list[AssignmentRecord]:
    """Every assignment row, optionally of one ``kind``; filtering is the registry's job."""

    qs = Assignment.objects.order_by("pk")
    if kind is not None:
        qs = qs.filter(kind=kind)
    return [to_record(a) for a in qs]


def load_registry(kind=None, as_of=None) -> AssignmentRegistry:
    return AssignmentRegistry(load_assignments(kind), as_of or timezone.localdate())
