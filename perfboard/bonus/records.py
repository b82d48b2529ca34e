from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from decimal import Decimal
from decimal import InvalidOperation

from django.db import models


class DraftStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    FINAL = "final", "Final"


@dataclass(frozen=True)
class AllocationEntry:
    monthly_salary: Decimal | None = None
    bonus_percentage: Decimal | None = None


@dataclass(frozen=True)
class AllocationDraft:
    """One department's bonus distribution for one year."""

    department_id: int
    year: int
    total_budget: Decimal | None = None
    allocations: Mapping[int, AllocationEntry] = field(default_factory=dict)
    status: str = DraftStatus.DRAFT
    kpi_target: str = ""
    created_by: int | None = None
    last_saved: datetime | None = None
    version: int = 0


def to_decimal(value) -> Decimal | None:
    """Lenient money parsing: ``None``, blanks and junk become ``None``."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def allocations_to_json(allocations: Mapping[int, AllocationEntry]) -> dict:
    return {
        str(user_id): {
            "monthly_salary": None
            if entry.monthly_salary is None
            else str(entry.monthly_salary),
            "bonus_percentage": None
            if entry.bonus_percentage is None
            else str(entry.bonus_percentage),
        }
        for user_id, entry in allocations.items()
    }


def allocations_from_json(data) -> dict[int, AllocationEntry]:
    result: dict[int, AllocationEntry] = {}
    for user_id, entry in (data or {}).items():
        entry = entry or {}
        result[int(user_id)] = AllocationEntry(
            monthly_salary=to_decimal(entry.get("monthly_salary")),
            bonus_percentage=to_decimal(entry.get("bonus_percentage")),
        )
    return result
