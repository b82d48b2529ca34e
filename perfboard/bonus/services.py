"""
Performance-weighted bonus allocation.

Every member's share of the budget is proportional to their normalized
performance score; the share is then expressed as a percentage of that
member's own monthly salary. Budget overruns are flagged, never blocked.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from decimal import ROUND_HALF_UP
from decimal import Decimal

from django.conf import settings
from django.db import models

from perfboard.evaluations.scoring import ScoredMember

from .records import AllocationDraft
from .records import AllocationEntry
from .records import to_decimal
from .store import AllocationStore

logger = logging.getLogger(__name__)

NEUTRAL_WEIGHT = 1
PERCENTAGE_STEP = Decimal("0.5")
AMOUNT_QUANT = Decimal("0.01")
PERCENT_QUANT = Decimal("0.1")
HUNDRED = Decimal(100)
ZERO = Decimal(0)


def neutral_weight():
    return getattr(settings, "BONUS_NEUTRAL_WEIGHT", NEUTRAL_WEIGHT)


def percentage_step() -> Decimal:
    return Decimal(str(getattr(settings, "BONUS_PERCENTAGE_STEP", PERCENTAGE_STEP)))


class AllocationSkip(models.TextChoices):
    """Reasons an auto-allocation was not computed; labels are user-facing."""

    MISSING_BUDGET = "missing_budget", "Please enter a total budget first."
    EMPTY_TEAM = "empty_team", "No team members found."
    NO_SALARIES = (
        "no_salaries",
        "Please enter monthly salaries for your team members first.",
    )
    ZERO_WEIGHT = "zero_weight", "No performance scores available for allocation."


@dataclass(frozen=True)
class AllocationResult:
    percentages: dict[int, Decimal] = field(default_factory=dict)
    salaries: dict[int, Decimal] = field(default_factory=dict)
    skipped: AllocationSkip | None = None

    @property
    def computed(self) -> bool:
        return self.skipped is None

    @property
    def message(self) -> str:
        return str(self.skipped.label) if self.skipped else ""


@dataclass(frozen=True)
class AllocationTotals:
    allocated_amount: Decimal
    total_budget: Decimal
    exceeded: bool

    @property
    def remaining(self) -> Decimal:
        return self.total_budget - self.allocated_amount


def _skip(reason: AllocationSkip) -> AllocationResult:
    logger.debug("Auto-allocation skipped: %s", reason.value)
    return AllocationResult(skipped=reason)


def auto_allocate(team: Iterable[ScoredMember], total_budget) -> AllocationResult:
    """
    Split ``total_budget`` across salaried members by normalized score.

    Members without a positive salary get nothing computed. A result with
    ``skipped`` set means nothing was computed and prior allocations should be
    left alone.
    """
    budget = to_decimal(total_budget)
    if budget is None or budget <= 0:
        return _skip(AllocationSkip.MISSING_BUDGET)
    team = list(team)
    if not team:
        return _skip(AllocationSkip.EMPTY_TEAM)

    salaried = [
        m
        for m in team
        if m.monthly_salary is not None and to_decimal(m.monthly_salary) > 0
    ]
    if not salaried:
        return _skip(AllocationSkip.NO_SALARIES)

    weight = sum((Decimal(m.normalized_score) for m in salaried), ZERO)
    if weight <= 0:
        return _skip(AllocationSkip.ZERO_WEIGHT)

    percentages: dict[int, Decimal] = {}
    salaries: dict[int, Decimal] = {}
    for member in salaried:
        salary = to_decimal(member.monthly_salary)
        share = Decimal(member.normalized_score) / weight * budget
        pct = (share / salary * HUNDRED).quantize(PERCENT_QUANT, rounding=ROUND_HALF_UP)
        percentages[member.user_id] = max(pct, ZERO)
        salaries[member.user_id] = salary
    return AllocationResult(percentages=percentages, salaries=salaries)


def apply_auto_allocation(
    allocations: Mapping[int, AllocationEntry],
    result: AllocationResult,
) -> dict[int, AllocationEntry]:
    """Merge a computed result into ``allocations``; other entries are kept."""
    merged = dict(allocations)
    if not result.computed:
        return merged
    for user_id, pct in result.percentages.items():
        merged[user_id] = AllocationEntry(
            monthly_salary=result.salaries.get(user_id),
            bonus_percentage=pct,
        )
    return merged


def adjust_percentage(
    allocations: Mapping[int, AllocationEntry],
    user_id,
    delta,
) -> dict[int, AllocationEntry]:
    """Nudge one member's percentage by ``delta``, never below zero."""
    merged = dict(allocations)
    entry = merged.get(user_id, AllocationEntry())
    current = entry.bonus_percentage or ZERO
    value = max(current + Decimal(str(delta)), ZERO)
    merged[user_id] = replace(entry, bonus_percentage=value)
    return merged


def set_salary(
    allocations: Mapping[int, AllocationEntry],
    user_id,
    salary,
) -> dict[int, AllocationEntry]:
    merged = dict(allocations)
    entry = merged.get(user_id, AllocationEntry())
    merged[user_id] = AllocationEntry(
        monthly_salary=to_decimal(salary),
        bonus_percentage=entry.bonus_percentage or ZERO,
    )
    return merged


def _exact_amount(entry: AllocationEntry | None) -> Decimal:
    if entry is None or not entry.monthly_salary or not entry.bonus_percentage:
        return ZERO
    return entry.monthly_salary * entry.bonus_percentage / HUNDRED


def bonus_amount(entry: AllocationEntry | None) -> Decimal:
    return _exact_amount(entry).quantize(AMOUNT_QUANT, rounding=ROUND_HALF_UP)


def compute_totals(
    team_ids: Iterable,
    allocations: Mapping[int, AllocationEntry],
    total_budget,
) -> AllocationTotals:
    """Sum of bonus amounts over ``team_ids``; advisory only.

    The overrun check uses the unrounded sum; only the reported amount is
    rounded to the cent.
    """
    budget = to_decimal(total_budget) or ZERO
    exact = sum(
        (_exact_amount(allocations.get(user_id)) for user_id in team_ids),
        ZERO,
    )
    return AllocationTotals(
        allocated_amount=exact.quantize(AMOUNT_QUANT, rounding=ROUND_HALF_UP),
        total_budget=budget,
        exceeded=exact > budget,
    )


def empty_draft(department_id, year, *, created_by=None) -> AllocationDraft:
    return AllocationDraft(department_id=department_id, year=year, created_by=created_by)


async def load_draft(store: AllocationStore, department_id, year) -> AllocationDraft:
    draft = await store.get(department_id, year)
    if draft is None:
        return empty_draft(department_id, year)
    return draft


async def persist_draft(
    store: AllocationStore,
    draft: AllocationDraft,
    expected_version: int | None = None,
) -> AllocationDraft:
    """Overwrite the stored draft; errors from the store propagate unchanged."""
    return await store.put(
        draft.department_id,
        draft.year,
        draft,
        expected_version=expected_version,
    )
