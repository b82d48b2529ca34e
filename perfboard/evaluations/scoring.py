"""
Turn completed evaluations into comparable 0-10 performance scores.

Ratings come from two scoring systems (5-point and 10-point). Each member's
most recent completed evaluation is rescaled onto 0-10; members without one
get a caller-supplied default weight.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP
from decimal import Decimal

from django.db import models

NORMALIZED_MAX = Decimal(10)
SCORE_QUANT = Decimal("0.01")


class EvaluationStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    IN_PROGRESS = "in-progress", "In progress"
    SUBMITTED = "submitted", "Submitted"
    COMPLETED = "completed", "Completed"


class ScoringSystem(models.TextChoices):
    FIVE_POINT = "1-5", "1 to 5"
    TEN_POINT = "1-10", "1 to 10"


SCALE_MAX = {
    ScoringSystem.FIVE_POINT: Decimal(5),
    ScoringSystem.TEN_POINT: Decimal(10),
}


@dataclass(frozen=True)
class EvaluationRecord:
    id: int
    evaluatee_id: int
    status: str
    overall_rating: Decimal | None = None
    scoring_system: str | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class RawScore:
    raw_score: Decimal
    max_score: Decimal
    evaluation_id: int | None = None


@dataclass(frozen=True)
class ScoredMember:
    user_id: int
    monthly_salary: Decimal | None
    raw_score: Decimal | None
    max_score: Decimal | None
    normalized_score: Decimal

    @property
    def is_scored(self) -> bool:
        return self.raw_score is not None


def _max_for(scoring_system, raw: Decimal) -> Decimal:
    if scoring_system in SCALE_MAX:
        return SCALE_MAX[ScoringSystem(scoring_system)]
    # Undisclosed scale: anything above 5 can only be a 10-point rating
    return SCALE_MAX[ScoringSystem.TEN_POINT if raw > 5 else ScoringSystem.FIVE_POINT]


def _recency(record: EvaluationRecord):
    # Missing timestamps sort oldest
    return (record.completed_at is not None, record.completed_at or datetime.min, record.id)


def latest_score(user_id, evaluations: Iterable[EvaluationRecord]) -> RawScore | None:
    """Most recent completed, rated evaluation of ``user_id``."""
    candidates = [
        e
        for e in evaluations
        if e.evaluatee_id == user_id
        and e.status == EvaluationStatus.COMPLETED
        and e.overall_rating is not None
    ]
    if not candidates:
        return None
    latest = max(candidates, key=_recency)
    raw = Decimal(str(latest.overall_rating))
    return RawScore(
        raw_score=raw,
        max_score=_max_for(latest.scoring_system, raw),
        evaluation_id=latest.id,
    )


def normalize(raw, max_score) -> Decimal:
    """``raw / max_score * 10`` clamped to [0, 10]."""
    raw = Decimal(str(raw))
    max_score = Decimal(str(max_score))
    if max_score <= 0:
        return Decimal(0)
    value = raw / max_score * NORMALIZED_MAX
    value = min(max(value, Decimal(0)), NORMALIZED_MAX)
    return value.quantize(SCORE_QUANT, rounding=ROUND_HALF_UP)


def score_team(
    members: Iterable,
    evaluations: Iterable[EvaluationRecord],
    salaries: dict | None = None,
    default=1,
) -> list[ScoredMember]:
    """
    Attach a normalized score (and salary, when known) to every member.

    ``members`` may be ``TeamMember`` views or bare user ids.
    """
    evaluations = list(evaluations)
    salaries = salaries or {}
    scored = []
    for member in members:
        user_id = getattr(member, "id", member)
        raw = latest_score(user_id, evaluations)
        if raw is None:
            scored.append(
                ScoredMember(
                    user_id=user_id,
                    monthly_salary=salaries.get(user_id),
                    raw_score=None,
                    max_score=None,
                    normalized_score=Decimal(default),
                )
            )
            continue
        scored.append(
            ScoredMember(
                user_id=user_id,
                monthly_salary=salaries.get(user_id),
                raw_score=raw.raw_score,
                max_score=raw.max_score,
                normalized_score=normalize(raw.raw_score, raw.max_score),
            )
        )
    return scored
