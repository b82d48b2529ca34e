from __future__ import annotations

from .models import Evaluation
from .scoring import EvaluationRecord
from .scoring import EvaluationStatus


def to_record(evaluation: Evaluation) -> EvaluationRecord:
    return EvaluationRecord(
        id=evaluation.pk,
        evaluatee_id=evaluation.evaluatee_id,
        status=evaluation.status,
        overall_rating=evaluation.overall_rating,
        scoring_system=evaluation.scoring_system or None,
        completed_at=evaluation.completed_at,
    )


def load_evaluations(user_ids) -> list[EvaluationRecord]:
    """Completed evaluations of ``user_ids``; drafts never carry a usable score."""

    qs = Evaluation.objects.filter(
        evaluatee_id__in=list(user_ids),
        status=EvaluationStatus.COMPLETED,
    ).order_by("pk")
    return [to_record(e) for e in qs]
