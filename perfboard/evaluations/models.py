from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from .scoring import EvaluationStatus
from .scoring import ScoringSystem


class Evaluation(models.Model):
    """
    Outcome of an evaluation cycle for one employee.

    Only ``overall_rating`` of completed evaluations feeds bonus allocation;
    the questionnaire workflow that produces it lives elsewhere.
    """

    evaluatee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="evaluations",
    )
    evaluator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="evaluations_given",
    )
    status = models.CharField(
        max_length=20,
        choices=EvaluationStatus.choices,
        default=EvaluationStatus.DRAFT,
        db_index=True,
    )
    overall_rating = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    scoring_system = models.CharField(
        max_length=10,
        choices=ScoringSystem.choices,
        blank=True,
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-completed_at", "-pk"]
        indexes = [
            models.Index(
                fields=["evaluatee", "status"],
                name="evaluation_evaluatee_status",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Evaluation({self.evaluatee_id}, {self.status})"
