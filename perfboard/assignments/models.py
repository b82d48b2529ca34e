from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from .registry import AssignmentKind
from .registry import AssignmentType


class Assignment(models.Model):
    """Evaluator -> evaluatee or bonus allocator -> recipient pairing."""

    kind = models.CharField(max_length=20, choices=AssignmentKind.choices)
    source = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="outgoing_assignments",
    )
    target = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="incoming_assignments",
    )
    assignment_type = models.CharField(
        max_length=20,
        choices=AssignmentType.choices,
        default=AssignmentType.PERMANENT,
    )
    expires_date = models.DateField(null=True, blank=True)
    active = models.BooleanField(default=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["kind", "source_id", "pk"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(source=models.F("target")),
                name="assignments_source_not_target",
            ),
            models.UniqueConstraint(
                fields=["kind", "source", "target"],
                condition=Q(active=True),
                name="assignments_unique_active_pair",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.kind}: {self.source_id} -> {self.target_id}"

    def clean(self):
        super().clean()
        if self.source_id and self.source_id == self.target_id:
            raise ValidationError({"target": "A user cannot be assigned to themselves."})
        if self.assignment_type == AssignmentType.TEMPORARY and not self.expires_date:
            raise ValidationError(
                {"expires_date": "Temporary assignments need an expiry date."}
            )
