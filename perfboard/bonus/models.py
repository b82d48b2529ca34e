from django.conf import settings
from django.db import models

from .records import DraftStatus


class BonusAllocation(models.Model):
    """Persisted allocation draft, one row per ``(department, year)``."""

    key = models.CharField(max_length=64, unique=True)
    department = models.ForeignKey(
        "org.Department",
        on_delete=models.CASCADE,
        related_name="bonus_allocations",
    )
    year = models.PositiveIntegerField()
    total_budget = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
    )
    kpi_target = models.CharField(max_length=255, blank=True)
    # {"<user_id>": {"monthly_salary": "1000.00", "bonus_percentage": "8.0"}}
    allocations = models.JSONField(default=dict, blank=True)
    status = models.CharField(
        max_length=10,
        choices=DraftStatus.choices,
        default=DraftStatus.DRAFT,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    last_saved = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-year", "department_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["department", "year"],
                name="bonus_allocation_unique_department_year",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"BonusAllocation({self.key}, v{self.version})"
