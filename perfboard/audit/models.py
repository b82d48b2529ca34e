from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    class Action(models.TextChoices):
        LOGIN = "login", "Login"
        DEPARTMENT_CREATE = "department_create", "Department created"
        DEPARTMENT_UPDATE = "department_update", "Department updated"
        DEPARTMENT_DEACTIVATE = "department_deactivate", "Department deactivated"
        ASSIGNMENT_CREATE = "assignment_create", "Assignment created"
        ASSIGNMENT_UPDATE = "assignment_update", "Assignment updated"
        ASSIGNMENT_DELETE = "assignment_delete", "Assignment deleted"
        ALLOCATION_SAVE = "allocation_save", "Bonus allocation saved"

    action = models.CharField(max_length=50, choices=Action.choices, db_index=True)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_entries",
    )
    message = models.TextField(blank=True)
    model_name = models.CharField(max_length=150, blank=True)
    record_id = models.CharField(max_length=64, blank=True)
    before = models.JSONField(null=True, blank=True)
    after = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-pk"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        who = self.actor_id or "system"
        return f"[{self.created_at}] {who}: {self.action}"
