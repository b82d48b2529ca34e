from django.contrib import admin

from perfboard.evaluations import models


@admin.register(models.Evaluation)
class EvaluationAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "evaluatee",
        "status",
        "overall_rating",
        "scoring_system",
        "completed_at",
    ]
    list_filter = ["status", "scoring_system"]
    raw_id_fields = ["evaluatee", "evaluator"]
