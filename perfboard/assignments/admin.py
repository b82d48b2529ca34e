from django.contrib import admin

from perfboard.assignments import models


@admin.register(models.Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ["id", "kind", "source", "target", "assignment_type", "active"]
    list_filter = ["kind", "assignment_type", "active"]
    search_fields = ["source__username", "target__username", "notes"]
    raw_id_fields = ["source", "target", "created_by"]
