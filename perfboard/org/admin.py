from django.contrib import admin

from perfboard.org import models


@admin.register(models.Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "parent", "manager", "is_active", "employee_count"]
    search_fields = ["name", "description"]
    list_filter = ["is_active", "created_at", "updated_at"]
    raw_id_fields = ["parent", "manager"]
