from django.contrib import admin

from perfboard.bonus import models


@admin.register(models.BonusAllocation)
class BonusAllocationAdmin(admin.ModelAdmin):
    list_display = ["key", "department", "year", "total_budget", "status", "version"]
    list_filter = ["status", "year"]
    search_fields = ["key", "department__name"]
    readonly_fields = ["key", "version", "last_saved", "created_at", "updated_at"]
