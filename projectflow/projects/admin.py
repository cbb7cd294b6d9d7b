from django.contrib import admin

from projectflow.projects import models


@admin.register(models.Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "status", "created_by", "is_active"]
    search_fields = ["name", "description"]
    list_filter = ["status", "is_active", "created_at"]
