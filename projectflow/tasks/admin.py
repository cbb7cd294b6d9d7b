from django.contrib import admin

from projectflow.tasks import models


@admin.register(models.ProjectTask)
class ProjectTaskAdmin(admin.ModelAdmin):
    list_display = ["id", "title", "project", "status", "priority", "assigned_to"]
    search_fields = ["title", "description"]
    list_filter = ["status", "priority", "created_at"]
