from django.contrib import admin

from projectflow.timetracking import models


@admin.register(models.TimeEntry)
class TimeEntryAdmin(admin.ModelAdmin):
    list_display = ["id", "task", "user", "start_time", "end_time", "duration_minutes"]
    list_filter = ["start_time"]
