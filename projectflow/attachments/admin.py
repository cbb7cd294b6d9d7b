from django.contrib import admin

from projectflow.attachments import models


@admin.register(models.Attachment)
class AttachmentAdmin(admin.ModelAdmin):
    list_display = ["id", "file_name", "task", "uploaded_by", "file_size"]
    search_fields = ["file_name"]
    list_filter = ["content_type", "created_at"]
