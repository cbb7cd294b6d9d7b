import uuid
from pathlib import Path

from django.conf import settings
from django.db import models


def attachment_upload_to(instance, filename: str) -> str:
    """Store under a random name; the original name is kept in ``file_name``."""
    extension = Path(filename).suffix.lower()
    return f"attachments/{uuid.uuid4()}{extension}"


class Attachment(models.Model):
    file = models.FileField(upload_to=attachment_upload_to)
    file_name = models.CharField(max_length=255)
    content_type = models.CharField(max_length=100, blank=True)
    file_size = models.BigIntegerField(default=0)
    task = models.ForeignKey(
        "tasks.ProjectTask",
        on_delete=models.CASCADE,
        related_name="attachments",
    )
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="attachments",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.file_name
