from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class ProjectTask(models.Model):
    """A unit of work on a project's board."""

    class Status(models.IntegerChoices):
        TODO = 0, _("To Do")
        IN_PROGRESS = 1, _("In Progress")
        REVIEW = 2, _("Review")
        DONE = 3, _("Done")

    class Priority(models.IntegerChoices):
        LOW = 0, _("Low")
        MEDIUM = 1, _("Medium")
        HIGH = 2, _("High")
        CRITICAL = 3, _("Critical")

    title = models.CharField(max_length=300)
    description = models.CharField(max_length=2000, blank=True, default="")
    status = models.IntegerField(choices=Status.choices, default=Status.TODO)
    priority = models.IntegerField(choices=Priority.choices, default=Priority.MEDIUM)
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.CASCADE,
        related_name="tasks",
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_tasks",
    )
    due_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.title} (project {self.project_id})"
