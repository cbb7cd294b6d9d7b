from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Project(models.Model):
    class Status(models.IntegerChoices):
        PLANNING = 0, _("Planning")
        ACTIVE = 1, _("Active")
        ON_HOLD = 2, _("On Hold")
        COMPLETED = 3, _("Completed")

    name = models.CharField(max_length=200)
    description = models.CharField(max_length=1000, blank=True, default="")
    status = models.IntegerField(choices=Status.choices, default=Status.PLANNING)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_projects",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name
