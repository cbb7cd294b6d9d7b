from django.conf import settings
from django.db import models
from django.utils import timezone


class TimeEntry(models.Model):
    """Time logged by a user against a task.

    A running timer is an entry without ``end_time``; each user has at most
    one running timer.
    """

    task = models.ForeignKey(
        "tasks.ProjectTask",
        on_delete=models.CASCADE,
        related_name="time_entries",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="time_entries",
    )
    start_time = models.DateTimeField(default=timezone.now)
    end_time = models.DateTimeField(null=True, blank=True)
    duration_minutes = models.IntegerField(default=0)
    description = models.CharField(max_length=500, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-start_time"]
        verbose_name_plural = "time entries"

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"TimeEntry({self.task_id} by {self.user_id})"

    @property
    def is_running(self) -> bool:
        return self.end_time is None

    def stop(self, at=None) -> None:
        """Close the timer and compute whole elapsed minutes."""
        self.end_time = at or timezone.now()
        elapsed = self.end_time - self.start_time
        self.duration_minutes = int(elapsed.total_seconds() // 60)
