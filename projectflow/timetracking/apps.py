from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class TimeTrackingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "projectflow.timetracking"
    verbose_name = _("Time tracking")

    def ready(self):
        import projectflow.timetracking.signals  # noqa: F401, PLC0415
