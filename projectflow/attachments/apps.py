from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class AttachmentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "projectflow.attachments"
    verbose_name = _("Attachments")

    def ready(self):
        import projectflow.attachments.signals  # noqa: F401, PLC0415
