from django.db.models.signals import post_save
from django.db.transaction import on_commit
from django.dispatch import receiver

from projectflow.realtime.events.projects import publish_project_updated

from .models import Project


@receiver(post_save, sender=Project)
def project_realtime_updates(sender, instance, created, **kwargs):
    # New projects have no subscribers yet; only edits are broadcast.
    if not created:
        on_commit(lambda: publish_project_updated(instance))
