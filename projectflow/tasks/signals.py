from django.db.models.signals import post_delete
from django.db.models.signals import post_save
from django.db.transaction import on_commit
from django.dispatch import receiver

from projectflow.realtime.events.projects import publish_task_created
from projectflow.realtime.events.projects import publish_task_deleted
from projectflow.realtime.events.projects import publish_task_updated

from .models import ProjectTask


@receiver(post_save, sender=ProjectTask)
def task_realtime_updates(sender, instance, created, **kwargs):
    if created:
        on_commit(lambda: publish_task_created(instance))
    else:
        on_commit(lambda: publish_task_updated(instance))


@receiver(post_delete, sender=ProjectTask)
def task_realtime_deleted(sender, instance, **kwargs):
    # The instance pk is cleared after delete(); capture ids now.
    task_id = instance.pk
    project_id = instance.project_id
    on_commit(lambda: publish_task_deleted(task_id, project_id))
