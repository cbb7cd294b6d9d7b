from django.db.models.signals import post_delete
from django.db.models.signals import post_save
from django.db.transaction import on_commit
from django.dispatch import receiver

from projectflow.realtime.events.projects import publish_attachment_added
from projectflow.realtime.events.projects import publish_attachment_deleted

from .models import Attachment


@receiver(post_save, sender=Attachment)
def attachment_realtime_added(sender, instance, created, **kwargs):
    if created:
        on_commit(lambda: publish_attachment_added(instance))


@receiver(post_delete, sender=Attachment)
def attachment_realtime_deleted(sender, instance, **kwargs):
    attachment_id = instance.pk
    task_id = instance.task_id
    on_commit(lambda: publish_attachment_deleted(attachment_id, task_id))
