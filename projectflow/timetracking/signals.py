import logging

from django.db.models.signals import post_save
from django.db.models.signals import pre_save
from django.db.transaction import on_commit
from django.dispatch import receiver

from projectflow.realtime.events.projects import publish_timer_started
from projectflow.realtime.events.projects import publish_timer_stopped

from .models import TimeEntry

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=TimeEntry)
def store_old_end_time(sender, instance, **kwargs):
    if instance.pk:
        instance._old_end_time = (  # noqa: SLF001
            TimeEntry.objects.filter(pk=instance.pk)
            .values_list("end_time", flat=True)
            .first()
        )
    else:
        instance._old_end_time = None  # noqa: SLF001


@receiver(post_save, sender=TimeEntry)
def timer_realtime_updates(sender, instance, created, **kwargs):
    if created:
        on_commit(lambda: publish_timer_started(instance))
    # Only the running -> stopped transition is a "timer stopped" mutation.
    elif getattr(instance, "_old_end_time", None) is None and instance.end_time:
        logger.debug(
            "Timer %s stopped after %s minutes",
            instance.pk,
            instance.duration_minutes,
        )
        on_commit(lambda: publish_timer_stopped(instance))
