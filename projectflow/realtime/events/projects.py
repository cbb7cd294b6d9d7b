"""Project board publishers.

Each ``publish_*`` helper is registered with ``transaction.on_commit`` by the
owning app's signals, so it runs only after the write committed. Publishing
is best-effort: failures are logged and never reach the mutation's caller.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING
from typing import Any

from django.utils import timezone

from projectflow.realtime.socketio import broadcast_to_project
from projectflow.tasks.models import ProjectTask

if TYPE_CHECKING:  # import for type checking only
    from datetime import datetime

    from projectflow.attachments.models import Attachment
    from projectflow.projects.models import Project
    from projectflow.timetracking.models import TimeEntry

logger = logging.getLogger(__name__)

TASK_CREATED = "TaskCreated"
TASK_UPDATED = "TaskUpdated"
TASK_DELETED = "TaskDeleted"
PROJECT_UPDATED = "ProjectUpdated"
TIMER_STARTED = "TimerStarted"
TIMER_STOPPED = "TimerStopped"
ATTACHMENT_ADDED = "AttachmentAdded"
ATTACHMENT_DELETED = "AttachmentDeleted"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _best_effort(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            func(*args, **kwargs)
        except Exception:
            logger.exception("Realtime publish failed in %s", func.__name__)

    return wrapper


def build_task_payload(task: ProjectTask, timestamp_field: str) -> dict[str, Any]:
    timestamp_key = "createdAt" if timestamp_field == "created_at" else "updatedAt"
    return {
        "id": task.id,
        "title": task.title,
        "status": int(task.status),
        "priority": int(task.priority),
        "projectId": task.project_id,
        "assignedToId": task.assigned_to_id,
        timestamp_key: _iso(getattr(task, timestamp_field)),
    }


@_best_effort
def publish_task_created(task: ProjectTask) -> None:
    payload = build_task_payload(task, "created_at")
    broadcast_to_project(task.project_id, TASK_CREATED, payload)
    logger.info(
        "Sent %s for task %s to project %s", TASK_CREATED, task.id, task.project_id
    )


@_best_effort
def publish_task_updated(task: ProjectTask) -> None:
    payload = build_task_payload(task, "updated_at")
    broadcast_to_project(task.project_id, TASK_UPDATED, payload)
    logger.info(
        "Sent %s for task %s to project %s", TASK_UPDATED, task.id, task.project_id
    )


@_best_effort
def publish_task_deleted(task_id: int, project_id: int) -> None:
    payload = {
        "id": task_id,
        "projectId": project_id,
        "deletedAt": _iso(timezone.now()),
    }
    broadcast_to_project(project_id, TASK_DELETED, payload)
    logger.info("Sent %s for task %s to project %s", TASK_DELETED, task_id, project_id)


@_best_effort
def publish_project_updated(project: Project) -> None:
    payload = {
        "id": project.id,
        "name": project.name,
        "status": int(project.status),
        "updatedAt": _iso(project.updated_at),
    }
    broadcast_to_project(project.id, PROJECT_UPDATED, payload)
    logger.info("Sent %s for project %s", PROJECT_UPDATED, project.id)


@_best_effort
def publish_timer_started(entry: TimeEntry) -> None:
    task = entry.task
    payload = {
        "taskId": entry.task_id,
        "userId": entry.user_id,
        "userName": entry.user.display_name,
        "startTime": _iso(entry.start_time),
        "taskTitle": task.title,
    }
    broadcast_to_project(task.project_id, TIMER_STARTED, payload)
    logger.info(
        "Sent %s for task %s by user %s", TIMER_STARTED, entry.task_id, entry.user_id
    )


@_best_effort
def publish_timer_stopped(entry: TimeEntry) -> None:
    task = entry.task
    payload = {
        "taskId": entry.task_id,
        "userId": entry.user_id,
        "userName": entry.user.display_name,
        "durationMinutes": entry.duration_minutes,
        "taskTitle": task.title,
    }
    broadcast_to_project(task.project_id, TIMER_STOPPED, payload)
    logger.info(
        "Sent %s for task %s by user %s", TIMER_STOPPED, entry.task_id, entry.user_id
    )


@_best_effort
def publish_attachment_added(attachment: Attachment) -> None:
    payload = {
        "attachmentId": attachment.id,
        "fileName": attachment.file_name,
        "taskId": attachment.task_id,
        "uploadedById": attachment.uploaded_by_id,
        "createdAt": _iso(attachment.created_at),
    }
    broadcast_to_project(attachment.task.project_id, ATTACHMENT_ADDED, payload)
    logger.info("Sent %s for attachment %s", ATTACHMENT_ADDED, attachment.id)


@_best_effort
def publish_attachment_deleted(attachment_id: int, task_id: int) -> None:
    # The attachment row is gone; resolve the project through the task.
    project_id = (
        ProjectTask.objects.filter(pk=task_id)
        .values_list("project_id", flat=True)
        .first()
    )
    if project_id is None:
        logger.info(
            "Skipped %s for attachment %s: task %s not found",
            ATTACHMENT_DELETED,
            attachment_id,
            task_id,
        )
        return

    payload = {"attachmentId": attachment_id, "taskId": task_id}
    broadcast_to_project(project_id, ATTACHMENT_DELETED, payload)
    logger.info("Sent %s for attachment %s", ATTACHMENT_DELETED, attachment_id)
