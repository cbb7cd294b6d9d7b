"""Task board reactions to project events.

Each handler invalidates the cached queries that the event makes stale and
shows a short toast. ``cache`` needs ``invalidate(key)``; ``toasts`` needs
``success``/``info``/``warning`` taking ``(title, message)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Protocol

from projectflow.realtime.events.projects import ATTACHMENT_ADDED
from projectflow.realtime.events.projects import ATTACHMENT_DELETED
from projectflow.realtime.events.projects import PROJECT_UPDATED
from projectflow.realtime.events.projects import TASK_CREATED
from projectflow.realtime.events.projects import TASK_DELETED
from projectflow.realtime.events.projects import TASK_UPDATED
from projectflow.realtime.events.projects import TIMER_STARTED
from projectflow.realtime.events.projects import TIMER_STOPPED

logger = logging.getLogger(__name__)

TASK_STATUS_NAMES = ("To Do", "In Progress", "Review", "Done")
PROJECT_STATUS_NAMES = ("Planning", "Active", "On Hold", "Completed")


class Cache(Protocol):
    def invalidate(self, key: tuple) -> None: ...


class Toasts(Protocol):
    def success(self, title: str, message: str) -> None: ...

    def info(self, title: str, message: str) -> None: ...

    def warning(self, title: str, message: str) -> None: ...


@dataclass
class InvalidationLog:
    """Records invalidated keys in order; enough for a headless board."""

    keys: list[tuple] = field(default_factory=list)

    def invalidate(self, key: tuple) -> None:
        self.keys.append(key)
        logger.debug("Invalidated %s", key)


@dataclass
class Toast:
    level: str
    title: str
    message: str


@dataclass
class ToastLog:
    toasts: list[Toast] = field(default_factory=list)
    echo: Any = None

    def _push(self, level: str, title: str, message: str) -> None:
        toast = Toast(level, title, message)
        self.toasts.append(toast)
        if self.echo is not None:
            self.echo(toast)

    def success(self, title: str, message: str) -> None:
        self._push("success", title, message)

    def info(self, title: str, message: str) -> None:
        self._push("info", title, message)

    def warning(self, title: str, message: str) -> None:
        self._push("warning", title, message)


def _label(names: tuple[str, ...], value: Any) -> str:
    if isinstance(value, int) and 0 <= value < len(names):
        return names[value]
    return str(value)


def build_project_handlers(project_id: int, cache: Cache, toasts: Toasts):
    """Return ``{event name: handler}`` for the board of ``project_id``."""
    tasks_key = ("tasks", project_id)

    def for_this_project(payload: dict[str, Any]) -> bool:
        return payload.get("projectId") == project_id

    def on_task_created(payload):
        if not for_this_project(payload):
            return
        toasts.success("Task Created", f'"{payload.get("title")}" was added')
        cache.invalidate(tasks_key)

    def on_task_updated(payload):
        if not for_this_project(payload):
            return
        status = _label(TASK_STATUS_NAMES, payload.get("status"))
        toasts.info("Task Updated", f'"{payload.get("title")}" moved to {status}')
        cache.invalidate(tasks_key)

    def on_task_deleted(payload):
        if not for_this_project(payload):
            return
        toasts.warning("Task Deleted", f"Task #{payload.get('id')} was removed")
        cache.invalidate(tasks_key)

    def on_project_updated(payload):
        if payload.get("id") != project_id:
            return
        status = _label(PROJECT_STATUS_NAMES, payload.get("status"))
        toasts.info("Project Updated", f'"{payload.get("name")}" is now {status}')
        cache.invalidate(("project", project_id))

    def on_timer_started(payload):
        if not payload.get("taskId"):
            return
        toasts.info(
            "Timer Started",
            f'{payload.get("userName")} started timer on "{payload.get("taskTitle")}"',
        )
        cache.invalidate(tasks_key)
        cache.invalidate(("activeTimer",))

    def on_timer_stopped(payload):
        if not payload.get("taskId"):
            return
        toasts.success(
            "Timer Stopped",
            f"{payload.get('userName')} logged "
            f"{payload.get('durationMinutes')} minutes",
        )
        cache.invalidate(tasks_key)
        cache.invalidate(("activeTimer",))

    def on_attachment_added(payload):
        toasts.info("Attachment Added", f"{payload.get('fileName')} uploaded")
        cache.invalidate(("attachments", payload.get("taskId")))

    def on_attachment_deleted(payload):
        toasts.warning("Attachment Deleted", "File removed from task")
        cache.invalidate(("attachments", payload.get("taskId")))

    return {
        TASK_CREATED: on_task_created,
        TASK_UPDATED: on_task_updated,
        TASK_DELETED: on_task_deleted,
        PROJECT_UPDATED: on_project_updated,
        TIMER_STARTED: on_timer_started,
        TIMER_STOPPED: on_timer_stopped,
        ATTACHMENT_ADDED: on_attachment_added,
        ATTACHMENT_DELETED: on_attachment_deleted,
    }
