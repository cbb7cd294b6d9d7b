"""End-to-end realtime flows: REST mutation -> publisher -> group -> client."""

from datetime import timedelta

import pytest
from asgiref.sync import async_to_sync
from django.db import transaction
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from socketio.packet import Packet

from projectflow.attachments.models import Attachment
from projectflow.realtime import socketio as rt
from projectflow.realtime.client import ProjectSubscription
from projectflow.realtime.handlers import InvalidationLog
from projectflow.realtime.handlers import ToastLog
from projectflow.realtime.handlers import build_project_handlers
from projectflow.realtime.registry import NAMESPACE
from projectflow.realtime.socketio import broadcast_to_project
from projectflow.realtime.socketio import registry
from projectflow.realtime.socketio import sio
from projectflow.tasks.models import ProjectTask
from projectflow.timetracking.models import TimeEntry
from tests.factories import create_task

pytestmark = pytest.mark.django_db


class LoopbackClient:
    """Client transport wired straight to the server handlers in-process.

    The connection is registered with the server's client manager under an
    Engine.IO id equal to ``name``; packets the server writes to that id are
    decoded and dispatched to the client's catch-all handler.
    """

    def __init__(self, name):
        self.name = name
        self.sid = None
        self.handlers = {}

    def on(self, event, handler=None):
        self.handlers[event] = handler

    async def connect(self, url, **kwargs):
        self.sid = await sio.manager.connect(self.name, NAMESPACE)
        await self.handlers["connect"]()

    async def call(self, event, data=None):
        if event == "JoinProjectGroup":
            return await rt.join_project_group(self.sid, data)
        return await rt.leave_project_group(self.sid, data)

    async def shutdown(self):
        await rt.disconnect(self.sid, "client disconnect")
        await sio.manager.disconnect(self.sid, NAMESPACE)
        await self.handlers["disconnect"]("client disconnect")

    async def deliver(self, event, payload):
        await self.handlers["*"](event, payload)


@pytest.fixture
def network(monkeypatch):
    """Connected loopback clients keyed by name; server writes reach them."""
    clients = {}

    async def send(eio_sid, eio_pkt):
        event, payload = Packet(encoded_packet=eio_pkt.data).data
        await clients[eio_sid].deliver(event, payload)

    monkeypatch.setattr(sio, "_send_eio_packet", send)
    yield clients
    for client in clients.values():
        if sio.manager.is_connected(client.sid, NAMESPACE):
            async_to_sync(sio.manager.disconnect)(client.sid, NAMESPACE)


def subscribe(network, name, project_id=None):
    client = LoopbackClient(name)
    network[name] = client
    sub = ProjectSubscription("http://loopback", token="jwt", client=client)
    async_to_sync(sub.connect)()
    if project_id is not None:
        async_to_sync(sub.join_project)(project_id)
    return sub, client.sid


def test_broadcast_reaches_every_member_and_nobody_else(realtime):
    realtime.join("A", 42)
    realtime.join("B", 42)
    payload = {"id": 7, "projectId": 42, "title": "Fix bug"}

    broadcast_to_project(42, "TaskCreated", payload)

    assert realtime.events_for("A") == [("TaskCreated", payload)]
    assert realtime.events_for("B") == [("TaskCreated", payload)]
    assert realtime.events_for("C") == []


def test_broadcast_to_empty_group_is_silent(realtime):
    assert broadcast_to_project(42, "TaskCreated", {"id": 1}) == 0
    assert realtime.sent == []


def test_late_joiner_does_not_receive_earlier_events(realtime):
    realtime.join("A", 42)
    broadcast_to_project(42, "TaskCreated", {"id": 1})
    realtime.join("B", 42)

    assert realtime.events_for("B") == []


def test_switching_projects_through_client_leaves_previous_group(network):
    sub, sid = subscribe(network, "A", 42)

    async_to_sync(sub.join_project)(99)

    assert registry.groups_for(sid) == {"project:99"}


def test_joining_without_leave_keeps_both_subscriptions(realtime):
    # Bypasses the client's leave-before-join: the registry keeps both groups.
    sid = realtime.connect("A")
    async_to_sync(rt.join_project_group)(sid, 42)
    async_to_sync(rt.join_project_group)(sid, 99)

    broadcast_to_project(42, "TaskCreated", {"id": 1})

    assert registry.groups_for(sid) == {"project:42", "project:99"}
    assert realtime.events_for("A") == [("TaskCreated", {"id": 1})]


def test_disconnect_stops_delivery(network):
    seen = []
    sub, sid = subscribe(network, "A", 42)
    sub.on("TaskCreated", seen.append)
    async_to_sync(sub.disconnect)()

    assert broadcast_to_project(42, "TaskCreated", {"id": 1}) == 0
    assert seen == []
    assert registry.groups_for(sid) == frozenset()


def test_subscribed_client_receives_broadcast(network):
    seen = []
    sub, _ = subscribe(network, "A", 42)
    sub.on("TaskCreated", seen.append)

    broadcast_to_project(42, "TaskCreated", {"id": 1})

    assert seen == [{"id": 1}]


def test_task_board_sees_created_task(
    api_client, developer_user, project, network, django_capture_on_commit_callbacks
):
    cache, toasts = InvalidationLog(), ToastLog()
    sub, _ = subscribe(network, "board", project.id)
    for event, handler in build_project_handlers(project.id, cache, toasts).items():
        sub.on(event, handler)
    api_client.force_authenticate(user=developer_user)

    with django_capture_on_commit_callbacks(execute=True):
        res = api_client.post(
            reverse("api_v1:tasks-list"),
            {"title": "Fix bug", "project": project.id},
            format="json",
        )

    assert res.status_code == status.HTTP_201_CREATED
    assert [(t.level, t.title) for t in toasts.toasts] == [("success", "Task Created")]
    assert cache.keys == [("tasks", project.id)]


def test_failed_store_write_publishes_nothing(
    project, realtime, django_capture_on_commit_callbacks
):
    realtime.join("A", project.id)

    with django_capture_on_commit_callbacks(execute=True):
        with pytest.raises(RuntimeError), transaction.atomic():
            create_task(project, title="Never lands")
            raise RuntimeError("disk full")  # noqa: EM101

    assert realtime.sent == []


def test_timer_stop_publishes_once_with_elapsed_minutes(
    api_client,
    developer_user,
    project,
    realtime,
    django_capture_on_commit_callbacks,
):
    task = create_task(project)
    entry = TimeEntry.objects.create(
        task=task,
        user=developer_user,
        start_time=timezone.now() - timedelta(minutes=52, seconds=30),
    )
    realtime.join("A", project.id)
    api_client.force_authenticate(user=developer_user)

    with django_capture_on_commit_callbacks(execute=True):
        res = api_client.post(
            reverse("api_v1:time-entries-stop", kwargs={"pk": entry.id})
        )

    assert res.status_code == status.HTTP_200_OK
    stopped = [p for e, p in realtime.events_for("A") if e == "TimerStopped"]
    assert len(stopped) == 1
    assert stopped[0]["durationMinutes"] == 52
    assert stopped[0]["taskId"] == task.id


def test_attachment_delete_for_vanished_task_is_silent(
    api_client,
    admin_user,
    project,
    realtime,
    django_capture_on_commit_callbacks,
):
    task = create_task(project)
    attachment = Attachment.objects.create(
        file="attachments/notes.txt",
        file_name="notes.txt",
        task=task,
        uploaded_by=admin_user,
    )
    realtime.join("A", project.id)
    api_client.force_authenticate(user=admin_user)

    with django_capture_on_commit_callbacks(execute=True):
        res = api_client.delete(
            reverse("api_v1:attachments-detail", kwargs={"pk": attachment.id})
        )
        # The task goes away before the attachment notification runs.
        ProjectTask.objects.filter(pk=task.id).delete()

    assert res.status_code == status.HTTP_204_NO_CONTENT
    assert "AttachmentDeleted" not in realtime.names()
    assert realtime.names() == ["TaskDeleted"]
