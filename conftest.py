from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any

import pytest
from asgiref.sync import async_to_sync
from rest_framework.test import APIClient
from socketio.packet import Packet

from projectflow.realtime.registry import NAMESPACE
from projectflow.realtime.registry import room_for_project
from projectflow.realtime.socketio import registry
from projectflow.realtime.socketio import sio
from projectflow.users.api.permissions import ROLE_ADMIN
from projectflow.users.api.permissions import ROLE_DEVELOPER
from projectflow.users.api.permissions import ROLE_PROJECT_MANAGER
from tests.factories import create_project
from tests.factories import create_user_with_role


@dataclass
class RealtimeRecorder:
    """In-process Socket.IO connections that record every event they receive.

    Connections are registered with the server's client manager under an
    Engine.IO id equal to their name, so rooms, emits and disconnect cleanup
    are the real ones; only the final packet write is captured.
    """

    sent: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)
    sids: dict[str, str] = field(default_factory=dict)

    async def __call__(self, eio_sid: str, eio_pkt: Any) -> None:
        event, payload = Packet(encoded_packet=eio_pkt.data).data
        self.sent.append((eio_sid, event, payload))

    def connect(self, name: str) -> str:
        """Return the Socket.IO sid of connection ``name``, connecting it once."""
        if name not in self.sids:
            self.sids[name] = async_to_sync(sio.manager.connect)(name, NAMESPACE)
        return self.sids[name]

    def join(self, name: str, project_id: int) -> str:
        sid = self.connect(name)
        async_to_sync(registry.join)(sid, room_for_project(project_id))
        return sid

    def drop(self, name: str) -> None:
        sid = self.sids.pop(name, None)
        if sid is not None:
            async_to_sync(sio.manager.disconnect)(sid, NAMESPACE)

    def drop_all(self) -> None:
        for name in list(self.sids):
            self.drop(name)

    def events_for(self, name: str) -> list[tuple[str, dict[str, Any]]]:
        return [(event, payload) for to, event, payload in self.sent if to == name]

    def names(self) -> list[str]:
        return [event for _, event, _ in self.sent]


@pytest.fixture
def realtime(monkeypatch):
    recorder = RealtimeRecorder()
    monkeypatch.setattr(sio, "_send_eio_packet", recorder)
    yield recorder
    recorder.drop_all()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_user(db):
    return create_user_with_role("admin", groups=[ROLE_ADMIN], is_staff=True)


@pytest.fixture
def manager_user(db):
    return create_user_with_role(
        "manager",
        groups=[ROLE_PROJECT_MANAGER],
        first_name="Maria",
        last_name="Lopez",
    )


@pytest.fixture
def developer_user(db):
    return create_user_with_role(
        "dev",
        groups=[ROLE_DEVELOPER],
        first_name="Dana",
        last_name="Kim",
    )


@pytest.fixture
def plain_user(db):
    return create_user_with_role("viewer")


@pytest.fixture
def project(manager_user):
    return create_project(manager_user)
