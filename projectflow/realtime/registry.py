"""Group membership for realtime fan-out, backed by Socket.IO rooms.

A group label (``project:<id>``) is a Socket.IO room. Joining and leaving go
through ``enter_room``/``leave_room``; the server's client manager drops a
connection from every room when it disconnects, so nothing here tracks
reverse membership. Broadcasts are one ``emit(..., room=group)``; the manager
sends to each member independently, without acknowledgement, retry or
replay for connections that join later.

With a Redis client manager configured, emits reach members connected to
other worker processes too; ``members`` only reports local connections.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    import socketio

logger = logging.getLogger(__name__)

NAMESPACE = "/"


def room_for_project(project_id: int | str) -> str:
    return f"project:{int(project_id)}"


class GroupRegistry:
    """Group label -> member connections of one ``AsyncServer``.

    The registry does not limit how many groups a connection joins; leaving
    the previous project before joining another is the client's job.
    """

    def __init__(self, server: socketio.AsyncServer) -> None:
        self.server = server

    async def join(self, connection_id: str, group: str) -> None:
        await self.server.enter_room(connection_id, group, namespace=NAMESPACE)

    async def leave(self, connection_id: str, group: str) -> None:
        # No-op when the connection never joined or is already gone.
        await self.server.leave_room(connection_id, group, namespace=NAMESPACE)

    def members(self, group: str | None) -> frozenset[str]:
        participants = self.server.manager.get_participants(NAMESPACE, group)
        return frozenset(sid for sid, _ in participants)

    def groups_for(self, connection_id: str) -> frozenset[str]:
        rooms = self.server.rooms(connection_id, namespace=NAMESPACE)
        # Every connection also sits in a private room named after its sid.
        return frozenset(room for room in rooms if room != connection_id)

    def connection_count(self) -> int:
        # Room ``None`` holds every connection of the namespace.
        return len(self.members(None))

    async def broadcast(self, group: str, event: str, payload: dict[str, Any]) -> int:
        """Emit ``payload`` as ``event`` to the current members of ``group``.

        Returns how many local members the event was addressed to.
        """
        recipients = len(self.members(group))
        if not recipients:
            logger.debug("No local members in %s; emitting %s anyway", group, event)
        await self.server.emit(event, payload, room=group, namespace=NAMESPACE)
        return recipients
