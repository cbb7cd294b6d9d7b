"""Client-side subscription to one project's realtime events.

One ``ProjectSubscription`` owns one Socket.IO connection, at most one joined
project group and a name -> handler table. It is the Python counterpart of
the browser task board's connection logic and is used by the
``watch_project`` management command.

States::

    DISCONNECTED --connect()--> CONNECTING --handshake--> CONNECTED
    CONNECTED --transport drop--> CONNECTING --reconnect--> CONNECTED
    CONNECTED or CONNECTING --disconnect()--> DISCONNECTED

Reconnection (exponential backoff with jitter, unlimited attempts) is the
transport's own; the subscription re-joins its project group afterwards
because the server forgets memberships of dropped connections. A failed
rejoin keeps the project current and is retried on the next reconnect.
"""

from __future__ import annotations

import enum
import inspect
import logging
from typing import TYPE_CHECKING
from typing import Any

import socketio
from django.conf import settings

if TYPE_CHECKING:
    from collections.abc import Callable

    Handler = Callable[[dict[str, Any]], Any]

logger = logging.getLogger(__name__)

JOIN_PROJECT_GROUP = "JoinProjectGroup"
LEAVE_PROJECT_GROUP = "LeaveProjectGroup"


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def build_client(**overrides: Any) -> socketio.AsyncClient:
    options = {
        "reconnection": True,
        "reconnection_attempts": 0,  # unlimited
        "reconnection_delay": settings.REALTIME_RECONNECT_DELAY,
        "reconnection_delay_max": settings.REALTIME_RECONNECT_DELAY_MAX,
        "randomization_factor": settings.REALTIME_RECONNECT_RANDOMIZATION,
        "logger": False,
        "engineio_logger": False,
    }
    options.update(overrides)
    return socketio.AsyncClient(**options)


class ProjectSubscription:
    def __init__(
        self,
        url: str,
        *,
        token: str | None = None,
        socketio_path: str | None = None,
        client: socketio.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.token = token
        self.socketio_path = socketio_path or settings.REALTIME_SOCKETIO_PATH
        self.state = ConnectionState.DISCONNECTED
        self.current_project_id: int | None = None
        self._handlers: dict[str, Handler] = {}
        self._stopping = False
        # Whether the server acknowledged membership of current_project_id
        # on the current connection.
        self._joined = False

        self._client = client if client is not None else build_client()
        self._client.on("connect", self._on_connect)
        self._client.on("disconnect", self._on_disconnect)
        self._client.on("*", self._dispatch)

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    # Connection lifecycle ---------------------------------------------------

    async def connect(self) -> bool:
        """Open the connection; ``False`` if the transport gave up."""
        if self.state is not ConnectionState.DISCONNECTED:
            return self.connected

        self._stopping = False
        self.state = ConnectionState.CONNECTING
        auth = {"token": self.token} if self.token else None
        try:
            await self._client.connect(
                self.url,
                auth=auth,
                socketio_path=self.socketio_path,
                retry=True,
            )
        except socketio.exceptions.ConnectionError as exc:
            self.state = ConnectionState.DISCONNECTED
            logger.warning("Realtime connection to %s failed: %s", self.url, exc)
            return False

        # The connect event normally fires first; this covers clients that
        # report success without emitting it.
        self.state = ConnectionState.CONNECTED
        logger.info("Realtime connected to %s", self.url)
        return True

    async def disconnect(self) -> None:
        """Leave the current project and stop the transport, reconnects included."""
        if self.state is ConnectionState.DISCONNECTED:
            return
        self._stopping = True
        await self.leave_project()
        try:
            await self._client.shutdown()
        except Exception as exc:  # noqa: BLE001 - stopping must not fail the caller
            logger.warning("Realtime disconnect error: %s", exc)
        self.state = ConnectionState.DISCONNECTED
        logger.info("Realtime disconnected from %s", self.url)

    # Project group ----------------------------------------------------------

    async def join_project(self, project_id: int) -> bool:
        """Subscribe to ``project_id``, leaving the previous project first."""
        if not self.connected:
            logger.warning("Cannot join project %s while %s", project_id, self.state)
            return False
        if self.current_project_id == project_id and self._joined:
            return True
        if self.current_project_id not in (None, project_id):
            await self.leave_project()

        if not await self._join(project_id):
            return False
        self.current_project_id = project_id
        return True

    async def leave_project(self) -> None:
        """Advisory leave of the current project; errors are only logged."""
        project_id = self.current_project_id
        if project_id is None:
            return
        self.current_project_id = None
        self._joined = False
        if not self.connected:
            return
        try:
            await self._client.call(LEAVE_PROJECT_GROUP, str(project_id))
        except socketio.exceptions.SocketIOError as exc:
            logger.warning("Failed to leave project %s group: %s", project_id, exc)
        else:
            logger.info("Left project %s group", project_id)

    async def _join(self, project_id: int) -> bool:
        try:
            ack = await self._client.call(JOIN_PROJECT_GROUP, str(project_id))
        except socketio.exceptions.SocketIOError as exc:
            logger.warning("Failed to join project %s: %s", project_id, exc)
            return False
        if isinstance(ack, dict) and ack.get("ok") is False:
            logger.warning("Server rejected join for project %s: %s", project_id, ack)
            return False

        self._joined = True
        logger.info("Joined project %s group", project_id)
        return True

    # Handlers ---------------------------------------------------------------

    def on(self, event: str, handler: Handler) -> None:
        """Register ``handler`` for ``event``, replacing any previous one."""
        self._handlers[event] = handler

    def off(self, event: str) -> None:
        self._handlers.pop(event, None)

    def clear_handlers(self) -> None:
        self._handlers.clear()

    def handlers(self) -> dict[str, Handler]:
        return dict(self._handlers)

    # Transport callbacks ----------------------------------------------------

    async def _on_connect(self) -> None:
        if self._stopping:
            # A reconnect attempt finished after disconnect(); drop it again.
            self._client.start_background_task(self._client.disconnect)
            return
        self.state = ConnectionState.CONNECTED
        project_id = self.current_project_id
        if project_id is None:
            return
        # Reconnected: the new connection id has no memberships yet. The
        # project stays current until a later connect manages to rejoin.
        self._joined = False
        if not await self._join(project_id):
            logger.warning(
                "Rejoin of project %s failed; retrying on next connect", project_id
            )

    async def _on_disconnect(self, *args: Any) -> None:
        self._joined = False
        if self._stopping:
            self.state = ConnectionState.DISCONNECTED
            return
        self.state = ConnectionState.CONNECTING
        logger.warning("Realtime connection lost; reconnecting")

    async def _dispatch(self, event: str, data: Any = None) -> None:
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug("No handler for %s", event)
            return
        try:
            result = handler(data)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Handler for %s failed", event)
