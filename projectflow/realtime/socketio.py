"""Global Socket.IO server for project task boards.

Frontend convention:
- URL base: ws://<host>:8000
- Socket.IO path: settings.REALTIME_SOCKETIO_PATH (default ``ws/projects``)
- Auth: ``query.token`` or ``auth.token`` (JWT access token)

Clients call ``JoinProjectGroup`` / ``LeaveProjectGroup`` with a project id
and receive the events published by ``projectflow.realtime.events``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

import socketio
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .registry import GroupRegistry
from .registry import room_for_project

logger = logging.getLogger(__name__)


def _client_manager() -> socketio.AsyncManager | None:
    # Redis lets every worker process emit to rooms joined on the others.
    if settings.REDIS_URL:
        return socketio.AsyncRedisManager(settings.REDIS_URL)
    return None


sio = socketio.AsyncServer(
    async_mode="asgi",
    client_manager=_client_manager(),
    cors_allowed_origins=list(settings.REALTIME_CORS_ALLOWED_ORIGINS),
    logger=False,
    engineio_logger=False,
)

registry = GroupRegistry(sio)


@dataclass(frozen=True)
class UserRealtimeContext:
    user_id: int
    user_name: str


@database_sync_to_async
def _get_user_context_from_access_token(token: str) -> UserRealtimeContext:
    # AccessToken raises TokenError ("Token is expired", ...) before any lookup.
    validated = AccessToken(token)
    user = JWTAuthentication().get_user(validated)
    return UserRealtimeContext(user_id=int(user.id), user_name=user.display_name)


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract JWT token from Socket.IO environ/auth.

    Handles python-socketio environ shapes across ASGI/WSGI servers.
    """

    scope: Any = environ
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            scope = inner

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token

    # Allow `auth: { token }` as fallback.
    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    return None


def _parse_project_id(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    token = _extract_token(environ, auth)
    if not token:
        msg = "unauthorized"
        raise ConnectionRefusedError(msg)

    try:
        ctx = await _get_user_context_from_access_token(token)
    except TokenError as exc:
        message = str(exc)
        if "expired" in message.lower():
            msg = "jwt_expired"
            raise ConnectionRefusedError(msg) from exc
        msg = "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except AuthenticationFailed as exc:  # user not found / inactive, etc.
        msg = "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except Exception as exc:
        logger.exception("Socket.IO connect error")
        msg = "server_error"
        raise ConnectionRefusedError(msg) from exc

    await sio.save_session(sid, {"user_id": ctx.user_id, "user_name": ctx.user_name})
    logger.info("Connection %s connected (user %s)", sid, ctx.user_id)


@sio.event
async def disconnect(sid: str, reason: Any = None):
    # Rooms are still intact here; the manager drops them after this handler.
    groups = registry.groups_for(sid)
    logger.info(
        "Connection %s disconnected (%s); left %s",
        sid,
        reason,
        sorted(groups) or "no groups",
    )


@sio.on("JoinProjectGroup")
async def join_project_group(sid: str, project_id: Any = None) -> dict[str, Any]:
    parsed = _parse_project_id(project_id)
    if parsed is None:
        logger.warning("Connection %s sent invalid project id %r", sid, project_id)
        return {"ok": False, "error": "invalid_project_id"}

    group = room_for_project(parsed)
    await registry.join(sid, group)
    logger.info("Connection %s joined project group %s", sid, parsed)
    return {"ok": True, "group": group}


@sio.on("LeaveProjectGroup")
async def leave_project_group(sid: str, project_id: Any = None) -> dict[str, Any]:
    parsed = _parse_project_id(project_id)
    if parsed is None:
        logger.warning("Connection %s sent invalid project id %r", sid, project_id)
        return {"ok": False, "error": "invalid_project_id"}

    group = room_for_project(parsed)
    # No-op when the connection never joined or was already dropped.
    await registry.leave(sid, group)
    logger.info("Connection %s left project group %s", sid, parsed)
    return {"ok": True, "group": group}


def broadcast_to_group(group: str, event: str, payload: dict[str, Any]) -> int:
    """Broadcast an event to a group from sync Django code."""

    return async_to_sync(registry.broadcast)(group, event, payload)


def broadcast_to_project(project_id: int, event: str, payload: dict[str, Any]) -> int:
    return broadcast_to_group(room_for_project(project_id), event, payload)
