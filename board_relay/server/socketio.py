"""Socket.IO server for the game clients.

Client convention:
- Socket.IO path: ``Settings.socketio_path`` (default ``/socket.io``)
- Session: ``query.session`` or ``auth.session``; omitted means the default
  session shared by every other client that did not pick one
- ``join-session`` (session id) / ``leave-session`` switch sessions later

Every other event goes through the catch-all handler to the relay hub,
which forwards it to the rest of the sender's session.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import parse_qs

import socketio

from board_relay.config.settings import Settings
from board_relay.realtime.hub import RelayHub
from board_relay.realtime.registry import Sender

logger = logging.getLogger(__name__)

JOIN_SESSION = "join-session"
LEAVE_SESSION = "leave-session"


def _extract_session(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Session id from the connect query string, else from the auth payload.

    Behind ``socketio.ASGIApp`` the environ is engineio's translated
    request, so the query string arrives decoded under ``QUERY_STRING``.
    """
    query = parse_qs(environ.get("QUERY_STRING", ""))
    candidates = [query.get("session", [None])[0]]
    if isinstance(auth, dict):
        candidates.append(auth.get("session"))

    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def _sender_for(sio: socketio.AsyncServer, sid: str) -> Sender:
    async def send(name: str, args: tuple[Any, ...]) -> None:
        # A tuple is spread into separate arguments on the client side.
        await sio.emit(name, args, to=sid)

    return send


def create_sio(hub: RelayHub, settings: Settings) -> socketio.AsyncServer:
    """Build a Socket.IO server whose handlers feed ``hub``."""

    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.cors_origins,
        logger=False,
        engineio_logger=False,
    )

    @sio.event
    async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
        session_id = _extract_session(environ, auth)
        hub.on_connect(sid, _sender_for(sio, sid), session_id)

    @sio.event
    async def disconnect(sid: str, reason: Any | None = None):
        hub.on_disconnect(sid)

    @sio.on(JOIN_SESSION)
    async def join_session(sid: str, session_id: Any = None):
        if not isinstance(session_id, str) or not session_id.strip():
            logger.warning("Ignoring %s from %s without a session id", JOIN_SESSION, sid)
            return
        hub.join(sid, session_id.strip())

    @sio.on(LEAVE_SESSION)
    async def leave_session(sid: str, *_: Any):
        hub.leave(sid)

    @sio.on("*")
    async def relay(event: str, sid: str, *args: Any):
        hub.on_event(sid, event, *args)

    return sio
