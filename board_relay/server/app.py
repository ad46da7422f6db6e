"""
Board Relay - ASGI Application

Mounts the Socket.IO server at the configured path and serves it with
uvicorn. Lobby, game and user HTTP routes live in a separate service.
"""

from __future__ import annotations

import logging

import socketio
import uvicorn

from board_relay.config.logging_config import configure_logging
from board_relay.config.settings import Settings, get_settings
from board_relay.realtime.hub import RelayHub
from board_relay.server.socketio import create_sio

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    hub: RelayHub | None = None,
) -> socketio.ASGIApp:
    """Build the ASGI application.

    Args:
        settings: Settings to use, the cached environment settings when None.
        hub: Relay hub to feed, a fresh one built from settings when None.

    Returns:
        The Socket.IO ASGI app. Shutting it down stops the hub.
    """
    settings = settings or get_settings()
    hub = hub or RelayHub.from_settings(settings)
    sio = create_sio(hub, settings)

    return socketio.ASGIApp(
        sio,
        socketio_path=settings.socketio_path,
        on_shutdown=hub.stop,
    )


def run(settings: Settings | None = None) -> None:
    """Configure logging and serve the relay until interrupted."""
    settings = settings or get_settings()
    level = configure_logging(settings)

    logger.info(
        "Relay listening on %s:%d (path /%s)",
        settings.host, settings.port, settings.socketio_path.strip("/"),
    )
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=level,
        log_config=None,
    )
