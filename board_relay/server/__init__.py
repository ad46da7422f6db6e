"""
Board Relay Server.

Socket.IO transport and ASGI entrypoint around the relay hub.
"""

from board_relay.server.app import create_app, run
from board_relay.server.socketio import create_sio

__all__ = ["create_app", "create_sio", "run"]
