"""
Board Relay Real-time Sync.

Connection registry, session membership and event fanout for multiplayer
gameplay.
"""

from board_relay.realtime.events import (
    GameEvent,
    RelayError,
    RelayEvent,
    UnknownEventError,
    parse_event,
)
from board_relay.realtime.hub import RelayHub
from board_relay.realtime.registry import Connection, ConnectionRegistry

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "GameEvent",
    "RelayError",
    "RelayEvent",
    "RelayHub",
    "UnknownEventError",
    "parse_event",
]
