"""
Board Relay - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

from collections import defaultdict
from typing import Any

import pytest

from board_relay.realtime.hub import RelayHub


class RecordingTransport:
    """Stands in for the socket layer, remembering what each client was sent."""

    def __init__(self) -> None:
        self.received: dict[str, list[tuple[str, tuple[Any, ...]]]] = defaultdict(list)

    def sender(self, sid: str):
        async def send(name: str, args: tuple[Any, ...]) -> None:
            self.received[sid].append((name, args))

        return send

    def names(self, sid: str) -> list[str]:
        return [name for name, _ in self.received[sid]]


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def hub() -> RelayHub:
    """Hub with default settings. Async tests must ``await hub.stop()``."""
    return RelayHub()


# =============================================================================
# EVENT TEST DATA
# =============================================================================

@pytest.fixture
def sample_events() -> dict[str, tuple[Any, ...]]:
    """
    One well-formed argument tuple for every event in the vocabulary.

    Returns:
        Dict mapping wire name to its arguments
    """
    return {
        "update-players": ([{"name": "Ada", "color": "red"}, {"name": "Bo", "color": "blue"}],),
        "start-game": ({"tiles": ["wheat", "ore", "desert"]}, {"host": "Ada"}),
        "next-turn": ("Bo",),
        "message": ({"from": "Ada", "text": "gg"},),
        "settlement": ({"vertex": 12, "color": "red"},),
        "road": ({"edge": [12, 13], "color": "red"},),
        "hide-color": ("blue",),
        "dice-roll": (3, 5),
        "host-quit": (),
    }
