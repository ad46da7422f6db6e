"""
Board Relay - Realtime Event Definitions

The closed vocabulary of gameplay events the relay forwards between
players, and the envelope each inbound event is parsed into.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class RelayError(ValueError):
    """Base class for events the relay refuses to forward."""


class UnknownEventError(RelayError):
    """Event name is not part of the game vocabulary."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown event {name!r}.")
        self.name = name


class GameEvent(Enum):
    """Events players broadcast to the rest of their session.

    Values are the names used on the wire.
    """

    UPDATE_PLAYERS = "update-players"
    START_GAME = "start-game"
    NEXT_TURN = "next-turn"
    MESSAGE = "message"
    SETTLEMENT = "settlement"
    ROAD = "road"
    HIDE_COLOR = "hide-color"
    DICE_ROLL = "dice-roll"
    HOST_QUIT = "host-quit"

    @property
    def arity(self) -> int:
        """Number of payload arguments clients normally send.

        Informational only: events are forwarded whatever they carry.
        """
        return _EVENT_ARITY[self]

    @classmethod
    def from_name(cls, name: str) -> GameEvent | None:
        """Look up an event by wire name, None when unknown."""
        return _EVENTS_BY_NAME.get(name)


# update-players(roster), start-game(board, info), dice-roll(die1, die2), ...
_EVENT_ARITY: dict[GameEvent, int] = {
    GameEvent.UPDATE_PLAYERS: 1,
    GameEvent.START_GAME: 2,
    GameEvent.NEXT_TURN: 1,
    GameEvent.MESSAGE: 1,
    GameEvent.SETTLEMENT: 1,
    GameEvent.ROAD: 1,
    GameEvent.HIDE_COLOR: 1,
    GameEvent.DICE_ROLL: 2,
    GameEvent.HOST_QUIT: 0,
}

_EVENTS_BY_NAME: dict[str, GameEvent] = {event.value: event for event in GameEvent}


@dataclass(frozen=True)
class RelayEvent:
    """One inbound event on its way to the rest of the session.

    ``args`` holds the payload exactly as the sender emitted it. The relay
    never looks inside it.
    """

    event: GameEvent | str
    sender_id: str
    session_id: str
    args: tuple[Any, ...] = ()

    @property
    def name(self) -> str:
        """Wire name of the event."""
        if isinstance(self.event, GameEvent):
            return self.event.value
        return self.event

    @property
    def is_known(self) -> bool:
        return isinstance(self.event, GameEvent)


def parse_event(
    name: str,
    args: tuple[Any, ...],
    *,
    sender_id: str,
    session_id: str,
    strict: bool = True,
) -> RelayEvent:
    """
    Build a RelayEvent from a raw event name and its arguments.

    Args:
        name: Wire name of the event.
        args: Payload arguments, kept as-is.
        sender_id: Connection the event came from.
        session_id: Session the sender belongs to.
        strict: Reject names outside the vocabulary. When False, unknown
            names are wrapped as plain strings and forwarded unchecked.

    Returns:
        The parsed event.

    Raises:
        UnknownEventError: If strict and the name is not in the vocabulary.
    """
    event = GameEvent.from_name(name)
    if event is None:
        if strict:
            raise UnknownEventError(name)
        return RelayEvent(event=name, sender_id=sender_id, session_id=session_id, args=args)

    return RelayEvent(event=event, sender_id=sender_id, session_id=session_id, args=args)
