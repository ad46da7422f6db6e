"""
Board Relay - Relay Hub

Accepts gameplay events from one player and fans them out to every other
player in the same session. The hub keeps no game state: payloads are
passed through untouched, nothing is acknowledged and nothing is replayed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Any

from board_relay.config.settings import Settings
from board_relay.realtime.events import (
    RelayEvent,
    UnknownEventError,
    parse_event,
)
from board_relay.realtime.registry import Connection, ConnectionRegistry, Sender

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Envelope:
    """Raw inbound event waiting for the relay task."""

    sid: str
    session_id: str
    name: str
    args: tuple[Any, ...]


class RelayHub:
    """Connection registry plus a single relay task.

    Transport callbacks only touch the registry and enqueue envelopes; the
    relay task takes envelopes off the inbound queue one at a time, in
    arrival order, and hands each recipient a copy on its own outbound
    queue. Everything runs on one event loop.

    Example:
        ```python
        hub = RelayHub()
        hub.on_connect("a", send_a)
        hub.on_connect("b", send_b)
        hub.on_event("a", "dice-roll", 3, 5)   # send_b("dice-roll", (3, 5))
        ```
    """

    def __init__(
        self,
        *,
        default_session: str = "global",
        strict_vocabulary: bool = True,
        outbound_queue_size: int = 256,
    ) -> None:
        self.default_session = default_session
        self.strict_vocabulary = strict_vocabulary
        self.outbound_queue_size = outbound_queue_size
        self.registry = ConnectionRegistry()
        self._inbound: asyncio.Queue[_Envelope] = asyncio.Queue()
        self._relay_task: asyncio.Task | None = None
        self._relayed = 0
        self._rejected = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> RelayHub:
        return cls(
            default_session=settings.default_session,
            strict_vocabulary=settings.strict_vocabulary,
            outbound_queue_size=settings.outbound_queue_size,
        )

    # -- Lifecycle -------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._relay_task is not None and not self._relay_task.done()

    def start(self) -> None:
        """Start the relay task if it is not already running."""
        if not self.running:
            self._relay_task = asyncio.get_running_loop().create_task(
                self._relay_loop(), name="relay-hub"
            )
            logger.debug("Relay task started")

    async def stop(self) -> None:
        """Close every connection and stop the relay task."""
        for connection in self.registry:
            self.on_disconnect(connection.sid)

        task, self._relay_task = self._relay_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        # Unprocessed events are discarded, never replayed after a restart.
        discarded = 0
        while True:
            try:
                self._inbound.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._inbound.task_done()
            discarded += 1
        self._rejected += discarded
        if discarded:
            logger.warning("Discarded %d queued event(s) on shutdown", discarded)
        logger.info("Relay hub stopped (%d events relayed)", self._relayed)

    async def drain(self) -> None:
        """Wait until queued events are fanned out and written."""
        if self.running:
            await self._inbound.join()
        await asyncio.gather(*(connection.flush() for connection in self.registry))

    # -- Transport callbacks ---------------------------------------------

    def on_connect(
        self,
        sid: str,
        send: Sender,
        session_id: str | None = None,
    ) -> Connection:
        """
        Register a newly accepted connection.

        Args:
            sid: Transport-assigned connection id.
            send: Coroutine function writing one event to this client.
            session_id: Session to join, the default session when None.

        Returns:
            The registered connection. A previous connection with the same
            id is closed and replaced.
        """
        self.start()
        connection = Connection(
            sid,
            send,
            session_id or self.default_session,
            queue_size=self.outbound_queue_size,
        )
        previous = self.registry.register(connection)
        if previous is not None:
            logger.warning("Connection %s registered twice, replacing", sid)
            previous.close()
        connection.start()

        logger.info(
            "Connection %s joined session %s (%d connected)",
            sid, connection.session_id, len(self.registry),
        )
        return connection

    def on_disconnect(self, sid: str) -> bool:
        """Forget a connection. Returns False if it was already gone."""
        connection = self.registry.deregister(sid)
        if connection is None:
            logger.debug("Disconnect for unknown connection %s", sid)
            return False

        connection.close()
        logger.info(
            "Connection %s left session %s (%d connected)",
            sid, connection.session_id, len(self.registry),
        )
        return True

    def on_event(self, sid: str, name: str, *args: Any) -> None:
        """Queue an event from ``sid`` for the rest of its session.

        Fire-and-forget: the sender is never told whether, or to whom, the
        event was delivered.
        """
        connection = self.registry.get(sid)
        if connection is None:
            self._rejected += 1
            logger.debug("Dropping %r from unknown connection %s", name, sid)
            return

        self.start()
        self._inbound.put_nowait(
            _Envelope(sid=sid, session_id=connection.session_id, name=name, args=args)
        )

    def join(self, sid: str, session_id: str) -> str | None:
        """Move a connection into ``session_id``.

        Returns:
            The session it left, or None if the connection is unknown.
        """
        previous = self.registry.move(sid, session_id)
        if previous is None:
            logger.debug("Join for unknown connection %s", sid)
        elif previous != session_id:
            logger.info("Connection %s moved from %s to %s", sid, previous, session_id)
        return previous

    def leave(self, sid: str) -> str | None:
        """Send a connection back to the default session."""
        return self.join(sid, self.default_session)

    def stats(self) -> dict[str, Any]:
        return {
            "connections": len(self.registry),
            "sessions": self.registry.sessions(),
            "backlog": self._inbound.qsize(),
            "relayed": self._relayed,
            "rejected": self._rejected,
            "dropped": sum(connection.dropped for connection in self.registry),
        }

    # -- Relay task ------------------------------------------------------

    async def _relay_loop(self) -> None:
        while True:
            envelope = await self._inbound.get()
            try:
                self._dispatch(envelope)
            except Exception:
                logger.exception(
                    "Relay failed for %r from %s", envelope.name, envelope.sid
                )
            finally:
                self._inbound.task_done()

    def _dispatch(self, envelope: _Envelope) -> int:
        """Fan one envelope out. Returns the number of recipients queued."""
        try:
            event = parse_event(
                envelope.name,
                envelope.args,
                sender_id=envelope.sid,
                session_id=envelope.session_id,
                strict=self.strict_vocabulary,
            )
        except UnknownEventError:
            self._rejected += 1
            logger.debug("Ignoring unknown event %r from %s", envelope.name, envelope.sid)
            return 0
        if event.is_known and len(event.args) != event.event.arity:
            logger.debug(
                "Relaying %r from %s with %d argument(s), clients expect %d",
                event.name, envelope.sid, len(event.args), event.event.arity,
            )

        return self._fanout(event)

    def _fanout(self, event: RelayEvent) -> int:
        targets = self.registry.snapshot(event.session_id, exclude=event.sender_id)
        queued = sum(1 for target in targets if target.deliver(event.name, event.args))

        self._relayed += 1
        logger.debug(
            "Relayed %r from %s to %d/%d in session %s",
            event.name, event.sender_id, queued, len(targets), event.session_id,
        )
        return queued
