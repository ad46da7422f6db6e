"""
Board Relay - Connection Registry

Live connections keyed by socket id, grouped into sessions. Each
connection owns an outbound queue drained by its own writer task so a
slow or broken client never holds up anyone else.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterator

logger = logging.getLogger(__name__)

# send(name, args) writes one event to the client's transport
Sender = Callable[[str, tuple[Any, ...]], Awaitable[None]]


class Connection:
    """One connected player.

    Events are queued with ``deliver`` and written in order by a
    background task started with ``start``. Once closed, anything still
    queued is discarded and further deliveries are dropped.
    """

    def __init__(
        self,
        sid: str,
        send: Sender,
        session_id: str,
        *,
        queue_size: int = 256,
    ) -> None:
        self.sid = sid
        self.session_id = session_id
        self.closed = False
        self.delivered = 0
        self.dropped = 0
        self._send = send
        self._outbox: asyncio.Queue[tuple[str, tuple[Any, ...]]] = asyncio.Queue(
            maxsize=queue_size
        )
        self._writer: asyncio.Task | None = None

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Connection {self.sid} session={self.session_id} {state}>"

    def start(self) -> None:
        """Start the writer task on the running event loop."""
        if self._writer is None and not self.closed:
            self._writer = asyncio.get_running_loop().create_task(
                self._write_loop(), name=f"relay-writer-{self.sid}"
            )

    def deliver(self, name: str, args: tuple[Any, ...]) -> bool:
        """Queue an event for this client without waiting on the transport.

        Returns False when the event was dropped because the connection is
        closed or its queue is full.
        """
        if self.closed:
            self.dropped += 1
            logger.debug("Dropping %r for closed connection %s", name, self.sid)
            return False
        try:
            self._outbox.put_nowait((name, args))
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Outbound queue full for %s, dropping %r (%d queued)",
                self.sid, name, self._outbox.qsize(),
            )
            return False
        return True

    @property
    def pending(self) -> int:
        """Number of events waiting to be written."""
        return self._outbox.qsize()

    async def flush(self) -> None:
        """Wait until everything queued so far has been written or dropped."""
        if self._writer is None:
            return
        await self._outbox.join()

    def close(self) -> None:
        """Stop writing and discard whatever is still queued."""
        if self.closed:
            return
        self.closed = True
        if self._writer is not None:
            self._writer.cancel()
        while True:
            try:
                self._outbox.get_nowait()
            except asyncio.QueueEmpty:
                break
            self.dropped += 1
            self._outbox.task_done()

    async def _write_loop(self) -> None:
        while True:
            name, args = await self._outbox.get()
            try:
                await self._send(name, args)
                self.delivered += 1
            except Exception:
                self.dropped += 1
                logger.exception("Failed to send %r to %s", name, self.sid)
            finally:
                self._outbox.task_done()


class ConnectionRegistry:
    """Connections by socket id plus session membership.

    Only the event loop mutates the registry. Fanout works on the
    immutable tuple returned by ``snapshot`` so a disconnect arriving
    mid-broadcast never invalidates the iteration.
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._sessions: dict[str, set[str]] = {}

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, sid: object) -> bool:
        return sid in self._connections

    def __iter__(self) -> Iterator[Connection]:
        return iter(list(self._connections.values()))

    def get(self, sid: str) -> Connection | None:
        return self._connections.get(sid)

    def register(self, connection: Connection) -> Connection | None:
        """Add a connection, returning the handle it replaced if any."""
        previous = self.deregister(connection.sid)
        self._connections[connection.sid] = connection
        self._sessions.setdefault(connection.session_id, set()).add(connection.sid)
        return previous

    def deregister(self, sid: str) -> Connection | None:
        """Remove a connection. Unknown ids are ignored."""
        connection = self._connections.pop(sid, None)
        if connection is None:
            return None
        self._discard_member(connection.session_id, sid)
        return connection

    def move(self, sid: str, session_id: str) -> str | None:
        """Put a connection in another session.

        Returns:
            The session it was in before, or None if the id is unknown.
        """
        connection = self._connections.get(sid)
        if connection is None:
            return None

        previous = connection.session_id
        if previous != session_id:
            self._discard_member(previous, sid)
            connection.session_id = session_id
            self._sessions.setdefault(session_id, set()).add(sid)
        return previous

    def sessions(self) -> dict[str, int]:
        """Session ids with their member counts."""
        return {session_id: len(members) for session_id, members in self._sessions.items()}

    def members(self, session_id: str) -> frozenset[str]:
        return frozenset(self._sessions.get(session_id, ()))

    def snapshot(self, session_id: str, exclude: str | None = None) -> tuple[Connection, ...]:
        """Open connections in a session, minus ``exclude``."""
        return tuple(
            self._connections[sid]
            for sid in self._sessions.get(session_id, ())
            if sid != exclude and not self._connections[sid].closed
        )

    def _discard_member(self, session_id: str, sid: str) -> None:
        members = self._sessions.get(session_id)
        if members is None:
            return
        members.discard(sid)
        if not members:
            del self._sessions[session_id]
