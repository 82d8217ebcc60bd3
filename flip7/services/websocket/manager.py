import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import WebSocket

from flip7.config import get_settings
from flip7.schemas.ws import WSCloseCode, WSServerMessage

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Connection:
    """One open socket, bound to a single room for its whole life.

    connection_id is also the player id the engine sees for this socket.
    """

    connection_id: str
    room_id: str
    websocket: WebSocket
    connected_at: datetime = field(default_factory=_utcnow)
    last_seen: datetime = field(default_factory=_utcnow)

    def idle_seconds(self, now: datetime) -> float:
        return (now - self.last_seen).total_seconds()


class ConnectionManager:
    """Tracks open sockets per room and fans messages out to them.

    Everything lives in process memory; a room's members are exactly the
    sockets that connected to its URL and have not gone away.
    """

    def __init__(self):
        self._settings = get_settings()
        self._connections: dict[str, Connection] = {}
        self._members: dict[str, set[str]] = {}
        self._sweeper: asyncio.Task | None = None

    async def connect(self, websocket: WebSocket, room_id: str) -> Connection:
        """Register an accepted socket as a member of room_id."""
        connection = Connection(
            connection_id=str(uuid.uuid4()),
            room_id=room_id,
            websocket=websocket,
        )
        self._connections[connection.connection_id] = connection
        self._members.setdefault(room_id, set()).add(connection.connection_id)

        logger.info(
            "Connection %s joined room %s (%d in room)",
            connection.connection_id,
            room_id,
            len(self._members[room_id]),
        )
        return connection

    async def disconnect(self, connection_id: str) -> Connection | None:
        """Forget a socket. Safe to call more than once."""
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            return None

        members = self._members.get(connection.room_id)
        if members is not None:
            members.discard(connection_id)
            if not members:
                del self._members[connection.room_id]

        logger.info("Connection %s left room %s", connection_id, connection.room_id)
        return connection

    async def heartbeat(self, connection_id: str) -> None:
        """Record activity on a socket so the sweeper leaves it alone."""
        connection = self._connections.get(connection_id)
        if connection is not None:
            connection.last_seen = _utcnow()

    def find_stale_connections(self, now: datetime | None = None) -> list[Connection]:
        now = now or _utcnow()
        timeout = self._settings.WS_CONNECTION_TIMEOUT
        return [c for c in self._connections.values() if c.idle_seconds(now) > timeout]

    async def cleanup_stale_connections(self) -> int:
        """Close sockets that have been silent past the timeout.

        The endpoint's receive loop then exits and marks the seat disconnected.

        Returns:
            Number of sockets closed.
        """
        stale = self.find_stale_connections()
        for connection in stale:
            logger.warning(
                "Closing idle connection %s in room %s (%.0fs silent)",
                connection.connection_id,
                connection.room_id,
                connection.idle_seconds(_utcnow()),
            )
            await self._close(connection, WSCloseCode.GOING_AWAY)
        return len(stale)

    async def start_cleanup_task(self) -> None:
        """Start the periodic idle-socket sweep."""
        if self._sweeper is not None:
            logger.warning("Idle sweep already running")
            return

        interval = self._settings.WS_HEARTBEAT_INTERVAL

        async def sweep() -> None:
            while True:
                await asyncio.sleep(interval)
                try:
                    await self.cleanup_stale_connections()
                except Exception:
                    logger.exception("Idle sweep failed")

        self._sweeper = asyncio.create_task(sweep())
        logger.info("Idle sweep started, every %ds", interval)

    async def stop_cleanup_task(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        logger.info("Idle sweep stopped")

    async def close_all_connections(self) -> None:
        """Close every socket, used on shutdown."""
        logger.info("Closing %d connections", len(self._connections))
        for connection in list(self._connections.values()):
            await self._close(connection, WSCloseCode.GOING_AWAY)
            await self.disconnect(connection.connection_id)

    async def _close(self, connection: Connection, code: int) -> None:
        try:
            await connection.websocket.close(code=code)
        except Exception as e:
            logger.debug("Socket %s already closed: %s", connection.connection_id, e)

    async def send_to_connection(self, connection_id: str, message: WSServerMessage) -> bool:
        """Send one message to one socket.

        A failed send drops the socket from the manager.

        Returns:
            True if the message was written.
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.debug("No open socket %s to send %s to", connection_id, message.type.value)
            return False

        try:
            await connection.websocket.send_json(message.to_wire())
        except Exception as e:
            logger.warning("Send to %s failed, dropping it: %s", connection_id, e)
            await self.disconnect(connection_id)
            return False
        return True

    async def send_to_room(
        self, room_id: str, message: WSServerMessage, exclude_connection: str | None = None
    ) -> int:
        """Send a message to every socket in a room.

        Returns:
            Number of sockets that received it.
        """
        recipients = [
            conn_id
            for conn_id in self._members.get(room_id, set())
            if conn_id != exclude_connection
        ]
        sent = 0
        for conn_id in recipients:
            if await self.send_to_connection(conn_id, message):
                sent += 1
        logger.debug("Sent %s to %d/%d sockets in room %s", message.type.value, sent, len(recipients), room_id)
        return sent

    def get_connection(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def get_room_connection_count(self, room_id: str) -> int:
        return len(self._members.get(room_id, ()))

    def get_total_connection_count(self) -> int:
        return len(self._connections)


_connection_manager: ConnectionManager | None = None


def get_connection_manager() -> ConnectionManager:
    """Get the process-wide ConnectionManager, creating it on first use."""
    global _connection_manager
    if _connection_manager is None:
        _connection_manager = ConnectionManager()
    return _connection_manager


def set_connection_manager(manager: ConnectionManager) -> None:
    global _connection_manager
    _connection_manager = manager
