import json
import logging
import time
from collections import defaultdict, deque

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from flip7.config import Settings, get_settings
from flip7.schemas.game_engine import GameState
from flip7.schemas.ws import ErrorMessage, StateMessage, WSClientMessage, WSCloseCode
from flip7.services.room.service import RoomService, get_room_service
from flip7.services.websocket.handlers import HandlerContext, dispatch
from flip7.services.websocket.manager import Connection, ConnectionManager, get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


class RateLimiter:
    """Sliding-window message limit, tracked per connection."""

    def __init__(self, max_messages: int, window: float):
        self.max_messages = max_messages
        self.window = window
        self._seen: dict[str, deque[float]] = defaultdict(deque)

    def is_allowed(self, connection_id: str) -> bool:
        now = time.monotonic()
        seen = self._seen[connection_id]
        while seen and seen[0] <= now - self.window:
            seen.popleft()
        if len(seen) >= self.max_messages:
            return False
        seen.append(now)
        return True

    def remove(self, connection_id: str) -> None:
        self._seen.pop(connection_id, None)


_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        settings = get_settings()
        _rate_limiter = RateLimiter(
            max_messages=settings.WS_MAX_MESSAGES_PER_SECOND,
            window=settings.WS_RATE_LIMIT_WINDOW,
        )
    return _rate_limiter


def _parse_client_message(connection_id: str, raw_text: str) -> WSClientMessage | None:
    """Decode a text frame; anything malformed is logged and dropped."""
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError:
        logger.warning("Dropping non-JSON frame from %s", connection_id)
        return None

    try:
        return WSClientMessage.model_validate(data)
    except ValidationError as e:
        logger.warning("Dropping untyped frame from %s: %s", connection_id, e.errors(include_url=False))
        return None


async def _admit_frame(
    connection: Connection,
    manager: ConnectionManager,
    rate_limiter: RateLimiter,
    settings: Settings,
    size: int,
) -> bool:
    """Apply size and rate limits, telling the sender when a frame is refused."""
    if size > settings.WS_MAX_MESSAGE_SIZE:
        logger.warning("Frame of %d bytes from %s exceeds limit", size, connection.connection_id)
        await manager.send_to_connection(
            connection.connection_id,
            ErrorMessage(
                error_code="MESSAGE_TOO_LARGE",
                message=f"Message exceeds maximum size of {settings.WS_MAX_MESSAGE_SIZE} bytes",
            ),
        )
        return False

    if not rate_limiter.is_allowed(connection.connection_id):
        logger.warning("Rate limit hit by %s in room %s", connection.connection_id, connection.room_id)
        await manager.send_to_connection(
            connection.connection_id,
            ErrorMessage(error_code="RATE_LIMITED", message="Too many messages, please slow down"),
        )
        return False

    return True


async def _handle_frame(connection: Connection, manager: ConnectionManager, raw_text: str) -> None:
    message = _parse_client_message(connection.connection_id, raw_text)
    if message is None:
        return

    ctx = HandlerContext(
        connection_id=connection.connection_id,
        room_id=connection.room_id,
        message=message,
        manager=manager,
    )
    result = await dispatch(ctx)
    if result is None:
        logger.debug("No handler for %s from %s", message.type.value, connection.connection_id)
        return

    if result.response:
        await manager.send_to_connection(connection.connection_id, result.response)


@router.websocket("/rooms/{room_id}/ws")
async def websocket_endpoint(websocket: WebSocket, room_id: str):
    """Real-time channel for one room.

    Clients connect with: ws://host/api/v1/rooms/<room_id>/ws

    The room is created on first connection. The new socket gets the full
    game state straight away; after every accepted action the full state is
    broadcast to everyone in the room. Rejected actions produce an error for
    the sender only. Malformed frames get no reply at all.
    """
    if not RoomService.is_valid_room_id(room_id):
        logger.warning("Refusing socket for invalid room id %r", room_id)
        await websocket.close(code=WSCloseCode.INVALID_ROOM_ID)
        return

    settings = get_settings()
    room_service = get_room_service()
    manager = get_connection_manager()
    rate_limiter = get_rate_limiter()

    await websocket.accept()
    room = room_service.get_or_create_room(room_id)
    # No room broadcast reaches this socket before its first snapshot
    async with room.lock:
        connection = await manager.connect(websocket, room_id)
        await manager.send_to_connection(connection.connection_id, StateMessage(state=room.state))

    try:
        while websocket.client_state == WebSocketState.CONNECTED:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            raw_text = frame.get("text")
            raw_bytes = frame.get("bytes")
            if not raw_text and not raw_bytes:
                continue

            await manager.heartbeat(connection.connection_id)

            size = len(raw_text.encode("utf-8")) if raw_text else len(raw_bytes)
            if not await _admit_frame(connection, manager, rate_limiter, settings, size):
                continue

            # Binary frames carry no protocol messages
            if raw_text:
                await _handle_frame(connection, manager, raw_text)

    except WebSocketDisconnect as e:
        logger.info("Socket %s closed by client, code %s", connection.connection_id, e.code)
    except Exception:
        logger.exception("Socket %s in room %s failed", connection.connection_id, room_id)
    finally:
        rate_limiter.remove(connection.connection_id)
        await manager.disconnect(connection.connection_id)

        # The seat is kept, shown as disconnected to whoever is left
        async def publish(state: GameState) -> None:
            await manager.send_to_room(room_id, StateMessage(state=state))

        await room_service.disconnect_player(room_id, connection.connection_id, publish=publish)
