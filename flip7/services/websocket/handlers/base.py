"""Base types and helpers for WebSocket message handlers."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from flip7.schemas.ws import ErrorMessage, WSClientMessage, WSServerMessage

if TYPE_CHECKING:
    from flip7.services.websocket.manager import ConnectionManager


@dataclass
class HandlerContext:
    """Context passed to each message handler."""

    connection_id: str
    room_id: str
    message: WSClientMessage
    manager: "ConnectionManager"


@dataclass
class HandlerResult:
    """Result returned by message handlers.

    response goes to the sender only; a result without one sends nothing.
    Room-wide state broadcasts happen inside the room service, not here.
    """

    success: bool
    response: WSServerMessage | None = None


def error_response(error_code: str, message: str) -> HandlerResult:
    """Build an error HandlerResult addressed to the sender."""
    return HandlerResult(
        success=False,
        response=ErrorMessage(error_code=error_code, message=message),
    )


def dropped() -> HandlerResult:
    """Build a HandlerResult that sends nothing."""
    return HandlerResult(success=False)
