from flip7.services.websocket.handlers import HandlerContext, HandlerResult, dispatch, handler
from flip7.services.websocket.manager import ConnectionManager

__all__ = [
    "ConnectionManager",
    "HandlerContext",
    "HandlerResult",
    "dispatch",
    "handler",
]
