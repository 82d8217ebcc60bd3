"""Message handlers, looked up by the client message's ``type`` tag."""

import logging
from collections.abc import Awaitable, Callable

from flip7.schemas.ws import MessageType

from .base import HandlerContext, HandlerResult

logger = logging.getLogger(__name__)

HandlerFunc = Callable[[HandlerContext], Awaitable[HandlerResult]]

_handlers: dict[MessageType, HandlerFunc] = {}


def handler(*message_types: MessageType) -> Callable[[HandlerFunc], HandlerFunc]:
    """Register the decorated coroutine for one or more message types.

    Usage:
        @handler(MessageType.HIT, MessageType.STAY)
        async def handle_turn(ctx: HandlerContext) -> HandlerResult:
            ...
    """

    def decorator(func: HandlerFunc) -> HandlerFunc:
        for message_type in message_types:
            previous = _handlers.get(message_type)
            if previous is not None and previous is not func:
                raise ValueError(
                    f"{message_type.value} is already handled by {previous.__name__}"
                )
            _handlers[message_type] = func
        logger.debug(
            "Registered %s for %s", func.__name__, ", ".join(t.value for t in message_types)
        )
        return func

    return decorator


def registered_types() -> frozenset[MessageType]:
    return frozenset(_handlers)


async def dispatch(ctx: HandlerContext) -> HandlerResult | None:
    """Run the handler for ctx.message.type.

    Returns:
        The handler's result, or None for a type no handler accepts
        (server-to-client types such as ``state`` sent by a confused client).
    """
    func = _handlers.get(ctx.message.type)
    if func is None:
        return None
    return await func(ctx)


# Handler modules register themselves on import
from . import game  # noqa: E402, F401
from . import ping  # noqa: E402, F401

__all__ = [
    "HandlerContext",
    "HandlerResult",
    "dispatch",
    "handler",
    "registered_types",
]
