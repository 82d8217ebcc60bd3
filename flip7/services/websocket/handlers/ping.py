"""Keep-alive: clients ping, the server answers with its clock."""

from flip7.schemas.ws import MessageType, PongMessage

from . import handler
from .base import HandlerContext, HandlerResult


@handler(MessageType.PING)
async def handle_ping(ctx: HandlerContext) -> HandlerResult:
    # The endpoint already refreshed last_seen for this socket
    return HandlerResult(success=True, response=PongMessage())
