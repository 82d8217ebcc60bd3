"""Handler for game action messages (join, hit, stay, ...)."""

import logging

from pydantic import ValidationError

from flip7.schemas.game_engine import GameState
from flip7.schemas.ws import MessageType, StateMessage
from flip7.services.game import DeckExhaustedError, build_action_from_payload
from flip7.services.room.service import get_room_service

from . import handler
from .base import HandlerContext, HandlerResult, dropped, error_response

logger = logging.getLogger(__name__)


@handler(
    MessageType.JOIN,
    MessageType.START_GAME,
    MessageType.HIT,
    MessageType.STAY,
    MessageType.USE_FLIP_THREE,
    MessageType.USE_FREEZE,
    MessageType.NEW_ROUND,
    MessageType.RESTART,
)
async def handle_game_action(ctx: HandlerContext) -> HandlerResult:
    """Handle a game action by running it through the room's engine.

    Flow:
    1. Build a typed action from the message (malformed input is dropped)
    2. Apply it to the room's state
    3. On success the full state is broadcast while the room is still locked;
       a rejection is reported to the sender only

    Returns:
        HandlerResult carrying an error response, or nothing.
    """
    try:
        action = build_action_from_payload(ctx.message.model_dump(mode="json"))
    except ValidationError as e:
        logger.warning(
            "Dropping malformed %s message from connection %s: %s",
            ctx.message.type.value,
            ctx.connection_id,
            e.errors(include_url=False),
        )
        return dropped()

    async def publish(state: GameState) -> None:
        await ctx.manager.send_to_room(ctx.room_id, StateMessage(state=state))

    room_service = get_room_service()
    try:
        result = await room_service.apply_action(
            ctx.room_id, action, ctx.connection_id, publish=publish
        )
    except DeckExhaustedError:
        logger.exception(
            "Deck exhausted in room %s while processing %s", ctx.room_id, action.type
        )
        return error_response("INTERNAL_ERROR", "The deck ran out of cards")

    if result.success and result.state is not None:
        logger.info(
            "Game action applied for connection %s in room %s: %s",
            ctx.connection_id,
            ctx.room_id,
            action.type,
        )
        return HandlerResult(success=True)

    if result.is_ignored:
        logger.debug("Game action %s ignored for connection %s", action.type, ctx.connection_id)
        return dropped()

    logger.info(
        "Game action rejected for connection %s in room %s: %s - %s",
        ctx.connection_id,
        ctx.room_id,
        result.error_code,
        result.error_message,
    )
    return error_response(
        result.error_code or "PROCESSING_ERROR",
        result.error_message or "Failed to process action",
    )
