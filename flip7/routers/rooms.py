"""REST endpoints for inspecting rooms."""

import logging

from fastapi import APIRouter, HTTPException, status

from flip7.services.room.service import get_room_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("/{room_id}")
async def get_room_state(room_id: str) -> dict:
    """Return the room's current full game state.

    Same snapshot the WebSocket broadcasts, camelCase keys included.

    Raises:
        HTTPException 404: If no client has connected to this room yet.
    """
    room = get_room_service().get_room(room_id)
    if room is None:
        logger.debug("GET /rooms/%s - not found", room_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Room not found",
        )
    return room.state.model_dump(mode="json", by_alias=True)
