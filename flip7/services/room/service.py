"""Room service for owning and mutating per-room game state."""

import asyncio
import logging
import random
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from flip7.config import get_settings
from flip7.schemas.game_engine import GameState
from flip7.services.game import (
    GameAction,
    ProcessResult,
    initialize_game,
    mark_disconnected,
    process_action,
)

logger = logging.getLogger(__name__)

ROOM_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

# Fans a freshly applied state out to the room
StatePublisher = Callable[[GameState], Awaitable[object]]


@dataclass
class Room:
    """A single room: the only writer of its GameState.

    Actions are applied and broadcast one at a time under the lock, in
    arrival order.
    """

    room_id: str
    state: GameState = field(default_factory=initialize_game)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class RoomService:
    """Registry of rooms, keyed by room id.

    Rooms are created on first connection and live for the process lifetime.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rooms: dict[str, Room] = {}
        self._rng = rng

    @staticmethod
    def is_valid_room_id(room_id: str) -> bool:
        return bool(ROOM_ID_PATTERN.match(room_id))

    def get_room(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def get_or_create_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            room = Room(room_id=room_id)
            self._rooms[room_id] = room
            logger.info("Room %s created", room_id)
        return room

    async def apply_action(
        self,
        room_id: str,
        action: GameAction,
        player_id: str,
        publish: StatePublisher | None = None,
    ) -> ProcessResult:
        """Run an action against the room's state and keep the result if accepted.

        Args:
            room_id: The target room.
            action: The typed client action.
            player_id: The sending connection's id.
            publish: Awaited with the new state before the lock is released,
                so snapshots leave the room in the order they were applied.

        Returns:
            The engine's ProcessResult.

        Raises:
            DeckExhaustedError: Propagated from the engine; the room state is unchanged.
        """
        room = self.get_or_create_room(room_id)
        async with room.lock:
            result = process_action(room.state, action, player_id, rng=self._rng)
            if result.success and result.state is not None:
                room.state = result.state
                if publish is not None:
                    await publish(result.state)
            return result

    async def disconnect_player(
        self,
        room_id: str,
        player_id: str,
        publish: StatePublisher | None = None,
    ) -> GameState | None:
        """Mark the player bound to player_id as disconnected.

        publish is awaited under the room lock, as in apply_action.

        Returns:
            The new state if a seat was affected, otherwise None.
        """
        room = self.get_room(room_id)
        if room is None:
            return None
        async with room.lock:
            new_state = mark_disconnected(room.state, player_id)
            if new_state is not None:
                room.state = new_state
                if publish is not None:
                    await publish(new_state)
            return new_state

    def get_room_count(self) -> int:
        return len(self._rooms)


# Global service instance
_room_service: RoomService | None = None


def get_room_service() -> RoomService:
    """Get the global RoomService instance."""
    global _room_service
    if _room_service is None:
        seed = get_settings().SHUFFLE_SEED
        _room_service = RoomService(rng=random.Random(seed) if seed is not None else None)
    return _room_service


def set_room_service(service: RoomService) -> None:
    """Set the global RoomService instance."""
    global _room_service
    _room_service = service
