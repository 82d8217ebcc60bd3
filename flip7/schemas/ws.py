from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from flip7.schemas.game_engine import GameState


class MessageType(str, Enum):
    """WebSocket message types."""

    # Core
    PING = "ping"
    PONG = "pong"
    STATE = "state"
    ERROR = "error"

    # Game actions
    JOIN = "join"
    START_GAME = "start_game"
    HIT = "hit"
    STAY = "stay"
    USE_FLIP_THREE = "use_flip_three"
    USE_FREEZE = "use_freeze"
    NEW_ROUND = "new_round"
    RESTART = "restart"


class WSCloseCode:
    """WebSocket close codes (RFC 6455 + custom)."""

    NORMAL = 1000
    GOING_AWAY = 1001
    POLICY_VIOLATION = 1008
    INTERNAL_ERROR = 1011

    # Custom application codes (4000-4999)
    INVALID_ROOM_ID = 4003


class WSClientMessage(BaseModel):
    """Message sent from client to server.

    Only the ``type`` tag is checked here; the remaining fields are validated
    when the message is turned into a typed game action.
    """

    model_config = ConfigDict(extra="allow")

    type: MessageType


class WSServerMessage(BaseModel):
    """Message sent from server to client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: MessageType

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# --- Server message schemas ---


class StateMessage(WSServerMessage):
    """Full game state snapshot; there are no partial updates."""

    type: Literal[MessageType.STATE] = MessageType.STATE
    state: GameState


class ErrorMessage(WSServerMessage):
    """Transient error, sent only to the connection whose action was rejected."""

    type: Literal[MessageType.ERROR] = MessageType.ERROR
    error_code: str
    message: str


class PongMessage(WSServerMessage):
    type: Literal[MessageType.PONG] = MessageType.PONG
    server_time: datetime = Field(default_factory=lambda: datetime.now())
