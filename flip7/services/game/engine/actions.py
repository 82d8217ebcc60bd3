"""Game action types - explicit client inputs, separated from game state."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter


class JoinAction(BaseModel):
    """Take a seat in the lobby, or reclaim one mid-game by name."""

    type: Literal["join"] = "join"
    name: str = Field(..., min_length=1, max_length=32, description="Display name")


class StartGameAction(BaseModel):
    """Host starts the game from lobby."""

    type: Literal["start_game"] = "start_game"


class HitAction(BaseModel):
    """Current-turn player draws a card."""

    type: Literal["hit"] = "hit"


class StayAction(BaseModel):
    """Current-turn player banks their round score."""

    type: Literal["stay"] = "stay"


class UseFlipThreeAction(BaseModel):
    """Active player draws up to three cards for themselves."""

    type: Literal["use_flip_three"] = "use_flip_three"


class UseFreezeAction(BaseModel):
    """Active player is frozen and stays immediately."""

    type: Literal["use_freeze"] = "use_freeze"


class NewRoundAction(BaseModel):
    """Host deals the next round after a round ends."""

    type: Literal["new_round"] = "new_round"


class RestartAction(BaseModel):
    """Host resets everything back to the lobby."""

    type: Literal["restart"] = "restart"


# Union type for all game actions
GameAction = Annotated[
    JoinAction
    | StartGameAction
    | HitAction
    | StayAction
    | UseFlipThreeAction
    | UseFreezeAction
    | NewRoundAction
    | RestartAction,
    Field(discriminator="type"),
]

_game_action_adapter: TypeAdapter[GameAction] = TypeAdapter(GameAction)


def build_action_from_payload(payload: dict) -> GameAction:
    """Build a typed action from a raw message dict.

    Args:
        payload: Dict with a 'type' key and action-specific fields.

    Returns:
        The appropriate GameAction subtype.

    Raises:
        pydantic.ValidationError: If type is missing, unknown, or fields are invalid.
    """
    if isinstance(payload.get("name"), str):
        payload = {**payload, "name": payload["name"].strip()}
    return _game_action_adapter.validate_python(payload)
