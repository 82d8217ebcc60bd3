from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

TARGET_SCORE = 200


# Game phases
class GamePhase(str, Enum):
    LOBBY = "lobby"
    PLAYING = "playing"
    ROUND_END = "round_end"
    GAME_OVER = "game_over"


# Card kinds
class CardType(str, Enum):
    NUMBER = "number"
    FREEZE = "freeze"
    FLIP_THREE = "flip_three"
    SECOND_CHANCE = "second_chance"
    MODIFIER = "modifier"
    MULTIPLIER = "multiplier"


class WireModel(BaseModel):
    """Base for models sent to clients: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Card(WireModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: CardType
    value: int = 0  # number: 0-12, modifier: +2..+10, multiplier: 2
    label: str


class Player(WireModel):
    id: str  # connection id, rebound on reconnect
    name: str
    cards: list[Card] = []  # draw order
    score: int = 0  # cumulative across rounds
    round_score: int = 0
    busted: bool = False
    stayed: bool = False
    has_second_chance: bool = False
    connected: bool = True


# Game state for broadcasting and game flow
class GameState(WireModel):
    """Authoritative room state, broadcast in full after every accepted action.

    deck is a stack: the top card is the last element.
    """

    phase: GamePhase = GamePhase.LOBBY
    players: list[Player] = []
    current_player_index: int = 0
    deck: list[Card] = []
    discard: list[Card] = []
    round_number: int = 0
    host_id: str = ""
    target_score: int = TARGET_SCORE
    last_action: str | None = None
    winner: str | None = None

    def find_player(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.id == player_id), None)

    def find_player_index(self, player_id: str) -> int:
        return next((i for i, p in enumerate(self.players) if p.id == player_id), -1)

    @property
    def current_player(self) -> Player | None:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    def total_cards(self) -> int:
        """Cards across draw pile, discard pile and every hand."""
        return len(self.deck) + len(self.discard) + sum(len(p.cards) for p in self.players)
