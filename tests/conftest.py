"""Shared fixtures for game engine tests."""

import itertools

import pytest

from flip7.schemas.game_engine import (
    Card,
    CardType,
    GamePhase,
    GameState,
    Player,
)

# Fixed connection ids for deterministic testing
PLAYER_1_ID = "conn-1"
PLAYER_2_ID = "conn-2"
PLAYER_3_ID = "conn-3"

_card_ids = itertools.count()


def make_card(card_type: CardType, value: int = 0, label: str | None = None) -> Card:
    """Helper to create a card with a unique test id."""
    if label is None:
        label = str(value) if card_type == CardType.NUMBER else card_type.value
    return Card(id=f"test-{next(_card_ids)}", type=card_type, value=value, label=label)


def num(value: int) -> Card:
    """Number card shorthand."""
    return make_card(CardType.NUMBER, value)


def second_chance() -> Card:
    return make_card(CardType.SECOND_CHANCE)


def modifier(value: int) -> Card:
    return make_card(CardType.MODIFIER, value, f"+{value}")


def multiplier() -> Card:
    return make_card(CardType.MULTIPLIER, 2, "x2")


def stacked(*cards: Card) -> list[Card]:
    """Build a draw pile where the first argument is drawn first."""
    return list(reversed(cards))


def create_player(
    player_id: str,
    name: str,
    cards: list[Card] | None = None,
    **kwargs,
) -> Player:
    """Helper to create a player, keeping has_second_chance consistent with the hand."""
    cards = cards or []
    kwargs.setdefault(
        "has_second_chance", any(c.type == CardType.SECOND_CHANCE for c in cards)
    )
    return Player(id=player_id, name=name, cards=cards, **kwargs)


def create_game(
    players: list[Player],
    deck: list[Card] | None = None,
    phase: GamePhase = GamePhase.PLAYING,
    current_player_index: int = 0,
    round_number: int = 1,
    host_id: str = PLAYER_1_ID,
    discard: list[Card] | None = None,
) -> GameState:
    """Helper to create a game state."""
    return GameState(
        phase=phase,
        players=players,
        current_player_index=current_player_index,
        deck=deck or [],
        discard=discard or [],
        round_number=round_number,
        host_id=host_id,
    )


@pytest.fixture
def player1() -> Player:
    """Player 1 with an empty hand."""
    return create_player(PLAYER_1_ID, "Alice")


@pytest.fixture
def player2() -> Player:
    """Player 2 with an empty hand."""
    return create_player(PLAYER_2_ID, "Bob")


@pytest.fixture
def player3() -> Player:
    """Player 3 with an empty hand."""
    return create_player(PLAYER_3_ID, "Carol")


@pytest.fixture
def two_player_lobby(player1: Player, player2: Player) -> GameState:
    """Two seated players waiting in the lobby, Alice hosting."""
    return create_game([player1, player2], phase=GamePhase.LOBBY, round_number=0)


@pytest.fixture
def game_player1_turn(player1: Player, player2: Player) -> GameState:
    """Round 1 in progress, Alice to act, a few low cards on top of the deck."""
    return create_game(
        [player1, player2],
        deck=stacked(num(3), num(5), num(7), num(9), num(11)),
    )


@pytest.fixture
def three_player_game(player1: Player, player2: Player, player3: Player) -> GameState:
    """Round 1 in progress with three players, Alice to act."""
    return create_game(
        [player1, player2, player3],
        deck=stacked(num(1), num(2), num(4), num(6), num(8), num(10)),
    )
