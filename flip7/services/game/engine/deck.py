"""Deck construction, shuffling and drawing."""

import logging
import random
from collections.abc import Sequence

from flip7.schemas.game_engine import Card, CardType, GameState

logger = logging.getLogger(__name__)

ACTION_CARD_COPIES = 3
MODIFIER_VALUES = (2, 4, 6, 8, 8, 10)
MULTIPLIER_VALUE = 2
DECK_SIZE = 95


class DeckExhaustedError(RuntimeError):
    """Both the draw pile and the discard pile are empty.

    Only reachable if cards were lost, so callers treat it as fatal.
    """


def create_deck() -> list[Card]:
    """Build the fixed 95-card composition in a deterministic order.

    - number cards 0-12: value N has N copies, 0 has a single copy (79)
    - 3 each of Freeze, Flip 3 and Second Chance (9)
    - modifiers +2, +4, +6, +8, +8, +10 (6)
    - one x2 multiplier (1)
    """
    cards: list[Card] = []

    def add(card_type: CardType, value: int, label: str) -> None:
        cards.append(Card(id=f"card-{len(cards)}", type=card_type, value=value, label=label))

    for n in range(13):
        for _ in range(max(n, 1)):
            add(CardType.NUMBER, n, str(n))

    for _ in range(ACTION_CARD_COPIES):
        add(CardType.FREEZE, 0, "Freeze!")
        add(CardType.FLIP_THREE, 0, "Flip 3!")
        add(CardType.SECOND_CHANCE, 0, "2nd Chance")

    for value in MODIFIER_VALUES:
        add(CardType.MODIFIER, value, f"+{value}")

    add(CardType.MULTIPLIER, MULTIPLIER_VALUE, f"x{MULTIPLIER_VALUE}")

    logger.debug("Built deck with %d cards", len(cards))
    return cards


def shuffle_deck(cards: Sequence[Card], rng: random.Random | None = None) -> list[Card]:
    """Return a uniformly shuffled copy of cards (Fisher-Yates).

    The input sequence is left untouched.
    """
    rng = rng or random.Random()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def draw_card(state: GameState, rng: random.Random | None = None) -> Card:
    """Pop the top card of the draw pile, recycling the discard pile when empty.

    Raises:
        DeckExhaustedError: If both piles are empty.
    """
    if not state.deck:
        if not state.discard:
            logger.error(
                "Draw with empty deck and discard: round=%d, cards_in_hands=%d",
                state.round_number,
                state.total_cards(),
            )
            raise DeckExhaustedError("Draw pile and discard pile are both empty")
        logger.info("Draw pile empty, reshuffling %d discarded cards", len(state.discard))
        state.deck = shuffle_deck(state.discard, rng)
        state.discard = []
    return state.deck.pop()
