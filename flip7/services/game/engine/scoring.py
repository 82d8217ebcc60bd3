"""Round scoring and player eligibility helpers."""

from flip7.schemas.game_engine import Card, CardType, Player

FLIP_SEVEN_COUNT = 7
FLIP_SEVEN_BONUS = 15


def number_values(cards: list[Card]) -> list[int]:
    return [c.value for c in cards if c.type == CardType.NUMBER]


def unique_number_count(player: Player) -> int:
    """Count distinct number-card values in the player's hand."""
    return len(set(number_values(player.cards)))


def has_number_duplicate(player: Player, card: Card) -> bool:
    """Whether card is a number card whose value is already in the hand."""
    if card.type != CardType.NUMBER:
        return False
    return card.value in number_values(player.cards)


def holds_second_chance(player: Player) -> bool:
    return any(c.type == CardType.SECOND_CHANCE for c in player.cards)


def is_active(player: Player) -> bool:
    """Still drawing this round: neither busted nor stayed."""
    return not player.busted and not player.stayed


def calculate_round_score(player: Player) -> int:
    """Score the player's current hand.

    Number cards are summed and doubled by a multiplier; modifiers are added
    afterwards and never doubled. Seven distinct numbers add the Flip 7 bonus.
    A busted player always scores 0.
    """
    if player.busted:
        return 0

    numbers = number_values(player.cards)
    number_sum = sum(numbers)
    if any(c.type == CardType.MULTIPLIER for c in player.cards):
        number_sum *= 2

    modifier_sum = sum(c.value for c in player.cards if c.type == CardType.MODIFIER)

    bonus = FLIP_SEVEN_BONUS if len(set(numbers)) >= FLIP_SEVEN_COUNT else 0

    return number_sum + modifier_sum + bonus
