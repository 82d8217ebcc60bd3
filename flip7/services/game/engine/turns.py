"""Card resolution, turn advancement and round transitions.

All functions mutate the GameState they are given. process_action() hands
them a private copy, so a rejected or failed action never touches the
room's state.
"""

import logging
import random
from dataclasses import dataclass

from flip7.schemas.game_engine import Card, CardType, GamePhase, GameState

from .deck import create_deck, draw_card, shuffle_deck
from .scoring import (
    FLIP_SEVEN_COUNT,
    calculate_round_score,
    has_number_duplicate,
    holds_second_chance,
    is_active,
    unique_number_count,
)

logger = logging.getLogger(__name__)

FLIP_THREE_DRAWS = 3


@dataclass
class DrawOutcome:
    """What happened when a single card was resolved for a player."""

    busted: bool = False
    flip_seven: bool = False
    saved_by_second_chance: bool = False


def resolve_card(
    state: GameState,
    player_index: int,
    card: Card,
    from_flip_three: bool = False,
) -> DrawOutcome:
    """Apply a freshly drawn card to a player's hand.

    Handles bust, Second Chance absorption and Flip 7 detection. Does not end
    the round or move the turn pointer; callers decide that.
    """
    player = state.players[player_index]

    if card.type == CardType.NUMBER:
        if has_number_duplicate(player, card):
            if player.has_second_chance:
                # Consume one Second Chance; the duplicate never enters the hand
                spent = next(c for c in player.cards if c.type == CardType.SECOND_CHANCE)
                player.cards = [c for c in player.cards if c.id != spent.id]
                state.discard.extend([card, spent])
                player.has_second_chance = holds_second_chance(player)
                if not from_flip_three:
                    player.stayed = True
                player.round_score = calculate_round_score(player)
                state.last_action = (
                    f"{player.name} drew a duplicate {card.value} but Second Chance saved them!"
                )
                logger.info(
                    "Second Chance used: player=%s, duplicate=%d, stayed=%s",
                    player.name,
                    card.value,
                    player.stayed,
                )
                return DrawOutcome(saved_by_second_chance=True)

            player.busted = True
            player.round_score = 0
            player.cards.append(card)
            state.last_action = f"{player.name} drew a duplicate {card.value} and busted!"
            logger.info("Player busted: player=%s, duplicate=%d", player.name, card.value)
            return DrawOutcome(busted=True)

        player.cards.append(card)
        player.round_score = calculate_round_score(player)

        if unique_number_count(player) >= FLIP_SEVEN_COUNT:
            player.stayed = True
            state.last_action = f"{player.name} achieved FLIP 7! Round ends!"
            logger.info("Flip 7: player=%s, round_score=%d", player.name, player.round_score)
            return DrawOutcome(flip_seven=True)

        state.last_action = f"{player.name} drew a {card.value}"
        return DrawOutcome()

    if card.type == CardType.SECOND_CHANCE:
        player.cards.append(card)
        if player.has_second_chance:
            state.last_action = f"{player.name} drew another Second Chance (already has one)"
        else:
            player.has_second_chance = True
            state.last_action = f"{player.name} drew Second Chance!"
        return DrawOutcome()

    # Freeze and Flip 3 are inert when drawn; modifiers and x2 count immediately
    player.cards.append(card)
    player.round_score = calculate_round_score(player)
    state.last_action = f"{player.name} drew {card.label}"
    return DrawOutcome()


def next_active_player_index(state: GameState, from_index: int) -> int:
    """Find the next player after from_index who can still act, or -1."""
    count = len(state.players)
    for step in range(1, count + 1):
        idx = (from_index + step) % count
        if is_active(state.players[idx]):
            return idx
    return -1


def is_round_over(state: GameState) -> bool:
    return all(not is_active(p) for p in state.players)


def advance_turn(state: GameState) -> None:
    """Move the turn pointer to the next active player or end the round."""
    if is_round_over(state):
        end_round(state)
        return

    next_index = next_active_player_index(state, state.current_player_index)
    if next_index == -1:
        end_round(state)
        return

    logger.debug(
        "Turn advanced: from=%d, to=%d",
        state.current_player_index,
        next_index,
    )
    state.current_player_index = next_index


def finish_flip_seven(state: GameState) -> None:
    """Auto-stay everyone still drawing, then end the round."""
    for player in state.players:
        if is_active(player):
            player.stayed = True
            player.round_score = calculate_round_score(player)
    end_round(state)


def draw_for_player(
    state: GameState,
    player_index: int,
    from_flip_three: bool = False,
    rng: random.Random | None = None,
) -> DrawOutcome:
    card = draw_card(state, rng)
    logger.debug(
        "Card drawn: player=%s, card=%s, deck_left=%d",
        state.players[player_index].name,
        card.label,
        len(state.deck),
    )
    return resolve_card(state, player_index, card, from_flip_three=from_flip_three)


def end_round(state: GameState) -> None:
    """Bank round scores and decide between round_end and game_over.

    The game ends only when someone reached the target and a single player
    holds the highest cumulative score; a tie at the top plays on.
    """
    for player in state.players:
        if not player.busted:
            player.round_score = calculate_round_score(player)
            player.score += player.round_score

    logger.info(
        "Round %d ended: scores=%s",
        state.round_number,
        {p.name: p.score for p in state.players},
    )

    if any(p.score >= state.target_score for p in state.players):
        best = max(p.score for p in state.players)
        leaders = [p for p in state.players if p.score == best]
        if len(leaders) == 1:
            winner = leaders[0]
            state.winner = winner.id
            state.phase = GamePhase.GAME_OVER
            state.last_action = f"{winner.name} wins with {winner.score} points!"
            logger.info("Game over: winner=%s, score=%d", winner.name, winner.score)
            return
        logger.info("Tie at %d between %s, game continues", best, [p.name for p in leaders])

    state.phase = GamePhase.ROUND_END
    state.last_action = f"Round {state.round_number} complete!"


def start_new_round(state: GameState, rng: random.Random | None = None) -> None:
    """Begin the next round. No cards are dealt; the first player draws first."""
    state.round_number += 1
    state.phase = GamePhase.PLAYING

    if state.round_number == 1:
        state.deck = shuffle_deck(create_deck(), rng)
        state.discard = []

    for player in state.players:
        state.discard.extend(player.cards)
        player.cards = []
        player.round_score = 0
        player.busted = False
        player.stayed = False
        player.has_second_chance = False

    state.current_player_index = 0
    state.last_action = f"Round {state.round_number} started!"
    logger.info(
        "Round %d started: players=%d, deck=%d, discard=%d",
        state.round_number,
        len(state.players),
        len(state.deck),
        len(state.discard),
    )


def reset_to_lobby(state: GameState) -> None:
    """Keep seats and host, wipe everything else."""
    for player in state.players:
        player.cards = []
        player.score = 0
        player.round_score = 0
        player.busted = False
        player.stayed = False
        player.has_second_chance = False

    state.phase = GamePhase.LOBBY
    state.current_player_index = 0
    state.deck = []
    state.discard = []
    state.round_number = 0
    state.winner = None
    state.last_action = "Game restarted!"
