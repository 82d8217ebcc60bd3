"""Main entry point for game action processing.

This module provides the primary interface for processing game actions:
- process_action(): Validates and processes any game action
- Dispatches to specialized handlers based on action type
- Returns ProcessResult with the new state
"""

import logging
import random
from typing import assert_never

from flip7.schemas.game_engine import GameState, Player

from .actions import (
    GameAction,
    HitAction,
    JoinAction,
    NewRoundAction,
    RestartAction,
    StartGameAction,
    StayAction,
    UseFlipThreeAction,
    UseFreezeAction,
)
from .scoring import calculate_round_score, is_active
from .turns import (
    FLIP_THREE_DRAWS,
    advance_turn,
    draw_for_player,
    end_round,
    finish_flip_seven,
    is_round_over,
    reset_to_lobby,
    start_new_round,
)
from .validation import ProcessResult, validate_action

logger = logging.getLogger(__name__)


def process_action(
    state: GameState,
    action: GameAction,
    player_id: str,
    rng: random.Random | None = None,
) -> ProcessResult:
    """Process a game action and return the result.

    This is the main entry point for all game actions. It:
    1. Validates the action is legal given current state
    2. Applies it to a deep copy of the state
    3. Returns ProcessResult with the new state

    The input state is never modified.

    Args:
        state: Current game state.
        action: The action to process.
        player_id: The connection attempting the action.
        rng: Optional random source for shuffles.

    Returns:
        ProcessResult containing the new state on success, error details on
        a reportable rejection, or neither when the action is ignored.

    Raises:
        DeckExhaustedError: If a draw finds both piles empty.

    Example:
        >>> result = process_action(state, HitAction(), player_id)
        >>> if result.success:
        ...     broadcast(result.state)
        ... elif not result.is_ignored:
        ...     send_error(result.error_code, result.error_message)
    """
    logger.info(
        "Processing action: type=%s, player=%s, phase=%s",
        action.type,
        player_id,
        state.phase.value,
    )

    validation = validate_action(state, action, player_id)
    if not validation.is_valid:
        if validation.error_code is None:
            return ProcessResult.ignored()
        return ProcessResult.failure(
            validation.error_code,
            validation.error_message or "Invalid action",
        )

    new_state = state.model_copy(deep=True)

    match action:
        case JoinAction():
            _process_join(new_state, action.name, player_id)
        case StartGameAction() | NewRoundAction():
            start_new_round(new_state, rng)
        case HitAction():
            _process_hit(new_state, rng)
        case StayAction():
            _process_stay(new_state)
        case UseFlipThreeAction():
            _process_flip_three(new_state, player_id, rng)
        case UseFreezeAction():
            _process_freeze(new_state, player_id)
        case RestartAction():
            reset_to_lobby(new_state)
        case _:
            assert_never(action)

    logger.info(
        "Action processed successfully: type=%s, player=%s, last_action=%s",
        action.type,
        player_id,
        new_state.last_action,
    )
    return ProcessResult.ok(new_state)


def _process_join(state: GameState, name: str, player_id: str) -> None:
    existing = next((p for p in state.players if p.name == name), None)
    if existing is not None:
        # Reconnection: the seat follows the name to the new connection
        logger.info("Player reconnected: name=%s, old_id=%s, new_id=%s", name, existing.id, player_id)
        if state.host_id == existing.id:
            state.host_id = player_id
        if state.winner == existing.id:
            state.winner = player_id
        existing.id = player_id
        existing.connected = True
        # last_action keeps describing the latest game move
        return

    if not state.players:
        state.host_id = player_id
    state.players.append(Player(id=player_id, name=name))
    state.last_action = f"{name} joined the game!"
    logger.info("Player joined: name=%s, id=%s, seats=%d", name, player_id, len(state.players))


def _process_hit(state: GameState, rng: random.Random | None) -> None:
    outcome = draw_for_player(state, state.current_player_index, rng=rng)
    if outcome.flip_seven:
        finish_flip_seven(state)
        return
    advance_turn(state)


def _process_stay(state: GameState) -> None:
    player = state.players[state.current_player_index]
    player.stayed = True
    player.round_score = calculate_round_score(player)
    state.last_action = f"{player.name} stayed with {player.round_score} points"
    advance_turn(state)


def _process_flip_three(state: GameState, player_id: str, rng: random.Random | None) -> None:
    """Draw up to three cards; a Second Chance save keeps the player drawing."""
    player_index = state.find_player_index(player_id)
    player = state.players[player_index]

    for _ in range(FLIP_THREE_DRAWS):
        outcome = draw_for_player(state, player_index, from_flip_three=True, rng=rng)
        if outcome.flip_seven:
            finish_flip_seven(state)
            return
        if outcome.busted:
            break

    if not player.busted:
        state.last_action = f"{player.name} flipped 3 and has {player.round_score} points"
    _settle_after_free_action(state, player_index)


def _process_freeze(state: GameState, player_id: str) -> None:
    player_index = state.find_player_index(player_id)
    player = state.players[player_index]
    player.stayed = True
    player.round_score = calculate_round_score(player)
    state.last_action = f"{player.name} was frozen! They stay with {player.round_score} points."
    _settle_after_free_action(state, player_index)


def _settle_after_free_action(state: GameState, player_index: int) -> None:
    """Keep the turn where it is unless the current player just dropped out."""
    if player_index == state.current_player_index and not is_active(state.players[player_index]):
        advance_turn(state)
    elif is_round_over(state):
        end_round(state)


def mark_disconnected(state: GameState, player_id: str) -> GameState | None:
    """Flag a player's connection as gone.

    Returns the updated state, or None if the connection held no seat.
    """
    if state.find_player(player_id) is None:
        return None

    new_state = state.model_copy(deep=True)
    player = new_state.find_player(player_id)
    player.connected = False
    logger.info(
        "Player disconnected: name=%s, id=%s, phase=%s",
        player.name,
        player_id,
        new_state.phase.value,
    )
    return new_state

