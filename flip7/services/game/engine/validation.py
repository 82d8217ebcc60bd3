"""Validation layer for game actions and ProcessResult pattern.

Separates validation from processing logic:
- validate_action() checks if an action is valid given current state
- ProcessResult replaces exceptions for control flow
"""

import logging
from dataclasses import dataclass

from flip7.schemas.game_engine import GamePhase, GameState

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
from .scoring import is_active

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2


@dataclass
class ProcessResult:
    """Result of processing a game action.

    Three outcomes: accepted (state set), rejected (error_code set, reported to
    the sender only) and ignored (neither set, nothing is sent to anyone).
    """

    state: GameState | None = None
    success: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls, state: GameState) -> "ProcessResult":
        """Create a successful result with the new state."""
        return cls(state=state, success=True)

    @classmethod
    def failure(cls, code: str, message: str) -> "ProcessResult":
        """Create a failure result with error details."""
        return cls(
            state=None,
            success=False,
            error_code=code,
            error_message=message,
        )

    @classmethod
    def ignored(cls) -> "ProcessResult":
        """Create a silent no-op result."""
        return cls(state=None, success=False)

    @property
    def is_ignored(self) -> bool:
        return not self.success and self.error_code is None


@dataclass
class ValidationResult:
    """Result of validating an action before processing."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: str, message: str) -> "ValidationResult":
        """Create a validation failure with error details."""
        return cls(
            is_valid=False,
            error_code=code,
            error_message=message,
        )

    @classmethod
    def ignore(cls) -> "ValidationResult":
        """Reject without telling the sender."""
        return cls(is_valid=False)


def _validate_join(state: GameState, action: JoinAction, player_id: str) -> ValidationResult:
    if state.phase != GamePhase.LOBBY:
        seat = next((p for p in state.players if p.name == action.name), None)
        if seat is not None:
            # Reconnection by name, but never onto a second seat
            own_seat = state.find_player(player_id)
            if own_seat is not None and own_seat is not seat:
                logger.warning(
                    "Validation failed: ALREADY_JOINED, player=%s, claimed=%s",
                    player_id,
                    action.name,
                )
                return ValidationResult.error("ALREADY_JOINED", "You have already joined this game")
            return ValidationResult.ok()
        logger.warning("Validation failed: GAME_IN_PROGRESS, name=%s", action.name)
        return ValidationResult.error("GAME_IN_PROGRESS", "Game already in progress")

    if state.find_player(player_id) is not None:
        logger.warning("Validation failed: ALREADY_JOINED, player=%s", player_id)
        return ValidationResult.error("ALREADY_JOINED", "You have already joined this game")

    if any(p.name == action.name for p in state.players):
        logger.warning("Validation failed: NAME_TAKEN, name=%s", action.name)
        return ValidationResult.error("NAME_TAKEN", "Name already taken")

    return ValidationResult.ok()


def _validate_host(state: GameState, player_id: str, message: str) -> ValidationResult | None:
    if player_id != state.host_id:
        logger.warning(
            "Validation failed: NOT_HOST, host=%s, attempted=%s",
            state.host_id,
            player_id,
        )
        return ValidationResult.error("NOT_HOST", message)
    return None


def _validate_turn_action(state: GameState, player_id: str) -> ValidationResult:
    """Hit and stay are strictly turn-ordered."""
    if state.phase != GamePhase.PLAYING:
        logger.debug("Ignoring turn action outside play: phase=%s", state.phase.value)
        return ValidationResult.ignore()

    current = state.current_player
    if current is None or current.id != player_id:
        logger.warning(
            "Validation failed: NOT_YOUR_TURN, current=%s, attempted=%s",
            current.id if current else None,
            player_id,
        )
        return ValidationResult.error("NOT_YOUR_TURN", "Not your turn")

    if not is_active(current):
        logger.debug("Ignoring turn action from inactive player %s", player_id)
        return ValidationResult.ignore()

    return ValidationResult.ok()


def _validate_free_action(state: GameState, player_id: str) -> ValidationResult:
    """Freeze and Flip 3 may be used by any active player, in or out of turn."""
    if state.phase != GamePhase.PLAYING:
        return ValidationResult.ignore()

    player = state.find_player(player_id)
    if player is None or not is_active(player):
        logger.debug("Ignoring free action from non-active sender %s", player_id)
        return ValidationResult.ignore()

    return ValidationResult.ok()


def validate_action(
    state: GameState,
    action: GameAction,
    player_id: str,
) -> ValidationResult:
    """Validate an action before processing.

    Checks:
    - Game phase allows this action
    - Host-only actions come from the host
    - Hit and stay come from the current-turn player
    - Free actions come from an active player

    Args:
        state: Current game state.
        action: The action to validate.
        player_id: The connection attempting the action.

    Returns:
        ValidationResult indicating success, a reportable error, or a silent ignore.
    """
    logger.debug(
        "Validating action: type=%s, player=%s, phase=%s",
        action.type,
        player_id,
        state.phase.value,
    )

    match action:
        case JoinAction():
            return _validate_join(state, action, player_id)

        case StartGameAction():
            if error := _validate_host(state, player_id, "Only the host can start"):
                return error
            if state.phase != GamePhase.LOBBY:
                logger.warning("Validation failed: GAME_ALREADY_STARTED, phase=%s", state.phase.value)
                return ValidationResult.error("GAME_ALREADY_STARTED", "Game has already started")
            if len(state.players) < MIN_PLAYERS:
                logger.warning("Validation failed: NOT_ENOUGH_PLAYERS, players=%d", len(state.players))
                return ValidationResult.error(
                    "NOT_ENOUGH_PLAYERS", f"Need at least {MIN_PLAYERS} players"
                )
            return ValidationResult.ok()

        case HitAction() | StayAction():
            return _validate_turn_action(state, player_id)

        case UseFlipThreeAction() | UseFreezeAction():
            return _validate_free_action(state, player_id)

        case NewRoundAction():
            if error := _validate_host(state, player_id, "Only the host can advance"):
                return error
            if state.phase != GamePhase.ROUND_END:
                logger.warning("Validation failed: ROUND_NOT_OVER, phase=%s", state.phase.value)
                return ValidationResult.error("ROUND_NOT_OVER", "The round is not over yet")
            return ValidationResult.ok()

        case RestartAction():
            if error := _validate_host(state, player_id, "Only the host can restart"):
                return error
            return ValidationResult.ok()

    logger.error("Unknown action type received: %s", type(action).__name__)
    return ValidationResult.error("UNKNOWN_ACTION", f"Unknown action type: {type(action).__name__}")
