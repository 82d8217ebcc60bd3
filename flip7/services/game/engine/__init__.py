"""Game engine module - pure game logic, no I/O.

This module provides the core game engine with:
- Action types for explicit client inputs
- ProcessResult pattern for error handling
- Deck, scoring and turn logic

Usage:
    from flip7.services.game.engine import HitAction, process_action

    result = process_action(state, HitAction(), connection_id)

    if result.success:
        new_state = result.state  # Broadcast this in full
    elif not result.is_ignored:
        print(f"Error: {result.error_code} - {result.error_message}")
"""

# Actions - explicit client inputs
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
    build_action_from_payload,
)

# Deck
from .deck import DECK_SIZE, DeckExhaustedError, create_deck, draw_card, shuffle_deck

# Main processing
from .process import mark_disconnected, process_action

# Scoring
from .scoring import calculate_round_score, is_active, unique_number_count

# Result types
from .validation import ProcessResult, ValidationResult, validate_action

__all__ = [
    # Actions
    "GameAction",
    "JoinAction",
    "StartGameAction",
    "HitAction",
    "StayAction",
    "UseFlipThreeAction",
    "UseFreezeAction",
    "NewRoundAction",
    "RestartAction",
    "build_action_from_payload",
    # Deck
    "DECK_SIZE",
    "DeckExhaustedError",
    "create_deck",
    "shuffle_deck",
    "draw_card",
    # Processing
    "process_action",
    "mark_disconnected",
    # Scoring
    "calculate_round_score",
    "is_active",
    "unique_number_count",
    # Validation
    "ProcessResult",
    "ValidationResult",
    "validate_action",
]
