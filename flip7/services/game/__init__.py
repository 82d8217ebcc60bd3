"""Game service module.

Provides:
- Game initialization (start_game.py)
- Game engine processing (engine/)
"""

# Re-export from engine for convenience
from .engine import (
    DeckExhaustedError,
    GameAction,
    ProcessResult,
    build_action_from_payload,
    mark_disconnected,
    process_action,
)
from .start_game import initialize_game

__all__ = [
    # Initialization
    "initialize_game",
    # Engine
    "GameAction",
    "DeckExhaustedError",
    "ProcessResult",
    "process_action",
    "mark_disconnected",
    "build_action_from_payload",
]
