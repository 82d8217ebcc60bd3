from flip7.schemas.game_engine import TARGET_SCORE, GamePhase, GameState


def initialize_game() -> GameState:
    """Return the empty lobby state a new room starts from.

    The host is whoever joins first; see the join handling in the engine.
    """
    return GameState(
        phase=GamePhase.LOBBY,
        players=[],
        current_player_index=0,
        deck=[],
        discard=[],
        round_number=0,
        host_id="",
        target_score=TARGET_SCORE,
        last_action=None,
        winner=None,
    )
