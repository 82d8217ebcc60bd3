"""Tests for joining, starting and restarting.

Critical scenarios tested:
- The first player to join becomes host
- Names are unique within a room
- Joining mid-game by an existing name reclaims the seat
- Starting builds the full deck; restarting wipes it
"""

import random

from flip7.schemas.game_engine import GamePhase, GameState
from flip7.services.game import initialize_game
from flip7.services.game.engine import (
    DECK_SIZE,
    HitAction,
    JoinAction,
    RestartAction,
    StartGameAction,
    process_action,
)

from .conftest import PLAYER_1_ID, PLAYER_2_ID, PLAYER_3_ID


def _join(state: GameState, player_id: str, name: str) -> GameState:
    result = process_action(state, JoinAction(name=name), player_id)
    assert result.success, result.error_code
    return result.state


class TestJoin:
    """Test seating players in the lobby."""

    def test_first_joiner_becomes_host(self):
        state = _join(initialize_game(), PLAYER_1_ID, "Alice")

        assert state.host_id == PLAYER_1_ID
        assert [p.name for p in state.players] == ["Alice"]
        assert state.last_action == "Alice joined the game!"

    def test_later_joiners_do_not_take_host(self):
        state = _join(initialize_game(), PLAYER_1_ID, "Alice")
        state = _join(state, PLAYER_2_ID, "Bob")

        assert state.host_id == PLAYER_1_ID
        assert [p.id for p in state.players] == [PLAYER_1_ID, PLAYER_2_ID]

    def test_new_player_starts_clean(self):
        state = _join(initialize_game(), PLAYER_1_ID, "Alice")

        alice = state.players[0]
        assert alice.cards == []
        assert alice.score == 0
        assert alice.connected
        assert not alice.busted and not alice.stayed

    def test_name_taken(self, two_player_lobby: GameState):
        result = process_action(two_player_lobby, JoinAction(name="Alice"), PLAYER_3_ID)

        assert not result.success
        assert result.error_code == "NAME_TAKEN"

    def test_same_connection_cannot_join_twice(self, two_player_lobby: GameState):
        result = process_action(two_player_lobby, JoinAction(name="Alicia"), PLAYER_1_ID)

        assert result.error_code == "ALREADY_JOINED"

    def test_join_rejected_mid_game_for_new_name(self, game_player1_turn: GameState):
        result = process_action(game_player1_turn, JoinAction(name="Dave"), PLAYER_3_ID)

        assert not result.success
        assert result.error_code == "GAME_IN_PROGRESS"


class TestReconnect:
    """Test reclaiming a seat by name after a dropped connection."""

    def test_reconnect_rebinds_seat(self, game_player1_turn: GameState):
        game_player1_turn.players[1].connected = False
        game_player1_turn.players[1].score = 40

        result = process_action(game_player1_turn, JoinAction(name="Bob"), "conn-new")

        assert result.success
        bob = result.state.players[1]
        assert bob.id == "conn-new"
        assert bob.connected
        assert bob.score == 40
        assert len(result.state.players) == 2

    def test_reconnect_keeps_last_action(self, game_player1_turn: GameState):
        game_player1_turn.last_action = "Bob stayed with 12 points"

        result = process_action(game_player1_turn, JoinAction(name="Bob"), "conn-new")

        assert result.state.last_action == "Bob stayed with 12 points"

    def test_seated_connection_cannot_claim_another_seat(self, game_player1_turn: GameState):
        result = process_action(game_player1_turn, JoinAction(name="Bob"), PLAYER_1_ID)

        assert not result.success
        assert result.error_code == "ALREADY_JOINED"
        assert [p.id for p in game_player1_turn.players] == [PLAYER_1_ID, PLAYER_2_ID]

    def test_rejoining_own_seat_is_allowed(self, game_player1_turn: GameState):
        result = process_action(game_player1_turn, JoinAction(name="Alice"), PLAYER_1_ID)

        assert result.success
        assert [p.id for p in result.state.players] == [PLAYER_1_ID, PLAYER_2_ID]
        assert result.state.players[0].connected

    def test_winner_follows_reconnect(self, game_player1_turn: GameState):
        game_player1_turn.phase = GamePhase.GAME_OVER
        game_player1_turn.players[1].score = 204
        game_player1_turn.players[1].connected = False
        game_player1_turn.winner = PLAYER_2_ID

        result = process_action(game_player1_turn, JoinAction(name="Bob"), "conn-new")

        assert result.success
        assert result.state.phase == GamePhase.GAME_OVER
        assert result.state.winner == "conn-new"
        assert result.state.find_player(result.state.winner).name == "Bob"

    def test_reconnect_carries_host(self, game_player1_turn: GameState):
        result = process_action(game_player1_turn, JoinAction(name="Alice"), "conn-new")

        assert result.state.host_id == "conn-new"

    def test_reconnected_player_keeps_turn(self, game_player1_turn: GameState):
        state = process_action(game_player1_turn, JoinAction(name="Alice"), "conn-new").state

        result = process_action(state, HitAction(), "conn-new")

        assert result.success
        assert result.state.players[0].cards


class TestStartGame:
    """Test the host starting the first round."""

    def test_start_builds_full_deck(self, two_player_lobby: GameState):
        result = process_action(
            two_player_lobby, StartGameAction(), PLAYER_1_ID, rng=random.Random(5)
        )

        assert result.success
        state = result.state
        assert state.phase == GamePhase.PLAYING
        assert state.round_number == 1
        assert state.current_player_index == 0
        assert len(state.deck) == DECK_SIZE
        assert state.discard == []
        assert state.total_cards() == DECK_SIZE
        assert state.last_action == "Round 1 started!"

    def test_start_deals_nothing(self, two_player_lobby: GameState):
        state = process_action(two_player_lobby, StartGameAction(), PLAYER_1_ID).state

        assert all(p.cards == [] for p in state.players)


class TestRestart:
    """Test resetting back to the lobby."""

    def test_restart_wipes_progress_but_keeps_seats(self, game_player1_turn: GameState):
        state = process_action(game_player1_turn, HitAction(), PLAYER_1_ID).state
        state.players[1].score = 120
        state.winner = PLAYER_2_ID

        result = process_action(state, RestartAction(), PLAYER_1_ID)

        assert result.success
        new_state = result.state
        assert new_state.phase == GamePhase.LOBBY
        assert new_state.round_number == 0
        assert new_state.deck == []
        assert new_state.discard == []
        assert new_state.winner is None
        assert new_state.host_id == PLAYER_1_ID
        assert new_state.last_action == "Game restarted!"
        assert [p.name for p in new_state.players] == ["Alice", "Bob"]
        for player in new_state.players:
            assert player.cards == []
            assert player.score == 0

    def test_restart_allowed_from_lobby(self, two_player_lobby: GameState):
        result = process_action(two_player_lobby, RestartAction(), PLAYER_1_ID)

        assert result.success
        assert result.state.phase == GamePhase.LOBBY

    def test_game_can_start_again_after_restart(self, game_player1_turn: GameState):
        state = process_action(game_player1_turn, RestartAction(), PLAYER_1_ID).state

        result = process_action(state, StartGameAction(), PLAYER_1_ID)

        assert result.success
        assert result.state.round_number == 1
        assert len(result.state.deck) == DECK_SIZE
