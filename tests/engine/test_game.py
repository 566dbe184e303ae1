"""High-level gameplay tests."""

import pytest

from salvo.ai.arrangements import TargetingMode
from salvo.config import GameConfig
from salvo.engine.board import CellStatus, ShotOutcome
from salvo.engine.game import (
    BattleshipGame,
    GamePhase,
    PlacementResult,
    Player,
    segment_between,
)
from salvo.engine.ship import FLEET_LENGTHS, Ship


def test_segment_between_picks_the_longer_axis() -> None:
    assert segment_between(0, 4, 10) == [0, 1, 2, 3, 4]
    assert segment_between(4, 0, 10) == [0, 1, 2, 3, 4]
    assert segment_between(3, 33, 10) == [3, 13, 23, 33]
    # diagonal drags stay on the starting row or column
    assert segment_between(0, 22, 10) == [0, 10, 20]
    assert segment_between(0, 31, 10) == [0, 10, 20, 30]
    assert segment_between(0, 13, 10) == [0, 1, 2, 3]


def test_game_flow_until_someone_wins() -> None:
    game = BattleshipGame(GameConfig(seed=42))
    game.setup(randomize_human=True)
    assert game.phase is GamePhase.IN_PROGRESS

    while game.get_state().phase is not GamePhase.FINISHED:
        moves = game.valid_moves(Player.HUMAN)
        assert moves, "There should always be a valid move while game in progress."
        results = game.play_round(moves[0])
        assert results[0].player is Player.HUMAN
        if game.phase is GamePhase.IN_PROGRESS:
            assert len(results) == 2
            assert results[1].player is Player.COMPUTER

    state = game.get_state()
    assert state.winner in {Player.HUMAN, Player.COMPUTER}
    loser = state.winner.opponent()
    assert game.boards[loser].all_ships_sunk()


def test_manual_placement_flow() -> None:
    game = BattleshipGame(GameConfig(seed=1))
    game.setup()
    assert game.phase is GamePhase.SETUP

    assert game.place_human_ship(0, 6) is PlacementResult.INVALID_LENGTH
    assert game.place_human_ship(0, 4) is PlacementResult.PLACED
    assert game.place_human_ship(2, 32) is PlacementResult.BLOCKED
    assert game.place_human_ship(10, 13) is PlacementResult.PLACED
    assert game.place_human_ship(20, 22) is PlacementResult.PLACED
    # the second length-3 ship is still unplaced, the first one is spent
    assert game.unplaced == [3, 2]
    assert game.place_human_ship(30, 32) is PlacementResult.PLACED
    assert game.place_human_ship(40, 42) is PlacementResult.INVALID_LENGTH
    assert game.place_human_ship(40, 41) is PlacementResult.COMPLETE

    assert game.phase is GamePhase.IN_PROGRESS
    assert game.current_player is Player.HUMAN
    assert sorted(s.length for s in game.boards[Player.HUMAN].ships) == sorted(FLEET_LENGTHS)

    with pytest.raises(RuntimeError):
        game.place_human_ship(50, 51)


def test_placement_before_setup_waits_for_computer_fleet() -> None:
    game = BattleshipGame(GameConfig(board_size=10, fleet_lengths=(2,), seed=3))
    assert game.place_human_ship(0, 1) is PlacementResult.COMPLETE
    assert game.phase is GamePhase.SETUP
    game.setup()
    assert game.phase is GamePhase.IN_PROGRESS


def test_moves_require_in_progress_game() -> None:
    game = BattleshipGame()
    with pytest.raises(RuntimeError):
        game.human_attack(0)
    with pytest.raises(RuntimeError):
        game.computer_turn()
    assert game.valid_moves(Player.HUMAN) == []


def test_turn_order_is_enforced() -> None:
    game = BattleshipGame(GameConfig(seed=1))
    game.setup(randomize_human=True)
    with pytest.raises(RuntimeError):
        game.computer_turn()

    game.human_attack(game.valid_moves(Player.HUMAN)[0])
    with pytest.raises(RuntimeError):
        game.human_attack(game.valid_moves(Player.HUMAN)[0])

    reply = game.computer_turn()
    assert reply is not None
    assert game.current_player is Player.HUMAN


def test_computer_opens_at_the_densest_cell() -> None:
    game = BattleshipGame(GameConfig(seed=5))
    game.setup(randomize_human=True)
    results = game.play_round(game.valid_moves(Player.HUMAN)[0])
    assert results[1].index == 44


def test_computer_turn_switches_to_target_mode_after_a_hit() -> None:
    game = BattleshipGame(GameConfig(fleet_lengths=(2,), seed=0))
    game.place_human_ship(11, 12)
    game.setup()
    # keep the human missing: aim at cells the computer fleet does not use
    computer_cells = {i for ship in game.boards[Player.COMPUTER].ships for i in ship.indices}
    human_shots = iter(i for i in range(100) if i not in computer_cells)

    def computer_reply():
        game.human_attack(next(human_shots))
        return game.computer_turn()

    first = computer_reply()
    assert first is not None and first.index == 11
    assert first.outcome is ShotOutcome.HIT
    assert game.get_state().targeting_mode is TargetingMode.TARGET
    assert game.get_state().known_hits == (11,)

    # the neighbours of the hit are tried in row-major order
    assert [computer_reply().index for _ in range(2)] == [1, 10]
    assert game.get_state().targeting_mode is TargetingMode.TARGET

    last = computer_reply()
    assert last is not None and last.index == 12
    assert last.outcome is ShotOutcome.SUNK
    state = game.get_state()
    assert state.phase is GamePhase.FINISHED
    assert state.winner is Player.COMPUTER
    assert state.targeting_mode is TargetingMode.HUNT
    assert state.remaining_lengths == ()
    assert state.known_hits == ()
    assert state.statuses[Player.HUMAN][11] is CellStatus.SUNK


def test_game_detects_winner_once_all_ships_sunk() -> None:
    game = BattleshipGame(GameConfig(fleet_lengths=(2,)))
    game.setup(randomize_human=True)
    computer_board = game.boards[Player.COMPUTER]
    computer_board.ships.clear()
    ship = Ship((0, 1))
    computer_board.place_ship(ship)

    game.play_round(0)
    assert game.phase is GamePhase.IN_PROGRESS
    results = game.play_round(1)

    assert len(results) == 1
    assert results[0].sunk
    assert game.phase is GamePhase.FINISHED
    assert game.winner is Player.HUMAN
    assert game.valid_moves(Player.HUMAN) == []
