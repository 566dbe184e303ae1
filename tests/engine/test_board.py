"""Tests for the Board mechanics."""

import random

import pytest

from salvo.engine.board import Board, CellStatus, PlacementError, ShotOutcome
from salvo.engine.ship import FLEET_LENGTHS, Ship


def test_board_shot_tracking() -> None:
    board = Board()
    ship = Ship((0, 1))
    assert board.place_ship(ship)

    outcome, hit_ship = board.receive_shot(0)
    assert outcome is ShotOutcome.HIT
    assert hit_ship is ship
    assert board.get_cell_status(0) is CellStatus.HIT
    assert not board.all_ships_sunk()

    outcome, miss_ship = board.receive_shot(55)
    assert outcome is ShotOutcome.MISS
    assert miss_ship is None
    assert board.get_cell_status(55) is CellStatus.MISS

    with pytest.raises(ValueError):
        board.receive_shot(0)

    with pytest.raises(ValueError):
        board.receive_shot(100)

    outcome, sunk_ship = board.receive_shot(1)
    assert outcome is ShotOutcome.SUNK
    assert sunk_ship is ship
    assert ship.hits == 2
    assert board.get_cell_status(0) is CellStatus.SUNK
    assert board.get_cell_status(1) is CellStatus.SUNK
    assert board.all_ships_sunk()


def test_ship_placement_rejects_overlap_and_bounds() -> None:
    board = Board()
    assert board.place_ship(Ship((0, 1, 2)))
    assert not board.place_ship(Ship((1, 11)))
    assert not board.place_ship(Ship((99, 100)))
    assert len(board.ships) == 1
    assert board.ships[0].owner == board.owner


def test_random_placement_populates_full_fleet_without_overlap() -> None:
    board = Board(owner="computer")
    board.random_placement(rng=random.Random(123))
    assert sorted(ship.length for ship in board.ships) == sorted(FLEET_LENGTHS)
    cells = [index for ship in board.ships for index in ship.indices]
    assert len(cells) == len(set(cells)), "Ships should not overlap"


def test_random_placement_is_reproducible_for_a_seed() -> None:
    first, second = Board(), Board()
    first.random_placement(random.Random(9))
    second.random_placement(random.Random(9))
    assert [s.indices for s in first.ships] == [s.indices for s in second.ships]


def test_random_placement_gives_up_after_max_attempts() -> None:
    board = Board(size=3)
    with pytest.raises(PlacementError):
        board.random_placement(random.Random(0), lengths=(3, 3, 3, 3), max_attempts=50)


def test_cells_default_to_untouched() -> None:
    board = Board()
    assert board.get_cell_status(44) is CellStatus.UNTOUCHED
    assert len(board.untouched_cells()) == 100


def test_mark_is_idempotent_and_bounds_checked() -> None:
    board = Board()
    board.mark(7, CellStatus.MISS)
    board.mark(7, CellStatus.MISS)
    assert board.get_cell_status(7) is CellStatus.MISS
    assert 7 not in board.untouched_cells()
    with pytest.raises(ValueError):
        board.mark(-1, CellStatus.HIT)
