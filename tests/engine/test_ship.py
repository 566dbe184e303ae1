"""Tests for Ship domain logic."""

import pytest

from salvo.engine.ship import Orientation, Ship, cell_index, cell_xy


def test_cell_index_round_trips_through_xy() -> None:
    assert cell_index(5, 4) == 45
    assert cell_xy(45) == (5, 4)
    assert cell_xy(99) == (9, 9)


def test_ship_from_origin_horizontal_and_vertical() -> None:
    horizontal = Ship.from_origin(0, 0, 2, Orientation.HORIZONTAL)
    vertical = Ship.from_origin(3, 3, 3, Orientation.VERTICAL)
    assert horizontal is not None and horizontal.indices == (0, 1)
    assert vertical is not None and vertical.indices == (33, 43, 53)


def test_ship_from_origin_rejects_cells_off_the_grid() -> None:
    assert Ship.from_origin(9, 0, 2, Orientation.HORIZONTAL) is None
    assert Ship.from_origin(0, 8, 3, Orientation.VERTICAL) is None


def test_ship_hit_and_sink() -> None:
    ship = Ship((33, 43, 53))
    for count in range(1, ship.length + 1):
        ship.register_hit()
        assert ship.hits == count
        assert ship.is_sunk() is (count == ship.length)

    with pytest.raises(ValueError):
        ship.register_hit()
    assert ship.hits == ship.length


def test_ship_overlap() -> None:
    first = Ship((0, 1, 2))
    assert first.overlaps(Ship((2, 12)))
    assert not first.overlaps(Ship((10, 11)))


def test_ship_rejects_repeated_cells() -> None:
    with pytest.raises(ValueError):
        Ship((4, 4))
