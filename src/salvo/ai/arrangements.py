"""Enumeration of ship placements still consistent with what the attacker knows.

An arrangement is a list of cell indices forming one straight, axis-aligned
run of a given length. It is consistent when none of its cells is a known
miss or part of an already sunk ship. Known hits do not exclude a placement:
a ship may already have several of its cells hit.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Protocol, Sequence

from salvo.engine.board import CellStatus
from salvo.engine.ship import FLEET_LENGTHS, cell_index, cell_xy

Arrangement = list[int]

BLOCKING_STATUSES = frozenset({CellStatus.MISS, CellStatus.SUNK})

# left, right, up, down
DIRECTIONS: tuple[tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


class TargetingMode(Enum):
    """Hunt searches the whole grid; Target only around pending hits."""

    HUNT = "hunt"
    TARGET = "target"


class GridView(Protocol):
    """Read access to the attacked grid."""

    size: int

    def get_cell_status(self, index: int) -> CellStatus: ...


def is_open(grid: GridView, cells: Iterable[int]) -> bool:
    """True when no cell is a miss or a sunk ship member."""
    return all(grid.get_cell_status(index) not in BLOCKING_STATUSES for index in cells)


def hunt_arrangements(grid: GridView, length: int) -> list[Arrangement]:
    """Every open horizontal then vertical placement of ``length`` on the grid."""
    size = grid.size
    arrangements: list[Arrangement] = []
    for y in range(size):
        for x in range(size - length + 1):
            cells = [cell_index(x + i, y, size) for i in range(length)]
            if is_open(grid, cells):
                arrangements.append(cells)
    for x in range(size):
        for y in range(size - length + 1):
            cells = [cell_index(x, y + i, size) for i in range(length)]
            if is_open(grid, cells):
                arrangements.append(cells)
    return arrangements


def target_arrangements(grid: GridView, length: int, anchors: Iterable[int]) -> list[Arrangement]:
    """Open placements of ``length`` passing through at least one anchor cell.

    For each anchor, direction and offset ``i`` the run starts ``i`` cells
    behind the anchor and extends along the direction, so the anchor sits at
    position ``i``. Each straight window is therefore produced once per
    direction along its axis.
    """
    size = grid.size
    arrangements: list[Arrangement] = []
    for anchor in anchors:
        ax, ay = cell_xy(anchor, size)
        for dx, dy in DIRECTIONS:
            for offset in range(length):
                start_x, start_y = ax - dx * offset, ay - dy * offset
                end_x = start_x + dx * (length - 1)
                end_y = start_y + dy * (length - 1)
                if not (0 <= start_x < size and 0 <= start_y < size):
                    continue
                if not (0 <= end_x < size and 0 <= end_y < size):
                    continue
                cells = [cell_index(start_x + dx * j, start_y + dy * j, size) for j in range(length)]
                if is_open(grid, cells):
                    arrangements.append(cells)
    return arrangements


def enumerate_arrangements(
    grid: GridView,
    length: int,
    mode: TargetingMode = TargetingMode.HUNT,
    anchors: Iterable[int] = (),
    valid_lengths: Sequence[int] = FLEET_LENGTHS,
) -> list[Arrangement]:
    """Return the placements of a ship of ``length`` consistent with ``grid``.

    Lengths outside ``valid_lengths`` yield no arrangements.
    """
    if length not in valid_lengths or length > grid.size:
        return []
    if mode is TargetingMode.TARGET:
        return target_arrangements(grid, length, anchors)
    return hunt_arrangements(grid, length)
