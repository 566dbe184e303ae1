"""Ship domain model for the Salvo engine.

Cells are addressed by a flat row-major index ``0..size*size-1``; ``x`` is the
column and ``y`` the row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

BOARD_SIZE = 10
FLEET_LENGTHS: tuple[int, ...] = (5, 4, 3, 3, 2)


def cell_index(x: int, y: int, size: int = BOARD_SIZE) -> int:
    """Return the flat index of column ``x`` on row ``y``."""
    return y * size + x


def cell_xy(index: int, size: int = BOARD_SIZE) -> tuple[int, int]:
    """Return ``(x, y)`` for a flat cell index."""
    return index % size, index // size


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @property
    def step(self) -> tuple[int, int]:
        return (1, 0) if self is Orientation.HORIZONTAL else (0, 1)


@dataclass(eq=False)
class Ship:
    """A straight run of cells on one grid plus the number of times it was hit."""

    indices: tuple[int, ...]
    owner: str = "unknown"
    hits: int = field(default=0, init=False)
    _index_set: frozenset[int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.indices = tuple(self.indices)
        self._index_set = frozenset(self.indices)
        if len(self._index_set) != len(self.indices):
            raise ValueError("Ship cells must be distinct.")

    @classmethod
    def from_origin(
        cls,
        x: int,
        y: int,
        length: int,
        orientation: Orientation,
        size: int = BOARD_SIZE,
        owner: str = "unknown",
    ) -> Ship | None:
        """Build a ship starting at ``(x, y)``; ``None`` if it leaves the grid."""
        dx, dy = orientation.step
        end_x, end_y = x + dx * (length - 1), y + dy * (length - 1)
        if not (0 <= x < size and 0 <= y < size and end_x < size and end_y < size):
            return None
        indices = tuple(cell_index(x + dx * i, y + dy * i, size) for i in range(length))
        return cls(indices, owner=owner)

    @property
    def length(self) -> int:
        """Return the number of cells the ship occupies."""
        return len(self.indices)

    def occupies(self, index: int) -> bool:
        return index in self._index_set

    def is_sunk(self) -> bool:
        """A ship is sunk once it has taken one hit per cell."""
        return self.hits == self.length

    def register_hit(self) -> None:
        """Count a hit on one of this ship's cells."""
        if self.hits >= self.length:
            raise ValueError("Ship has already been sunk.")
        self.hits += 1

    def overlaps(self, other: Ship) -> bool:
        """Return True if any cell is shared with another ship."""
        return bool(self._index_set & other._index_set)
