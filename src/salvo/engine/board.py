"""Single-grid board state for the Salvo engine."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from salvo.telemetry import get_meter, get_tracer

from .ship import BOARD_SIZE, FLEET_LENGTHS, Orientation, Ship, cell_xy

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.board")
meter = get_meter("salvo.engine.board")

PLACEMENT_COUNTER = meter.create_counter(
    "salvo_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "salvo_engine_shots",
    unit="1",
    description="Shots received by a board",
)

DEFAULT_MAX_PLACEMENT_ATTEMPTS = 1000


class CellStatus(Enum):
    """What an attacker knows about a cell."""

    UNTOUCHED = "untouched"
    HIT = "hit"
    MISS = "miss"
    SUNK = "sunk"


class ShotOutcome(Enum):
    """Result of resolving a shot against the fleet on a board."""

    MISS = "miss"
    HIT = "hit"
    SUNK = "sunk"


class PlacementError(ValueError):
    """Random placement could not fit a ship within the attempt limit."""


@dataclass
class Board:
    """One side's grid: the fleet it hides and the shots it has received."""

    size: int = BOARD_SIZE
    ships: list[Ship] = field(default_factory=list)
    owner: str = "unknown"
    statuses: list[CellStatus] = field(init=False)

    def __post_init__(self) -> None:
        self.statuses = [CellStatus.UNTOUCHED] * (self.size * self.size)

    @property
    def cell_count(self) -> int:
        return self.size * self.size

    def is_valid_index(self, index: int) -> bool:
        return 0 <= index < self.cell_count

    def get_cell_status(self, index: int) -> CellStatus:
        """Return the attack status of a cell."""
        return self.statuses[index]

    def mark(self, index: int, status: CellStatus) -> None:
        """Record the status of a cell. Marking is idempotent."""
        if not self.is_valid_index(index):
            raise ValueError(f"Cell {index} is outside the {self.size}x{self.size} grid.")
        self.statuses[index] = status

    def untouched_cells(self) -> list[int]:
        """Return every cell not yet attacked, in row-major order."""
        return [i for i, status in enumerate(self.statuses) if status is CellStatus.UNTOUCHED]

    def ship_at(self, index: int) -> Ship | None:
        for ship in self.ships:
            if ship.occupies(index):
                return ship
        return None

    def can_place_ship(self, ship: Ship) -> bool:
        """A ship fits when all its cells are on the grid and none is taken."""
        if not all(self.is_valid_index(index) for index in ship.indices):
            return False
        return not any(ship.overlaps(existing) for existing in self.ships)

    def place_ship(self, ship: Ship) -> bool:
        """Add ship to the board if placement is valid."""
        with tracer.start_as_current_span("board.place_ship") as span:
            span.set_attribute("ship.length", ship.length)
            span.set_attribute("ship.first_cell", ship.indices[0] if ship.indices else -1)
            span.set_attribute("board.owner", self.owner)
            if self.can_place_ship(ship):
                ship.owner = self.owner
                self.ships.append(ship)
                PLACEMENT_COUNTER.add(1, attributes={"result": "success", "owner": self.owner})
                logger.info(
                    "ship_placed",
                    extra={"owner": self.owner, "length": ship.length, "cells": list(ship.indices)},
                )
                return True
            PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "owner": self.owner})
            logger.debug(
                "ship_placement_rejected",
                extra={"owner": self.owner, "length": ship.length, "cells": list(ship.indices)},
            )
            return False

    def receive_shot(self, index: int) -> tuple[ShotOutcome, Ship | None]:
        """Resolve a shot against the hidden fleet and record its status."""
        with tracer.start_as_current_span("board.receive_shot") as span:
            span.set_attribute("shot.index", index)
            span.set_attribute("board.owner", self.owner)
            if not self.is_valid_index(index):
                logger.error("shot_out_of_bounds", extra={"index": index, "owner": self.owner})
                raise ValueError("Shot out of bounds.")
            if self.statuses[index] is not CellStatus.UNTOUCHED:
                logger.error("shot_duplicate", extra={"index": index, "owner": self.owner})
                raise ValueError("Cell has already been targeted.")

            x, y = cell_xy(index, self.size)
            ship = self.ship_at(index)
            if ship is None:
                self.statuses[index] = CellStatus.MISS
                span.set_attribute("shot.outcome", ShotOutcome.MISS.value)
                SHOT_COUNTER.add(1, attributes={"outcome": "miss", "owner": self.owner})
                logger.info("shot_miss", extra={"x": x, "y": y, "owner": self.owner})
                return ShotOutcome.MISS, None

            ship.register_hit()
            if ship.is_sunk():
                for member in ship.indices:
                    self.statuses[member] = CellStatus.SUNK
                outcome = ShotOutcome.SUNK
            else:
                self.statuses[index] = CellStatus.HIT
                outcome = ShotOutcome.HIT
            span.set_attribute("shot.outcome", outcome.value)
            SHOT_COUNTER.add(1, attributes={"outcome": outcome.value, "owner": self.owner})
            logger.info(
                "shot_hit",
                extra={
                    "x": x,
                    "y": y,
                    "length": ship.length,
                    "sunk": outcome is ShotOutcome.SUNK,
                    "owner": self.owner,
                },
            )
            return outcome, ship

    def all_ships_sunk(self) -> bool:
        """Check whether the side owning this board has lost."""
        return all(ship.is_sunk() for ship in self.ships)

    def random_placement(
        self,
        rng: random.Random,
        lengths: Sequence[int] = FLEET_LENGTHS,
        max_attempts: int = DEFAULT_MAX_PLACEMENT_ATTEMPTS,
    ) -> None:
        """Randomly place one ship per length, retrying up to ``max_attempts`` each."""
        with tracer.start_as_current_span("board.random_placement") as span:
            span.set_attribute("board.owner", self.owner)
            self.ships.clear()
            self.statuses = [CellStatus.UNTOUCHED] * self.cell_count
            orientations = list(Orientation)
            for length in lengths:
                for attempt in range(1, max_attempts + 1):
                    orientation = rng.choice(orientations)
                    x = rng.randrange(self.size)
                    y = rng.randrange(self.size)
                    candidate = Ship.from_origin(x, y, length, orientation, self.size)
                    if candidate is not None and self.place_ship(candidate):
                        logger.debug(
                            "random_ship_placed",
                            extra={"length": length, "attempts": attempt, "owner": self.owner},
                        )
                        break
                else:
                    span.set_attribute("error", True)
                    logger.error(
                        "random_placement_exhausted",
                        extra={"length": length, "attempts": max_attempts, "owner": self.owner},
                    )
                    raise PlacementError(
                        f"Could not place a ship of length {length} after {max_attempts} attempts."
                    )
