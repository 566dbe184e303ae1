"""Hunt/Target opponent that fires at the densest untouched cell."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
import numpy.typing as npt

from salvo.engine.board import Board, CellStatus, ShotOutcome
from salvo.engine.ship import FLEET_LENGTHS, Ship

from .arrangements import TargetingMode
from .density import DensityMap, compute_density

logger = logging.getLogger(__name__)


class TargetingStrategy:
    """Chooses attacks against ``board`` and learns from their outcomes.

    The strategy's model of the enemy fleet is its own bookkeeping: the
    lengths of ships it has not yet seen sink, and the hit cells whose ship
    is still afloat. While any such hit is pending it stays in Target mode
    and only considers placements through those hits.
    """

    def __init__(self, board: Board, fleet_lengths: Sequence[int] = FLEET_LENGTHS) -> None:
        self.board = board
        self.fleet_lengths: tuple[int, ...] = tuple(fleet_lengths)
        self.remaining_lengths: list[int] = list(fleet_lengths)
        self.known_hits: list[int] = []
        self.mode = TargetingMode.HUNT
        self._density: DensityMap = np.zeros(board.size * board.size, dtype=np.int64)

    @property
    def anchors(self) -> tuple[int, ...]:
        """Cells the current mode restricts the search to."""
        return tuple(self.known_hits) if self.mode is TargetingMode.TARGET else ()

    def compute_density(self) -> DensityMap:
        """Recompute and keep the density for the current mode."""
        self._density = compute_density(
            self.board,
            self.remaining_lengths,
            self.mode,
            self.anchors,
            self.fleet_lengths,
        )
        return self._density

    def choose_attack_cell(self) -> int | None:
        """Return the untouched cell with the highest density, or None if none is left.

        Ties go to the first cell in row-major order.
        """
        density = self.compute_density()
        untouched = np.fromiter(
            (status is CellStatus.UNTOUCHED for status in self.board.statuses),
            dtype=bool,
            count=self.board.cell_count,
        )
        if not untouched.any():
            logger.warning("no_candidate_cell", extra={"owner": self.board.owner})
            return None
        scores = np.where(untouched, density, -1)
        return int(np.argmax(scores))

    def apply_outcome(self, index: int, outcome: ShotOutcome, sunk_ship: Ship | None = None) -> None:
        """Fold the result of attacking ``index`` into the fleet model."""
        if outcome is ShotOutcome.MISS:
            self.board.mark(index, CellStatus.MISS)
            return

        if outcome is ShotOutcome.HIT:
            self.board.mark(index, CellStatus.HIT)
            if index not in self.known_hits:
                self.known_hits.append(index)
            self._set_mode(TargetingMode.TARGET)
            return

        if sunk_ship is None:
            raise ValueError("A sinking outcome needs the ship that sank.")
        for member in sunk_ship.indices:
            self.board.mark(member, CellStatus.SUNK)
        try:
            self.remaining_lengths.remove(sunk_ship.length)
        except ValueError:
            logger.warning(
                "sunk_length_not_tracked",
                extra={"length": sunk_ship.length, "remaining": list(self.remaining_lengths)},
            )
        self.known_hits = [hit for hit in self.known_hits if not sunk_ship.occupies(hit)]
        self._set_mode(TargetingMode.TARGET if self.known_hits else TargetingMode.HUNT)

    def probability_map(self) -> list[int]:
        """Density from the last decision, for display."""
        return [int(value) for value in self._density]

    def normalized_probability_map(self) -> npt.NDArray[np.float64]:
        """Last density scaled so the densest cell is 1.0; all zeros if empty."""
        peak = int(self._density.max()) if self._density.size else 0
        if peak == 0:
            return np.zeros(self._density.shape, dtype=np.float64)
        return self._density / float(peak)

    def _set_mode(self, mode: TargetingMode) -> None:
        if mode is self.mode:
            return
        logger.info(
            "targeting_mode_changed",
            extra={"previous": self.mode.value, "mode": mode.value, "pending_hits": len(self.known_hits)},
        )
        self.mode = mode
