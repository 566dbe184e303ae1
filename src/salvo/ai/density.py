"""Per-cell placement density over the remaining enemy fleet."""

from __future__ import annotations

from typing import Iterable, Sequence, TypeAlias

import numpy as np
import numpy.typing as npt

from salvo.engine.ship import FLEET_LENGTHS

from .arrangements import GridView, TargetingMode, enumerate_arrangements

DensityMap: TypeAlias = npt.NDArray[np.int64]


def compute_density(
    grid: GridView,
    remaining_lengths: Iterable[int],
    mode: TargetingMode = TargetingMode.HUNT,
    anchors: Sequence[int] = (),
    valid_lengths: Sequence[int] = FLEET_LENGTHS,
) -> DensityMap:
    """Count, for every cell, the consistent arrangements covering it.

    Lengths are summed independently, so duplicates in ``remaining_lengths``
    (two ships of length 3) count twice. The result is all zeros when no
    lengths remain.
    """
    density = np.zeros(grid.size * grid.size, dtype=np.int64)
    for length in remaining_lengths:
        arrangements = enumerate_arrangements(grid, length, mode, anchors, valid_lengths)
        if not arrangements:
            continue
        covered = np.asarray(arrangements, dtype=np.intp).ravel()
        np.add.at(density, covered, 1)
    return density
