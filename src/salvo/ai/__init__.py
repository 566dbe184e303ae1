"""Opponent targeting: arrangement enumeration, density and the Hunt/Target strategy."""

from .arrangements import TargetingMode, enumerate_arrangements
from .density import compute_density
from .targeting import TargetingStrategy

__all__ = ["TargetingMode", "TargetingStrategy", "compute_density", "enumerate_arrangements"]
