"""Game configuration loaded from keyword overrides and ``SALVO_*`` env vars."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, field_validator, model_validator

from salvo.engine.board import DEFAULT_MAX_PLACEMENT_ATTEMPTS
from salvo.engine.ship import BOARD_SIZE, FLEET_LENGTHS

# Rows are labelled A..Z.
MAX_BOARD_SIZE = 26


class GameConfig(BaseModel):
    """Grid size, fleet composition and placement limits for one match."""

    board_size: int = BOARD_SIZE
    fleet_lengths: tuple[int, ...] = FLEET_LENGTHS
    max_placement_attempts: int = DEFAULT_MAX_PLACEMENT_ATTEMPTS
    seed: int | None = None

    @field_validator("board_size")
    @classmethod
    def _check_board_size(cls, value: int) -> int:
        if not 2 <= value <= MAX_BOARD_SIZE:
            raise ValueError(f"board_size must be between 2 and {MAX_BOARD_SIZE}")
        return value

    @field_validator("max_placement_attempts")
    @classmethod
    def _check_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_placement_attempts must be positive")
        return value

    @model_validator(mode="after")
    def _check_fleet(self) -> "GameConfig":
        if not self.fleet_lengths:
            raise ValueError("fleet_lengths must not be empty")
        for length in self.fleet_lengths:
            if not 2 <= length <= self.board_size:
                raise ValueError(f"ship length {length} does not fit a {self.board_size} grid")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameConfig":
        """Construct config from `SALVO_BOARD_SIZE`, `SALVO_FLEET`, ... plus overrides."""

        data: Dict[str, Any] = {}
        if os.getenv("SALVO_BOARD_SIZE"):
            data["board_size"] = int(os.environ["SALVO_BOARD_SIZE"])
        if os.getenv("SALVO_FLEET"):
            data["fleet_lengths"] = tuple(
                int(part) for part in os.environ["SALVO_FLEET"].split(",") if part.strip()
            )
        if os.getenv("SALVO_MAX_PLACEMENT_ATTEMPTS"):
            data["max_placement_attempts"] = int(os.environ["SALVO_MAX_PLACEMENT_ATTEMPTS"])
        if os.getenv("SALVO_SEED"):
            data["seed"] = int(os.environ["SALVO_SEED"])
        data.update(overrides)
        return cls(**data)


@lru_cache(maxsize=1)
def load_game_config() -> GameConfig:
    """Load and cache game config from the environment."""

    return GameConfig.from_env()
