"""Human versus computer Battleship match controller."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from salvo.ai.arrangements import TargetingMode
from salvo.ai.targeting import TargetingStrategy
from salvo.config import GameConfig
from salvo.telemetry import get_meter, get_tracer

from .board import Board, CellStatus, ShotOutcome
from .ship import Ship, cell_index, cell_xy

logger = logging.getLogger(__name__)
tracer = get_tracer("salvo.engine.game")
meter = get_meter("salvo.engine.game")

MOVE_COUNTER = meter.create_counter(
    "salvo_engine_moves",
    unit="1",
    description="Number of moves made in BattleshipGame",
)

StrategyFactory = Callable[[Board, Sequence[int]], TargetingStrategy]


class GamePhase(Enum):
    """High-level lifecycle of a match."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class Player(Enum):
    """The two sides of a match."""

    HUMAN = "human"
    COMPUTER = "computer"

    def opponent(self) -> Player:
        """Return the opposing player."""
        return Player.COMPUTER if self is Player.HUMAN else Player.HUMAN


class PlacementResult(Enum):
    """Outcome of a human ship placement attempt."""

    PLACED = "placed"
    COMPLETE = "complete"
    INVALID_LENGTH = "invalid_length"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class ShotResult:
    """One resolved attack."""

    player: Player
    index: int
    outcome: ShotOutcome
    ship: Ship | None

    @property
    def sunk(self) -> bool:
        return self.outcome is ShotOutcome.SUNK


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of the current match."""

    phase: GamePhase
    current_player: Player
    winner: Player | None
    statuses: dict[Player, tuple[CellStatus, ...]]
    unplaced: tuple[int, ...]
    targeting_mode: TargetingMode
    remaining_lengths: tuple[int, ...]
    known_hits: tuple[int, ...]


def segment_between(start: int, end: int, size: int) -> list[int]:
    """Cells of the straight run dragged from ``start`` to ``end``.

    The run is horizontal when it spans more columns than rows, otherwise
    vertical, and always lies on the starting row or column.
    """
    start_x, start_y = cell_xy(start, size)
    end_x, end_y = cell_xy(end, size)
    if abs(end_x - start_x) > abs(end_y - start_y):
        low, high = sorted((start_x, end_x))
        return [cell_index(x, start_y, size) for x in range(low, high + 1)]
    low, high = sorted((start_y, end_y))
    return [cell_index(start_x, y, size) for y in range(low, high + 1)]


class BattleshipGame:
    """Coordinates a match between a human and the targeting strategy."""

    def __init__(
        self,
        config: GameConfig | None = None,
        strategy_factory: StrategyFactory = TargetingStrategy,
    ) -> None:
        self.config = config or GameConfig()
        self.boards: dict[Player, Board] = {
            player: Board(size=self.config.board_size, owner=player.value) for player in Player
        }
        self.phase: GamePhase = GamePhase.SETUP
        self.current_player: Player = Player.HUMAN
        self.winner: Player | None = None
        self.unplaced: list[int] = list(self.config.fleet_lengths)
        self.strategy = strategy_factory(self.boards[Player.HUMAN], self.config.fleet_lengths)
        self._computer_ready = False
        self._rng = random.Random(self.config.seed)

    @property
    def size(self) -> int:
        return self.config.board_size

    def setup(self, randomize_human: bool = False) -> None:
        """Hide the computer fleet, and optionally the human's, at random."""
        with tracer.start_as_current_span("game.setup") as span:
            span.set_attribute("randomize_human", randomize_human)
            if self.phase is not GamePhase.SETUP:
                raise RuntimeError("Game has already started.")
            self._place_randomly(Player.COMPUTER)
            self._computer_ready = True
            if randomize_human:
                self._place_randomly(Player.HUMAN)
                self.unplaced.clear()
            self._maybe_start()

    def place_human_ship(self, start: int, end: int) -> PlacementResult:
        """Place the human ship dragged from ``start`` to ``end``."""
        if self.phase is not GamePhase.SETUP:
            raise RuntimeError("Ships can only be placed during setup.")
        cells = segment_between(start, end, self.size)
        length = len(cells)
        if length not in self.unplaced:
            logger.warning("human_placement_invalid_length", extra={"length": length})
            return PlacementResult.INVALID_LENGTH
        if not self.boards[Player.HUMAN].place_ship(Ship(tuple(cells))):
            return PlacementResult.BLOCKED

        self.unplaced.remove(length)
        if self.unplaced:
            return PlacementResult.PLACED
        self._maybe_start()
        return PlacementResult.COMPLETE

    def human_attack(self, index: int) -> ShotResult:
        """Fire the human's shot at the computer grid."""
        return self._fire(Player.HUMAN, index)

    def computer_turn(self) -> ShotResult | None:
        """Let the strategy pick and fire a shot; None when it has no candidate."""
        with tracer.start_as_current_span("game.computer_turn") as span:
            self._check_turn(Player.COMPUTER)
            index = self.strategy.choose_attack_cell()
            if index is None:
                span.set_attribute("no_decision", True)
                logger.warning("computer_turn_no_decision", extra={"phase": self.phase.value})
                return None
            span.set_attribute("cell", index)
            result = self._fire(Player.COMPUTER, index)
            self.strategy.apply_outcome(index, result.outcome, result.ship if result.sunk else None)
            return result

    def play_round(self, index: int) -> list[ShotResult]:
        """Human fires at ``index``; the computer answers unless the game just ended."""
        results = [self.human_attack(index)]
        if self.phase is GamePhase.IN_PROGRESS:
            reply = self.computer_turn()
            if reply is not None:
                results.append(reply)
        return results

    def valid_moves(self, player: Player) -> list[int]:
        """Return all cells the player can legally target."""
        if self.phase is not GamePhase.IN_PROGRESS:
            return []
        return self.boards[player.opponent()].untouched_cells()

    def get_state(self) -> GameState:
        """Return an immutable view of the current match."""
        return GameState(
            phase=self.phase,
            current_player=self.current_player,
            winner=self.winner,
            statuses={player: tuple(board.statuses) for player, board in self.boards.items()},
            unplaced=tuple(self.unplaced),
            targeting_mode=self.strategy.mode,
            remaining_lengths=tuple(self.strategy.remaining_lengths),
            known_hits=tuple(self.strategy.known_hits),
        )

    def _fire(self, player: Player, index: int) -> ShotResult:
        with tracer.start_as_current_span("game.fire") as span:
            span.set_attribute("player", player.value)
            span.set_attribute("cell", index)
            self._check_turn(player)

            target_board = self.boards[player.opponent()]
            outcome, ship = target_board.receive_shot(index)

            if target_board.all_ships_sunk():
                self.winner = player
                self.phase = GamePhase.FINISHED
                span.set_attribute("game.winner", player.value)
                logger.info("game_finished", extra={"winner": player.value})
            else:
                self.current_player = player.opponent()
                span.set_attribute("next_player", self.current_player.value)

            MOVE_COUNTER.add(1, attributes={"result": outcome.value, "player": player.value})
            return ShotResult(player, index, outcome, ship)

    def _check_turn(self, player: Player) -> None:
        if self.phase is not GamePhase.IN_PROGRESS:
            logger.error(
                "move_rejected_game_not_in_progress",
                extra={"player": player.value, "phase": self.phase.value},
            )
            raise RuntimeError("Game is not in progress.")
        if player is not self.current_player:
            logger.error(
                "move_rejected_wrong_player",
                extra={"player": player.value, "current": self.current_player.value},
            )
            raise RuntimeError("It is not this player's turn.")

    def _place_randomly(self, player: Player) -> None:
        self.boards[player].random_placement(
            self._rng,
            self.config.fleet_lengths,
            self.config.max_placement_attempts,
        )
        logger.debug("game_random_placement", extra={"board_owner": player.value})

    def _maybe_start(self) -> None:
        if self.unplaced or not self._computer_ready:
            return
        self.phase = GamePhase.IN_PROGRESS
        self.current_player = Player.HUMAN
        self.winner = None
        logger.info(
            "game_started",
            extra={"phase": self.phase.value, "current_player": self.current_player.value},
        )
