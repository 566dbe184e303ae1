"""Battleship match with telemetry hooks."""

from __future__ import annotations

import time

from salvo.ai.instrumented_targeting import InstrumentedTargetingStrategy
from salvo.config import GameConfig
from salvo.telemetry import get_logger, get_tracer, record_game_metric

from .board import CellStatus
from .game import BattleshipGame, GamePhase, Player, ShotResult, StrategyFactory


class InstrumentedBattleshipGame(BattleshipGame):
    """Wraps BattleshipGame with a span per match plus per-shot metrics and logs."""

    def __init__(
        self,
        config: GameConfig | None = None,
        strategy_factory: StrategyFactory = InstrumentedTargetingStrategy,
    ) -> None:
        super().__init__(config, strategy_factory)
        self._logger = get_logger("salvo.engine")
        self._tracer = get_tracer("salvo.engine")
        self._game_span_cm = None
        self._game_span = None
        self._game_start_time: float | None = None

    def setup(self, randomize_human: bool = False) -> None:
        self._start_game_span()
        with self._tracer.start_as_current_span("salvo.engine.setup") as span:
            super().setup(randomize_human)
            span.set_attribute("computer_ships", len(self.boards[Player.COMPUTER].ships))
            span.set_attribute("human_ships", len(self.boards[Player.HUMAN].ships))
            record_game_metric("salvo_game_setup_total", 1, {"randomize_human": randomize_human})
            self._logger.info("Setup finished phase=%s", self.phase.value)

    def _fire(self, player: Player, index: int) -> ShotResult:
        with self._tracer.start_as_current_span("salvo.engine.fire") as span:
            span.set_attribute("player", player.value)
            span.set_attribute("cell", index)
            try:
                result = super()._fire(player, index)
            except (ValueError, RuntimeError) as exc:
                record_game_metric(
                    "salvo_game_invalid_moves_total",
                    1,
                    {"player": player.value, "reason": type(exc).__name__},
                )
                span.record_exception(exc)
                span.set_attribute("error", True)
                self._logger.error("Invalid move from %s at cell %d: %s", player.value, index, exc)
                raise

            span.set_attribute("outcome", result.outcome.value)
            record_game_metric("salvo_shots_total", 1, {"player": player.value})
            record_game_metric(
                "salvo_shots_by_result_total",
                1,
                {"player": player.value, "result": result.outcome.value},
            )
            self._logger.info(
                "fire player=%s cell=%d outcome=%s",
                player.value,
                index,
                result.outcome.value,
            )

            if self.phase is GamePhase.FINISHED and self.winner:
                span.set_attribute("winner", self.winner.value)
                self._finish_game()
            return result

    def _start_game_span(self) -> None:
        self._close_game_span()
        self._game_start_time = time.perf_counter()
        self._game_span_cm = self._tracer.start_as_current_span("salvo.engine.game")
        self._game_span = self._game_span_cm.__enter__()

    def _finish_game(self) -> None:
        duration = (time.perf_counter() - self._game_start_time) if self._game_start_time else 0.0
        total_shots = sum(
            1
            for board in self.boards.values()
            for status in board.statuses
            if status is not CellStatus.UNTOUCHED
        )
        winner = self.winner.value if self.winner else "unknown"

        record_game_metric("salvo_game_completed_total", 1, {"winner": winner})
        record_game_metric("salvo_game_duration_seconds", duration, {"winner": winner})

        with self._tracer.start_as_current_span("salvo.engine.game_complete") as span:
            span.set_attribute("winner", winner)
            span.set_attribute("shots", total_shots)
            span.set_attribute("duration_ms", duration * 1000)

        if self._game_span is not None:
            self._game_span.set_attribute("winner", winner)
            self._game_span.set_attribute("shots", total_shots)

        self._logger.info("Game finished. Winner=%s shots=%d duration_s=%.3f", winner, total_shots, duration)
        self._close_game_span()

    def _close_game_span(self) -> None:
        if self._game_span_cm is not None:
            self._game_span_cm.__exit__(None, None, None)
            self._game_span_cm = None
            self._game_span = None
