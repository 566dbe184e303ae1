"""Targeting strategy emitting OpenTelemetry data."""

from __future__ import annotations

import time

from salvo.engine.board import ShotOutcome
from salvo.engine.ship import Ship
from salvo.telemetry import get_logger, get_tracer, record_game_metric

from .targeting import TargetingStrategy


class InstrumentedTargetingStrategy(TargetingStrategy):
    """TargetingStrategy subclass that wraps decisions with traces/metrics/logging."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._logger = get_logger("salvo.targeting")
        self._tracer = get_tracer("salvo.targeting")

    def choose_attack_cell(self) -> int | None:
        start = time.perf_counter()
        with self._tracer.start_as_current_span("salvo.targeting.choose_attack_cell") as span:
            mode = self.mode.value
            span.set_attribute("mode", mode)
            span.set_attribute("pending_hits", len(self.known_hits))
            span.set_attribute("remaining_ships", len(self.remaining_lengths))

            index = super().choose_attack_cell()

            duration_ms = (time.perf_counter() - start) * 1000
            record_game_metric("salvo_targeting_decisions_total", 1, {"mode": mode})
            record_game_metric("salvo_targeting_decision_latency_ms", duration_ms, {"mode": mode})
            if index is None:
                span.set_attribute("no_candidate", True)
                self._logger.warning("choose_attack_cell mode=%s found no untouched cell", mode)
                return None

            score = int(self._density[index])
            span.set_attribute("cell", index)
            span.set_attribute("score", score)
            self._logger.info("choose_attack_cell mode=%s cell=%d score=%d", mode, index, score)
            return index

    def apply_outcome(self, index: int, outcome: ShotOutcome, sunk_ship: Ship | None = None) -> None:
        with self._tracer.start_as_current_span("salvo.targeting.apply_outcome") as span:
            previous = self.mode
            span.set_attribute("cell", index)
            span.set_attribute("outcome", outcome.value)
            super().apply_outcome(index, outcome, sunk_ship)
            span.set_attribute("mode", self.mode.value)
            record_game_metric("salvo_targeting_outcomes_total", 1, {"outcome": outcome.value})
            if self.mode is not previous:
                record_game_metric(
                    "salvo_targeting_mode_transitions_total",
                    1,
                    {"from": previous.value, "to": self.mode.value},
                )
            self._logger.info(
                "apply_outcome cell=%d outcome=%s mode=%s pending_hits=%d",
                index,
                outcome.value,
                self.mode.value,
                len(self.known_hits),
            )
