"""Command-line driver for playing Battleship against the targeting opponent."""

from __future__ import annotations

import argparse
import random
import statistics
from typing import Sequence

from salvo.ai.instrumented_targeting import InstrumentedTargetingStrategy
from salvo.ai.targeting import TargetingStrategy
from salvo.config import MAX_BOARD_SIZE, GameConfig, load_game_config
from salvo.engine.board import Board, CellStatus, ShotOutcome
from salvo.engine.game import BattleshipGame, GamePhase, PlacementResult, Player, ShotResult
from salvo.engine.instrumented_game import InstrumentedBattleshipGame
from salvo.engine.ship import cell_index, cell_xy
from salvo.telemetry import init_telemetry

ROW_LABELS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"[:MAX_BOARD_SIZE]

SYMBOLS = {
    CellStatus.HIT: "X",
    CellStatus.MISS: "o",
    CellStatus.SUNK: "#",
}


def parse_cell(text: str, size: int) -> int:
    """Parse ``A5`` style input (row letter, 1-based column) into a cell index."""
    cleaned = text.strip().upper()
    if len(cleaned) < 2 or not cleaned[0].isalpha():
        raise ValueError("Use formats like A5.")
    row = ROW_LABELS.find(cleaned[0])
    if row < 0 or row >= size:
        raise ValueError(f"Row must be between A and {ROW_LABELS[size - 1]}.")
    try:
        col = int(cleaned[1:]) - 1
    except ValueError as exc:
        raise ValueError(f"Column must be a number between 1 and {size}.") from exc
    if col not in range(size):
        raise ValueError(f"Column must be a number between 1 and {size}.")
    return cell_index(col, row, size)


def cell_label(index: int, size: int) -> str:
    x, y = cell_xy(index, size)
    return f"{ROW_LABELS[y]}{x + 1}"


def format_board(board: Board, show_ships: bool) -> str:
    ship_cells: set[int] = set()
    if show_ships:
        for ship in board.ships:
            ship_cells.update(ship.indices)

    rows = ["    " + " ".join(f"{col + 1:>2}" for col in range(board.size))]
    for y in range(board.size):
        symbols = []
        for x in range(board.size):
            index = cell_index(x, y, board.size)
            status = board.get_cell_status(index)
            symbol = SYMBOLS.get(status) or ("S" if index in ship_cells else ".")
            symbols.append(f"{symbol:>2}")
        rows.append(f"{ROW_LABELS[y]} |" + " ".join(symbols))
    return "\n".join(rows)


def describe_shot(result: ShotResult, size: int) -> str:
    who = "You" if result.player is Player.HUMAN else "The computer"
    label = cell_label(result.index, size)
    if result.outcome is ShotOutcome.SUNK and result.ship is not None:
        return f"{who} fired at {label}: sank a ship of length {result.ship.length}!"
    return f"{who} fired at {label}: {result.outcome.value}"


def _prompt_yes_no(question: str) -> bool:
    while True:
        raw = input(f"{question} [Y/n]: ").strip().lower()
        if raw in {"", "y", "yes"}:
            return True
        if raw in {"n", "no"}:
            return False
        print("Please answer with 'y' or 'n'.")


def _manual_ship_placement(game: BattleshipGame) -> None:
    board = game.boards[Player.HUMAN]
    while game.phase is GamePhase.SETUP:
        print("\nCurrent layout:")
        print(format_board(board, show_ships=True))
        lengths = ", ".join(str(length) for length in game.unplaced)
        raw = input(f"Ships left to place: {lengths}. Enter both ends (e.g., A1 A5): ").split()
        if len(raw) != 2:
            print("Enter exactly two cells.")
            continue
        try:
            start, end = (parse_cell(part, game.size) for part in raw)
        except ValueError as exc:
            print(f"Invalid coordinate: {exc}")
            continue
        result = game.place_human_ship(start, end)
        if result is PlacementResult.INVALID_LENGTH:
            print("Invalid ship length!")
        elif result is PlacementResult.BLOCKED:
            print("Can't place this ship!")


def _prompt_for_cell(valid: Sequence[int], size: int) -> int:
    valid_set = set(valid)
    while True:
        raw = input("Enter target cell (e.g., A5) or 'q' to quit: ").strip()
        if raw.lower() == "q":
            raise SystemExit("Goodbye!")
        try:
            index = parse_cell(raw, size)
        except ValueError as exc:
            print(f"Invalid input: {exc}")
            continue
        if index not in valid_set:
            print("That cell has already been targeted. Choose another.")
            continue
        return index


def new_game(config: GameConfig) -> InstrumentedBattleshipGame:
    """Match with telemetry on both the engine and the computer opponent."""
    return InstrumentedBattleshipGame(config, strategy_factory=InstrumentedTargetingStrategy)


def play_game(config: GameConfig) -> None:
    print("Welcome to Salvo!\n")
    game = new_game(config)
    manual = _prompt_yes_no("Would you like to place your ships manually?")
    game.setup(randomize_human=not manual)
    if manual:
        _manual_ship_placement(game)
    else:
        print("\nYour ships have been positioned automatically.")

    while game.phase is GamePhase.IN_PROGRESS:
        print("\nYour Board:")
        print(format_board(game.boards[Player.HUMAN], show_ships=True))
        print("\nEnemy Waters:")
        print(format_board(game.boards[Player.COMPUTER], show_ships=False))

        index = _prompt_for_cell(game.valid_moves(Player.HUMAN), game.size)
        for result in game.play_round(index):
            print(describe_shot(result, game.size))

    if game.winner is Player.HUMAN:
        print("\nCongratulations, you won!")
    else:
        print("\nThe computer won this time. Better luck next battle!")


def simulate(config: GameConfig, games: int) -> list[int]:
    """Let the strategy clear randomly placed fleets; return the shots each game took."""
    rng = random.Random(config.seed)
    shots: list[int] = []
    for _ in range(games):
        board = Board(size=config.board_size, owner="simulated")
        board.random_placement(rng, config.fleet_lengths, config.max_placement_attempts)
        strategy = TargetingStrategy(board, config.fleet_lengths)
        fired = 0
        while not board.all_ships_sunk():
            index = strategy.choose_attack_cell()
            if index is None:
                break
            outcome, ship = board.receive_shot(index)
            strategy.apply_outcome(index, outcome, ship if outcome is ShotOutcome.SUNK else None)
            fired += 1
        shots.append(fired)
    return shots


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Play Battleship against a probability-driven opponent.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--simulate",
        type=int,
        default=0,
        metavar="GAMES",
        help="Run the opponent against random fleets instead of playing.",
    )
    args = parser.parse_args(argv)

    init_telemetry()
    config = load_game_config()
    if args.seed is not None:
        config = config.model_copy(update={"seed": args.seed})

    if args.simulate > 0:
        shots = simulate(config, args.simulate)
        print(
            f"games={len(shots)} mean_shots={statistics.mean(shots):.2f} "
            f"min={min(shots)} max={max(shots)}"
        )
        return
    play_game(config)


if __name__ == "__main__":
    main()
