# cli_driver.py
# This file is intended to be run to play or test the tile merge game on the CLI

from typing import List, Optional
import argparse
import logging
import random

from board_engine import BoardEngine, DIRECTION, GameProgressState
from board_events import BoardListener
from engine_settings import EngineSettings

log = logging.getLogger("tile_merge.cli")

DIRECTION_MAP = {'W': DIRECTION.UP, 'A': DIRECTION.LEFT, 'S': DIRECTION.DOWN, 'D': DIRECTION.RIGHT}


class ConsoleListener(BoardListener):
    """Prints the end-of-game notifications; everything else is logged."""

    def tile_merged(self, from_position, into_position, tile):
        log.debug("Merged %s into %s -> %d", from_position, into_position, tile.value)

    def game_won(self):
        print("Congratulations! You reached the winning tile!")

    def game_over(self):
        print("No more moves possible. Better luck next time!")


def new_engine(settings: EngineSettings, best_score: int, rng: random.Random) -> BoardEngine:
    engine = BoardEngine.from_settings(settings, best_score=best_score, listener=ConsoleListener(), rng=rng)
    engine.start()
    return engine


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play the tile merge game in the terminal.")
    parser.add_argument("--rows", type=int, default=4, help="Board rows (default 4)")
    parser.add_argument("--columns", type=int, default=4, help="Board columns (default 4)")
    parser.add_argument("--spawn-probability", type=float, default=0.1,
                        help="Chance that a new tile is a 4 instead of a 2")
    parser.add_argument("--win-power", type=int, default=11,
                        help="Winning tile as a power of two (11 is 2048)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible games")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug-level logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    settings = EngineSettings(
        rows=args.rows,
        columns=args.columns,
        spawn_probability=args.spawn_probability,
        win_power=args.win_power,
    )
    rng = random.Random(args.seed)

    # 1. Initialize game
    engine = new_engine(settings, 0, rng)
    display_board_state(engine)

    # 2. Game Loop
    while not engine.is_game_over():
        move_input = input("Enter move (W/A/S/D for Up/Left/Down/Right, R to restart, Q to quit): ").strip().upper()

        if move_input == 'Q':
            print("Quitting game.")
            break

        if move_input == 'R':
            # The old board is discarded; only the best score survives a restart.
            engine = new_engine(settings, engine.best_score, rng)
            display_board_state(engine)
            continue

        chosen_direction = DIRECTION_MAP.get(move_input)
        if not chosen_direction:
            print("Invalid input. Use W, A, S, D.")
            continue

        # 3. Process the move
        outcome = engine.move(chosen_direction)
        if not outcome.moved:
            print("Move did not change the board. Try a different direction.")

        display_board_state(engine)

    # 4. Game Ended
    print("\n--- Final Board State ---")
    display_board_state(engine)


# --- Display Function ---
def format_board(engine: BoardEngine) -> str:
    """Renders the board as tab-separated tile values, '.' for empty cells."""
    lines = []
    for row in engine.serialized_grid():
        lines.append("\t".join("." if power is None else str(2 ** power) for power in row))
    return "\n".join(lines)


def display_board_state(engine: BoardEngine):
    """Prints the board, score, and game status to the console."""
    progress = engine.progress()
    print(f"\nScore: {engine.score}\tBest: {engine.best_score}")
    status_message = {
        GameProgressState.IN_PROGRESS: f"Status: {progress.name}",
        GameProgressState.GAME_WON: "YOU WON!",
        GameProgressState.GAME_OVER: "GAME OVER!"
    }
    print(status_message.get(progress, f"Status: {progress.name} (Unknown)"))
    if progress == GameProgressState.GAME_WON and engine.is_game_over():
        print("GAME OVER!")
    print(format_board(engine))
    print("-" * (engine.columns * 6))


if __name__ == "__main__":
    main()
