"""
Main entry point for playing WordDrop in a terminal.

Usage:
    python -m src.main
    python -m src.main config.yaml --seed 42 --verbose
    python -m src.main --oracle word_list
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional

import yaml

from .engine import load_words
from .game import GameConfig, WordDropGame, build_oracle
from .utils.grid_visualizer import render_state, render_words

HELP = """Commands:
  d <col>   drop the bottom letter of a column into the blanks
  s <row>   shift (rotate) the letters of a row to the right
  x <row>   delete a row
  w         list the possible words
  n         start a new round
  q         quit"""


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """Load game configuration from a YAML file, or the defaults if no path is given."""
    if config_path is None:
        return GameConfig()

    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return GameConfig(**data)


def run_command(game: WordDropGame, command: str) -> bool:
    """
    Apply one typed command to the game.

    Returns:
        False when the player asked to quit, True otherwise
    """
    parts = command.strip().lower().split()
    if not parts:
        return True

    name, args = parts[0], parts[1:]

    if name in ("q", "quit", "exit"):
        return False
    if name in ("h", "help", "?"):
        print(HELP)
        return True
    if name in ("n", "new"):
        game.play_again()
        return True
    if name in ("w", "words"):
        print(render_words(game.possible_words()))
        return True

    if name not in ("d", "s", "x") or len(args) != 1 or not args[0].isdigit():
        print(f"Unknown command: {command.strip()!r} (type 'h' for help)")
        return True

    index = int(args[0])
    if name == "d":
        game.drop(index)
        if game.state.is_pending:
            print(f"Checking {game.state.pending.word.upper()}...")
            game.validate()
    elif name == "s":
        game.shift(index)
    else:
        game.delete(index)
    return True


def print_summary(game: WordDropGame) -> None:
    state = game.state
    print()
    print("=== Round Summary ===")
    if state.status == "won":
        print("Congratulations!")
        print(f"Word: {state.outcome.word.upper()}")
        if state.outcome.score is not None:
            print(f"Score: {state.outcome.score}")
    else:
        print(f"Game Over: {state.outcome.reason}")
    print(f"Row Deletes: {state.deletes_used}")
    print(f"Spins: {state.shifts_used}")


def main():
    parser = argparse.ArgumentParser(
        description="Play WordDrop in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example config.yaml:
  rules:
    grid_rows: 4
    grid_cols: 5
    blank_length: 5
    initial_shifts: 5
    initial_deletes: 3
    termination: immediate
  oracle:
    kind: dictionary_api
    timeout: 5
        """
    )
    parser.add_argument(
        "config",
        nargs="?",
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible grids"
    )
    parser.add_argument(
        "--oracle",
        choices=["dictionary_api", "llm", "word_list"],
        help="Override the configured word-validity oracle"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log game events to stderr"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.seed is not None:
        config.rules.seed = args.seed
    if args.oracle:
        config.oracle.kind = args.oracle

    try:
        corpus = load_words(config.words_file, length=config.rules.blank_length)
    except FileNotFoundError as e:
        print(f"Error loading word list: {e}", file=sys.stderr)
        sys.exit(1)

    game = WordDropGame.create(
        config=config.rules,
        corpus=corpus,
        oracle=build_oracle(config.oracle),
    )

    print("WordDrop")
    print(HELP)

    last_tick = time.monotonic()
    try:
        while True:
            print()
            print(render_state(game.state))

            if game.state.is_terminal:
                print_summary(game)
                answer = input("\nPlay again? [y/N] ").strip().lower()
                if answer != "y":
                    break
                game.play_again()
                last_tick = time.monotonic()
                continue

            command = input("\n> ")

            now = time.monotonic()
            game.tick(now - last_tick)
            last_tick = now
            if game.state.is_terminal:
                continue

            if not run_command(game, command):
                break
    except (KeyboardInterrupt, EOFError):
        print("\nGame interrupted by user")

    return 0


if __name__ == "__main__":
    sys.exit(main())
