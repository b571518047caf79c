#!/usr/bin/env python3
"""
Play TicTacToe against the MCTS engine.

Usage:
    python play.py                     # engine plays O, 10s per move
    python play.py --engine-side X --time-budget 2
    python play.py --seed 7 --show-stats
"""

import sys
import argparse
import logging
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from ttt_mcts import GameState, MoveError, Piece, SearchConfig, SearchEngine, TIE, format_move


def read_side(prompt: str = "Should the CPU play as X or O?") -> Piece:
    """Ask until the user names a side."""
    while True:
        print(prompt)
        answer = input("> ").strip().upper()
        if answer in ("X", "O"):
            return Piece[answer]
        print("Invalid side. Must be 'X' or 'O'.")


def read_human_move(state: GameState):
    """Read a designator until it is playable. Returns None on quit."""
    while True:
        try:
            text = input(f"{state.side_to_move.symbol}> ").strip()
        except (EOFError, KeyboardInterrupt):
            return None
        if text == "quit":
            return None
        error = state.check_move(text)
        if error is None:
            return text
        if error is MoveError.OCCUPIED:
            print("That square is taken.")
        else:
            print("Moves look like 'a1' to 'c3'.")


def play(engine_side: Piece, config: SearchConfig, show_stats: bool = False):
    state = GameState()
    engine = SearchEngine(engine_side, config=config)
    engine.initialize(state)

    while state.winner() is None:
        print(state)
        if state.side_to_move is engine_side:
            engine.sync(state)
            result = engine.search()
            if show_stats:
                print(f"  {result.iterations} iterations in {result.elapsed:.2f}s")
                for stat in result.candidates:
                    print(f"  {format_move(stat.move)}: visits={stat.visit_count} avg={stat.average_score:.3f}")
            move = format_move(result.move)
            state.apply_move(result.move)
        else:
            move = read_human_move(state)
            if move is None:
                print("\nGame aborted")
                return
            state.apply_move(move)
        print(f"{state.side_to_move.opposite.name} to {move}")

    print(state)
    winner = state.winner()
    if winner is TIE:
        print("It was a tie!")
    else:
        print(f"{winner.name} won!")


def main():
    parser = argparse.ArgumentParser(description="Play TicTacToe against MCTS")
    parser.add_argument("--engine-side", type=str, default=None, choices=["X", "O"],
                        help="Side the engine plays (asked interactively if omitted)")
    parser.add_argument("--time-budget", type=float, default=10.0, help="Seconds per engine move")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--show-stats", action="store_true", help="Print search statistics")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING),
                        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    engine_side = Piece[args.engine_side] if args.engine_side else read_side()
    config = SearchConfig(time_budget=args.time_budget, seed=args.seed)
    play(engine_side, config, show_stats=args.show_stats)


if __name__ == "__main__":
    main()
