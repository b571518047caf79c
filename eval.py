#!/usr/bin/env python3
"""
Evaluate the MCTS engine.

Usage:
    python eval.py --games 50 --time-budget 0.2
    python eval.py --agreement-states 500
"""

import sys
import argparse
import logging
from pathlib import Path

# Add src to path
sys.path = [str(Path(__file__).parent / "src")] + sys.path

from ttt_mcts import (
    SearchConfig,
    eval_vs_random,
    eval_vs_minimax,
    eval_minimax_agreement,
)


def main():
    parser = argparse.ArgumentParser(description="Evaluate TicTacToe MCTS engine")
    parser.add_argument("--games", type=int, default=100, help="Number of eval games")
    parser.add_argument("--time-budget", type=float, default=0.1, help="Seconds per engine move")
    parser.add_argument("--max-iterations", type=int, default=None, help="Iteration cap per move")
    parser.add_argument("--agreement-states", type=int, default=200,
                        help="Positions to check against minimax (0 = skip)")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING),
                        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    config = SearchConfig(time_budget=args.time_budget, max_iterations=args.max_iterations)
    print(f"Config: {config}")

    print("\n=== Evaluation ===")

    # vs Random
    print(f"\nvs Random ({args.games} games)...")
    w, d, l = eval_vs_random(games=args.games, config=config, seed=args.seed)
    print(f"  Wins:   {w:.2%}")
    print(f"  Draws:  {d:.2%}")
    print(f"  Losses: {l:.2%}")

    # vs Minimax
    print(f"\nvs Minimax ({args.games} games)...")
    results = eval_vs_minimax(games=args.games, config=config, seed=args.seed)
    print(f"  Wins:   {results['engine_w']:.2%}")
    print(f"  Draws:  {results['engine_d']:.2%}")
    print(f"  Losses: {results['engine_l']:.2%}")

    # Minimax agreement
    if args.agreement_states > 0:
        print(f"\nMinimax Agreement ({args.agreement_states} states)...")
        ag = eval_minimax_agreement(config=config, max_states=args.agreement_states, seed=args.seed)
        print(f"  States:      {ag['n_states']}")
        print(f"  Optimal:     {ag['optimal_move_rate']:.2%}")


if __name__ == "__main__":
    main()
