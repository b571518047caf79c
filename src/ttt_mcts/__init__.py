"""
TicTacToe MCTS - Play TicTacToe with Monte Carlo Tree Search.

This package implements a UCT search engine driven by pure random rollouts,
with a persistent tree that is re-rooted as the game advances.
"""

from .game import GameState, Piece, TIE, Move, MoveError, parse_move, format_move
from .tree import TreeNode, SearchTree
from .mcts import SearchConfig, SearchEngine, SearchResult, SearchStatus, ChildStat
from .minimax import minimax_value_and_moves, iter_all_legal_nonterminal_states
from .eval import (
    MCTSAgent,
    random_agent,
    minimax_agent,
    play_game,
    eval_vs_random,
    eval_vs_minimax,
    eval_minimax_agreement,
)

__version__ = "0.1.0"
__all__ = [
    "GameState",
    "Piece",
    "TIE",
    "Move",
    "MoveError",
    "parse_move",
    "format_move",
    "TreeNode",
    "SearchTree",
    "SearchConfig",
    "SearchEngine",
    "SearchResult",
    "SearchStatus",
    "ChildStat",
    "minimax_value_and_moves",
    "iter_all_legal_nonterminal_states",
    "MCTSAgent",
    "random_agent",
    "minimax_agent",
    "play_game",
    "eval_vs_random",
    "eval_vs_minimax",
    "eval_minimax_agreement",
]
