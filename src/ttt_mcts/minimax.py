"""
Exact minimax solver for TicTacToe with caching.

Provides a provably optimal reference opponent and ground truth for
judging the search engine's moves.
"""

from typing import Dict, Iterator, List, Tuple

from .game import TIE, GameState, Move, Piece, winners_set


# Cache: (board_tuple, side_to_move) -> (value, best_moves_tuple)
_MINIMAX_CACHE: Dict[Tuple[Tuple[int, ...], int], Tuple[int, Tuple[Move, ...]]] = {}


def minimax_value_and_moves(state: GameState) -> Tuple[int, List[Move]]:
    """
    Compute minimax value and best moves from current state.

    Args:
        state: Current game state (left unchanged on return)

    Returns:
        (value, best_moves) where:
        - value: +1 (win), 0 (draw), -1 (loss) from the side to move's perspective
        - best_moves: list of moves achieving optimal value
    """
    player = state.side_to_move
    key = (tuple(int(v) for v in state.board), int(player))
    if key in _MINIMAX_CACHE:
        v, best = _MINIMAX_CACHE[key]
        return v, list(best)

    winner = state.winner()
    if winner is not None:
        if winner is TIE:
            v = 0
        elif winner is player:
            v = +1
        else:
            v = -1
        _MINIMAX_CACHE[key] = (v, tuple())
        return v, []

    best_v = -2
    best_moves: List[Move] = []

    for move in state.legal_moves():
        state.apply_move(move)
        child_v, _ = minimax_value_and_moves(state)
        state.undo_last_move()
        v_here = -child_v  # Negate for opponent's perspective

        if v_here > best_v:
            best_v = v_here
            best_moves = [move]
        elif v_here == best_v:
            best_moves.append(move)

    _MINIMAX_CACHE[key] = (best_v, tuple(best_moves))
    return best_v, best_moves


def clear_cache():
    """Clear minimax cache (useful for memory management)."""
    _MINIMAX_CACHE.clear()


def cache_size() -> int:
    """Return current cache size."""
    return len(_MINIMAX_CACHE)


def iter_all_legal_nonterminal_states() -> Iterator[GameState]:
    """
    Iterate over all legal non-terminal states.

    Yields:
        GameState for every reachable undecided position.
    """
    for n in range(3**9):
        # Decode base-3 representation
        x = n
        digits = [0] * 9
        for i in range(9):
            digits[i] = x % 3
            x //= 3

        x_cnt = sum(1 for d in digits if d == 1)
        o_cnt = sum(1 for d in digits if d == 2)

        # Legal turn order: X starts
        if not (x_cnt == o_cnt or x_cnt == o_cnt + 1):
            continue

        board = [Piece.EMPTY] * 9
        for i, d in enumerate(digits):
            if d == 1:
                board[i] = Piece.X
            elif d == 2:
                board[i] = Piece.O

        # Any line ends the game, so only lineless boards are undecided
        if winners_set(board) or x_cnt + o_cnt == 9:
            continue

        yield GameState.from_board(board)
