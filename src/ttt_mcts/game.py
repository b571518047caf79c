"""
TicTacToe game rules and state management.

Board representation: list[int] of length 9, column-major
  - index = col * 3 + row  (a1 = 0, a2 = 1, a3 = 2, b1 = 3, ...)
  - 0: empty
  - +1: X
  - -1: O

Moves are (col, row) pairs, zero-based. Their textual form is a column
letter a-c followed by a row digit 1-3 ("b2" is the centre).
"""

import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

BOARD_SIZE = 3

Move = Tuple[int, int]

# Winning lines over column-major indices
WIN_LINES = [
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # columns
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # rows
    (0, 4, 8), (2, 4, 6),              # diagonals
]

MOVE_PATTERN = re.compile(r"^([a-c])([1-3])$")


class Piece(IntEnum):
    """Cell contents. EMPTY doubles as the tie outcome."""
    EMPTY = 0
    X = 1
    O = -1

    @property
    def opposite(self) -> "Piece":
        return Piece(-self.value)

    @property
    def symbol(self) -> str:
        return "-" if self is Piece.EMPTY else self.name


# A finished board that no piece owns
TIE = Piece.EMPTY


class MoveError(Enum):
    """Why a move was refused."""
    MALFORMED = "malformed"
    OCCUPIED = "occupied"


def parse_move(text: str) -> Optional[Move]:
    """Convert a designator such as 'a3' to (col, row), or None if malformed."""
    if not isinstance(text, str):
        return None
    m = MOVE_PATTERN.match(text.strip().lower())
    if m is None:
        return None
    return ord(m.group(1)) - ord("a"), ord(m.group(2)) - ord("1")


def format_move(move: Move) -> str:
    """Convert (col, row) to its designator."""
    col, row = move
    return chr(ord("a") + col) + chr(ord("1") + row)


def _is_coord(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def normalize_move(move: Union[str, Sequence[int]]) -> Optional[Move]:
    """Convert a designator or (col, row) pair to on-board coordinates, or None."""
    if isinstance(move, str):
        return parse_move(move)
    try:
        col, row = move
    except (TypeError, ValueError):
        return None
    if not (_is_coord(col) and _is_coord(row)):
        return None
    if not (0 <= col < BOARD_SIZE and 0 <= row < BOARD_SIZE):
        return None
    return col, row


def _index(move: Move) -> int:
    return move[0] * BOARD_SIZE + move[1]


def _move(index: int) -> Move:
    return divmod(index, BOARD_SIZE)


def winners_set(board: List[int]) -> set:
    """Return set of pieces that own a complete line (both if the board is illegal)."""
    wins = set()
    for a, b, c in WIN_LINES:
        s = board[a] + board[b] + board[c]
        if s == 3:
            wins.add(Piece.X)
        elif s == -3:
            wins.add(Piece.O)
    return wins


@dataclass(eq=True)
class GameState:
    """
    Mutable game state with move history.

    Mutated only through apply_move and undo_last_move. Legal moves and the
    winner are cached and dropped on every mutation.
    """
    board: List[int] = field(default_factory=lambda: [Piece.EMPTY] * 9)
    side_to_move: Piece = Piece.X
    move_history: List[Move] = field(default_factory=list)

    _legal_cache: Optional[List[Move]] = field(default=None, init=False, repr=False, compare=False)
    _winner_cache: Optional[Piece] = field(default=None, init=False, repr=False, compare=False)
    _winner_known: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self):
        self.board = [Piece(v) for v in self.board]
        self.side_to_move = Piece(self.side_to_move)
        self.move_history = [tuple(m) for m in self.move_history]

    @classmethod
    def from_moves(cls, moves: Iterable[Union[str, Move]]) -> "GameState":
        """Replay a sequence of moves from the empty board."""
        state = cls()
        for move in moves:
            if not state.apply_move(move):
                raise ValueError(f"Illegal move in sequence: {move!r}")
        return state

    @classmethod
    def from_board(cls, board: Sequence[int]) -> "GameState":
        """
        Build a state from a flat column-major board.

        The move history is synthesised by interleaving X and O cells in
        scan order, which is consistent with the board but not necessarily
        the order the game was actually played in.
        """
        if len(board) != 9:
            raise ValueError(f"Board must have 9 cells, got {len(board)}")
        cells = [Piece(v) for v in board]
        xs = [i for i, v in enumerate(cells) if v is Piece.X]
        o_cells = [i for i, v in enumerate(cells) if v is Piece.O]
        if not (len(xs) == len(o_cells) or len(xs) == len(o_cells) + 1):
            raise ValueError(f"Inconsistent piece counts: {len(xs)} X, {len(o_cells)} O")

        state = cls()
        for i in range(len(xs)):
            state.apply_move(_move(xs[i]))
            if i < len(o_cells):
                state.apply_move(_move(o_cells[i]))
        return state

    def copy(self) -> "GameState":
        """Deep copy: no mutable state is shared with the original."""
        other = GameState(list(self.board), self.side_to_move, list(self.move_history))
        if self._legal_cache is not None:
            other._legal_cache = list(self._legal_cache)
        other._winner_cache = self._winner_cache
        other._winner_known = self._winner_known
        return other

    def _invalidate(self) -> None:
        self._legal_cache = None
        self._winner_known = False
        self._winner_cache = None

    def cell(self, move: Move) -> Piece:
        return Piece(self.board[_index(move)])

    def legal_moves(self) -> List[Move]:
        """Return empty cells in column-major order."""
        if self._legal_cache is None:
            self._legal_cache = [_move(i) for i, v in enumerate(self.board) if v == Piece.EMPTY]
        return list(self._legal_cache)

    def check_move(self, move: Union[str, Move]) -> Optional[MoveError]:
        """Return the reason a move would be refused, or None if it is playable."""
        coords = normalize_move(move)
        if coords is None:
            return MoveError.MALFORMED
        if self.board[_index(coords)] != Piece.EMPTY:
            return MoveError.OCCUPIED
        return None

    def apply_move(self, move: Union[str, Move]) -> bool:
        """
        Place the side to move's piece.

        Returns:
            True if the piece was placed, False if the move is malformed or
            the cell is occupied (state unchanged).
        """
        if self.check_move(move) is not None:
            return False
        coords = normalize_move(move)
        self.board[_index(coords)] = self.side_to_move
        self.move_history.append(coords)
        self.side_to_move = self.side_to_move.opposite
        self._invalidate()
        return True

    def undo_last_move(self) -> Move:
        """Take back the most recent placement and return it."""
        assert self.move_history, "undo_last_move called with empty move history"
        move = self.move_history.pop()
        self.board[_index(move)] = Piece.EMPTY
        self.side_to_move = self.side_to_move.opposite
        self._invalidate()
        return move

    def winner(self) -> Optional[Piece]:
        """
        Returns:
            None while undecided, TIE for a full board with no line,
            otherwise the piece owning a line.
        """
        if self._winner_known:
            return self._winner_cache
        result = None
        for a, b, c in WIN_LINES:
            s = self.board[a] + self.board[b] + self.board[c]
            if s == 3:
                result = Piece.X
                break
            if s == -3:
                result = Piece.O
                break
        else:
            if all(v != Piece.EMPTY for v in self.board):
                result = TIE
        self._winner_cache = result
        self._winner_known = True
        return result

    def is_consistent(self) -> bool:
        """Check the turn-order and history invariants."""
        x_cnt = sum(1 for v in self.board if v == Piece.X)
        o_cnt = sum(1 for v in self.board if v == Piece.O)

        # X goes first, so x_cnt == o_cnt or x_cnt == o_cnt + 1
        if not (x_cnt == o_cnt or x_cnt == o_cnt + 1):
            return False
        if (x_cnt - o_cnt == 1) != (self.side_to_move is Piece.O):
            return False
        if len(self.move_history) != x_cnt + o_cnt:
            return False

        # Can't have both winners
        return len(winners_set(self.board)) < 2

    def __str__(self) -> str:
        lines = ["==="]
        for row in range(BOARD_SIZE - 1, -1, -1):
            cells = " ".join(self.cell((col, row)).symbol for col in range(BOARD_SIZE))
            lines.append(f"\t{row + 1} {cells}")
        lines.append("\t  a b c")
        lines.append("===")
        lines.append(f"Next move:  {self.side_to_move.symbol}")
        return "\n".join(lines)
