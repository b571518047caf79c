import pytest

from ttt_mcts.game import (
    TIE,
    WIN_LINES,
    GameState,
    MoveError,
    Piece,
    format_move,
    normalize_move,
    parse_move,
)

TIE_SEQUENCE = ["a1", "b1", "c1", "b2", "a2", "c2", "b3", "a3", "c3"]


@pytest.fixture
def empty_state():
    return GameState()


@pytest.fixture
def midgame_state():
    return GameState.from_moves(["b2", "a1", "c3"])


def test_initial_state(empty_state):
    state = empty_state
    assert state.board == [Piece.EMPTY] * 9
    assert state.side_to_move is Piece.X
    assert state.move_history == []
    assert state.winner() is None
    assert state.is_consistent()


def test_legal_moves_column_major(empty_state):
    assert empty_state.legal_moves() == [
        (0, 0), (0, 1), (0, 2),
        (1, 0), (1, 1), (1, 2),
        (2, 0), (2, 1), (2, 2),
    ]


def test_parse_move():
    assert parse_move("a1") == (0, 0)
    assert parse_move("c3") == (2, 2)
    assert parse_move(" B2 ") == (1, 1)
    for bad in ["d1", "a4", "a0", "a", "a10", "", "1a", "quit"]:
        assert parse_move(bad) is None, bad


def test_format_move_inverts_parse(empty_state):
    for move in empty_state.legal_moves():
        assert parse_move(format_move(move)) == move


def test_apply_move_switches_player(empty_state):
    state = empty_state
    assert state.apply_move("a1")
    assert state.cell((0, 0)) is Piece.X
    assert state.side_to_move is Piece.O
    assert state.move_history == [(0, 0)]
    assert state.apply_move((1, 1))
    assert state.cell((1, 1)) is Piece.O
    assert state.side_to_move is Piece.X
    assert state.move_history == [(0, 0), (1, 1)]


def test_apply_occupied_is_noop(midgame_state):
    before = midgame_state.copy()
    assert midgame_state.check_move("b2") is MoveError.OCCUPIED
    assert not midgame_state.apply_move("b2")
    assert midgame_state == before


def test_apply_malformed_is_noop(midgame_state):
    before = midgame_state.copy()
    for bad in ["z9", "b", (3, 0), (0, -1), "b22", None, 4, (1.0, 1.0), (True, False), (0, True)]:
        assert midgame_state.check_move(bad) is MoveError.MALFORMED
        assert not midgame_state.apply_move(bad)
    assert midgame_state == before


def test_apply_then_undo_restores(midgame_state):
    for move in midgame_state.legal_moves():
        before = midgame_state.copy()
        assert midgame_state.apply_move(move)
        assert midgame_state != before
        assert midgame_state.undo_last_move() == move
        assert midgame_state == before
        assert midgame_state.legal_moves() == before.legal_moves()
        assert midgame_state.winner() == before.winner()


def test_undo_empty_history_is_fatal(empty_state):
    with pytest.raises(AssertionError):
        empty_state.undo_last_move()


def test_copy_is_independent(midgame_state):
    clone = midgame_state.copy()
    assert clone == midgame_state
    clone.apply_move("a3")
    assert clone != midgame_state
    assert midgame_state.cell((0, 2)) is Piece.EMPTY
    assert len(midgame_state.move_history) == 3


@pytest.mark.parametrize("line", WIN_LINES)
@pytest.mark.parametrize("piece", [Piece.X, Piece.O])
def test_every_line_wins(line, piece):
    board = [Piece.EMPTY] * 9
    for i in line:
        board[i] = piece
    state = GameState(board=board)
    assert state.winner() is piece


def test_x_column_a_scenario():
    state = GameState.from_moves(["a1", "b2", "a2", "b1", "a3"])
    assert state.winner() is Piece.X


def test_full_board_without_line_is_tie():
    state = GameState.from_moves(TIE_SEQUENCE)
    assert state.legal_moves() == []
    assert state.winner() is TIE


def test_sequential_fill_is_won_by_x():
    # a3, b2, c1 completes the anti-diagonal on the seventh move
    state = GameState.from_moves(["a1", "a2", "a3", "b1", "b2", "b3", "c1"])
    assert state.winner() is Piece.X
    state = GameState.from_moves(["a1", "a2", "a3", "b1", "b2", "b3", "c1", "c2", "c3"])
    assert state.winner() is Piece.X


def test_win_on_full_board_beats_tie():
    o, x, e = Piece.O, Piece.X, Piece.EMPTY
    # column a all X, board full
    board = [x, x, x,  o, o, x,  x, o, o]
    state = GameState.from_board(board)
    assert e not in state.board
    assert state.winner() is Piece.X


def test_winner_is_stable(midgame_state):
    first = midgame_state.winner()
    for _ in range(3):
        assert midgame_state.winner() == first
    state = GameState.from_moves(["a1", "b2", "a2", "b1", "a3"])
    assert state.winner() is state.winner() is Piece.X


def test_winner_recomputed_after_mutation():
    state = GameState.from_moves(["a1", "b2", "a2", "b1"])
    assert state.winner() is None
    state.apply_move("a3")
    assert state.winner() is Piece.X
    state.undo_last_move()
    assert state.winner() is None


def test_legal_moves_count_and_uniqueness():
    state = GameState()
    for i, move in enumerate(TIE_SEQUENCE):
        moves = state.legal_moves()
        assert len(moves) == 9 - i
        assert len(set(moves)) == len(moves)
        assert len(state.move_history) == i
        state.apply_move(move)
    assert state.legal_moves() == []


def test_legal_moves_result_is_a_copy(empty_state):
    moves = empty_state.legal_moves()
    moves.clear()
    assert len(empty_state.legal_moves()) == 9


def test_turn_invariant_holds_through_game():
    state = GameState()
    for move in TIE_SEQUENCE:
        state.apply_move(move)
        assert state.is_consistent()
    state.side_to_move = state.side_to_move.opposite
    assert not state.is_consistent()


def test_normalize_move_rejects_bools():
    assert normalize_move((1, 0)) == (1, 0)
    assert normalize_move((True, False)) is None
    assert not GameState().apply_move((True, False))


def test_from_board_rejects_bad_counts():
    x = Piece.X
    with pytest.raises(ValueError):
        GameState.from_board([x, x, 0, 0, 0, 0, 0, 0, 0])
    with pytest.raises(ValueError):
        GameState.from_board([0] * 8)


def test_from_board_synthesises_history():
    x, o = Piece.X, Piece.O
    state = GameState.from_board([x, 0, 0, 0, o, 0, 0, 0, x])
    assert state.side_to_move is Piece.O
    assert len(state.move_history) == 3
    assert state.is_consistent()


def test_from_moves_rejects_illegal_sequence():
    with pytest.raises(ValueError):
        GameState.from_moves(["a1", "a1"])


def test_str_renders_board():
    text = str(GameState.from_moves(["a1"]))
    assert "a b c" in text
    assert "\t1 X - -" in text
    assert text.endswith("Next move:  O")
