import pickle

import numpy as np
import pytest

from reversi.Engine.constants import BLACK, EMPTY, WHITE
from reversi.Engine.game import (
    GameEngine,
    GameStatus,
    IllegalMove,
    MoveRecord,
    Player,
    Position,
    Scores,
    apply_move,
    compute_legal_moves,
    diff,
    legal_moves,
    new_game,
    restart,
    scan,
)

OPENING_MOVES = {Position(2, 3), Position(3, 2), Position(4, 5), Position(5, 4)}

# Black can play (0,0) or (7,2); once Black takes (0,0), White cannot capture anything
PASS_ROWS = [
    ".OX.....",
    "........",
    "........",
    "........",
    "........",
    "........",
    "........",
    "XO......",
]


def assert_same_state(before, after):
    assert np.array_equal(before.board, after.board)
    assert before.current_player == after.current_player
    assert before.scores == after.scores
    assert before.legal_moves == after.legal_moves
    assert before.history == after.history
    assert before.status == after.status


def test_initial_state():
    engine = GameEngine()
    board = engine.board

    assert np.count_nonzero(board) == 4
    assert board[3, 3] == WHITE and board[4, 4] == WHITE
    assert board[3, 4] == BLACK and board[4, 3] == BLACK
    assert engine.scores == Scores(2, 2)
    assert engine.current_player == Player.BLACK
    assert engine.history == ()
    assert engine.status is GameStatus.IN_PROGRESS
    assert engine.outcome is None
    assert engine.legal_moves == OPENING_MOVES


def test_opening_move_flips_one_disk():
    engine = GameEngine()
    result = engine.apply_move((2, 3))

    assert result.flipped == 1
    assert result.changed == (Position(2, 3), Position(3, 3))
    assert engine.board[3, 3] == BLACK
    assert result.scores == Scores(4, 1)
    assert result.next_player == Player.WHITE
    assert engine.current_player == Player.WHITE
    assert not result.passed
    assert result.outcome is None
    assert engine.history == (MoveRecord(Player.BLACK, Position(2, 3), 1),)
    assert engine.legal_moves == {Position(2, 2), Position(2, 4), Position(4, 2)}


def test_history_is_most_recent_first():
    engine = GameEngine()
    engine.apply_move((2, 3))
    engine.apply_move((2, 2))

    assert [r.player for r in engine.history] == [Player.WHITE, Player.BLACK]
    assert engine.history[0].position == Position(2, 2)


def test_outcome_board_is_a_snapshot():
    engine = GameEngine()
    result = engine.apply_move((2, 3))
    engine.apply_move((2, 2))

    assert result.board[2, 2] == EMPTY
    with pytest.raises(ValueError):
        result.board[0, 0] = BLACK
    with pytest.raises(ValueError):
        engine.board[0, 0] = BLACK


@pytest.mark.parametrize("position, reason", [
    ((0, 0), "captures nothing"),
    ((3, 3), "cell is occupied"),
    ((8, 0), "outside the board"),
    ((-1, 2), "outside the board"),
    (("a", 1), "not a (row, col) pair"),
    ((1, 2, 3), "not a (row, col) pair"),
])
def test_illegal_move_leaves_state_unchanged(position, reason):
    engine = GameEngine()
    before = engine.snapshot()

    with pytest.raises(IllegalMove) as excinfo:
        engine.apply_move(position)

    assert excinfo.value.reason == reason
    assert_same_state(before, engine.snapshot())


def test_illegal_move_is_a_value_error():
    with pytest.raises(ValueError):
        GameEngine().apply_move((7, 7))


def test_is_legal_move_matches_legal_moves():
    engine = GameEngine()
    for row in range(8):
        for col in range(8):
            assert engine.is_legal_move((row, col)) == ((row, col) in OPENING_MOVES)
    assert not engine.is_legal_move((9, 9))


def test_scan_reports_run_and_validity(board_from):
    board = board_from([
        "........",
        ".XOOO...",
        "........",
        "..OO....",
        "........",
        "......OO",
        "........",
        "........",
    ])

    assert scan(board, (1, 5), (0, -1), BLACK) == (True, (Position(1, 4), Position(1, 3), Position(1, 2)))
    # Run reaches an empty cell
    assert scan(board, (3, 4), (0, -1), BLACK) == (False, (Position(3, 3), Position(3, 2)))
    # Own disk right next to the cell
    assert scan(board, (1, 0), (0, 1), BLACK) == (False, ())
    # Runs off the board
    assert scan(board, (5, 5), (0, 1), BLACK) == (False, (Position(5, 6), Position(5, 7)))


def test_capture_in_several_directions(board_from):
    engine = GameEngine.from_board(board_from([
        "........",
        "........",
        "...OX...",
        "..OO....",
        "..X.X...",
        "........",
        "........",
        "........",
    ]), Player.BLACK)

    result = engine.apply_move((2, 2))

    assert result.flipped == 3
    assert set(result.changed[1:]) == {Position(2, 3), Position(3, 2), Position(3, 3)}
    assert engine.scores == Scores(7, 0)


def test_pass_returns_turn_to_mover(board_from):
    engine = GameEngine.from_board(board_from(PASS_ROWS), Player.BLACK)
    assert engine.legal_moves == {Position(0, 0), Position(7, 2)}

    result = engine.apply_move((0, 0))

    assert result.passed
    assert result.passed_player == Player.WHITE
    assert result.next_player == Player.BLACK
    assert engine.current_player == Player.BLACK
    assert engine.legal_moves == {Position(7, 2)}
    assert engine.status is GameStatus.IN_PROGRESS
    assert result.flipped == 1
    assert diff(board_from(PASS_ROWS), engine.board) == (Position(0, 0), Position(0, 1))


def test_game_ends_when_neither_side_can_move(board_from):
    engine = GameEngine.from_board(board_from(PASS_ROWS), Player.BLACK)
    engine.apply_move((0, 0))

    result = engine.apply_move((7, 2))

    assert engine.status is GameStatus.TERMINAL
    assert engine.is_over
    assert not result.passed
    assert result.next_player is None
    assert result.outcome.winner == Player.BLACK
    assert result.outcome.scores == Scores(6, 0)
    assert engine.legal_moves == frozenset()
    assert not engine.is_legal_move((5, 5))

    before = engine.snapshot()
    with pytest.raises(IllegalMove) as excinfo:
        engine.apply_move((5, 5))
    assert excinfo.value.reason == "the game is over"
    assert_same_state(before, engine.snapshot())


def test_last_move_fills_board_with_black_win():
    board = np.full((8, 8), WHITE, dtype=np.int8)
    board[0, 0] = EMPTY
    board[0, 2] = BLACK
    board[1, 0] = BLACK
    board[1, 1] = BLACK
    board[5:, :] = BLACK
    board[4, :4] = BLACK
    engine = GameEngine.from_board(board, Player.BLACK)
    assert engine.scores == Scores(31, 32)

    result = engine.apply_move((0, 0))

    assert result.flipped == 1
    assert result.outcome.winner == Player.BLACK
    assert result.outcome.scores == Scores(33, 31)
    assert engine.status is GameStatus.TERMINAL


def test_full_board_is_terminal_on_construction():
    board = np.full((8, 8), WHITE, dtype=np.int8)
    board.flat[:33] = BLACK
    engine = GameEngine.from_board(board)

    assert engine.status is GameStatus.TERMINAL
    assert engine.outcome.winner == Player.BLACK
    assert engine.outcome.scores == Scores(33, 31)


def test_equal_counts_are_a_tie():
    board = np.full((8, 8), WHITE, dtype=np.int8)
    board[:4, :] = BLACK
    engine = GameEngine.from_board(board, Player.WHITE)

    assert engine.outcome.winner is None
    assert engine.outcome.scores == Scores(32, 32)


def test_from_board_passes_when_side_to_move_is_stuck(board_from):
    engine = GameEngine.from_board(board_from(["XXX....."] + PASS_ROWS[1:]), Player.WHITE)

    assert engine.current_player == Player.BLACK
    assert engine.status is GameStatus.IN_PROGRESS
    assert engine.legal_moves == {Position(7, 2)}


def test_from_board_keeps_side_to_move_with_a_capture(board_from):
    # White can take (0,2) by playing (0,3)
    engine = GameEngine(board_from(PASS_ROWS), Player.WHITE)

    assert engine.current_player == Player.WHITE
    assert engine.legal_moves == {Position(0, 3)}


@pytest.mark.parametrize("position", [(2.0, 3), ("a", 1), (1, 2, 3), None, 5])
def test_is_legal_move_rejects_malformed_positions(position):
    assert GameEngine().is_legal_move(position) is False


def test_is_legal_move_accepts_numpy_integers():
    assert GameEngine().is_legal_move((np.int64(2), np.int64(3)))


def test_illegal_move_survives_pickling():
    with pytest.raises(IllegalMove) as excinfo:
        GameEngine().apply_move((0, 0))

    restored = pickle.loads(pickle.dumps(excinfo.value))

    assert isinstance(restored, IllegalMove)
    assert restored.position == Position(0, 0)
    assert restored.reason == "captures nothing"
    assert str(restored) == str(excinfo.value)


@pytest.mark.parametrize("board", [
    np.zeros((7, 8)),
    np.full((8, 8), 2),
])
def test_from_board_rejects_malformed_boards(board):
    with pytest.raises(ValueError):
        GameEngine.from_board(board)


def test_restart_resets_everything(board_from):
    engine = GameEngine.from_board(board_from(PASS_ROWS), Player.BLACK)
    engine.apply_move((0, 0))
    engine.apply_move((7, 2))

    assert engine.restart() is engine
    assert engine.status is GameStatus.IN_PROGRESS
    assert engine.outcome is None
    assert engine.history == ()
    assert engine.scores == Scores(2, 2)
    assert engine.current_player == Player.BLACK
    assert engine.legal_moves == OPENING_MOVES


def test_functional_contract():
    engine = new_game()
    assert legal_moves(engine) == OPENING_MOVES

    result = apply_move(engine, Position(5, 4))
    assert result.next_player == Player.WHITE

    assert restart(engine).scores == Scores(2, 2)


def test_separate_engines_do_not_share_state():
    first, second = new_game(), new_game()
    first.apply_move((2, 3))

    assert second.scores == Scores(2, 2)
    assert second.current_player == Player.BLACK


@pytest.mark.parametrize("seed", range(8))
def test_random_games_keep_invariants(seed):
    rng = np.random.default_rng(seed)
    engine = GameEngine()

    while not engine.is_over:
        before = engine.snapshot()
        mover = engine.current_player
        for row in range(8):
            for col in range(8):
                assert engine.is_legal_move((row, col)) == ((row, col) in before.legal_moves)

        illegal = [tuple(p) for p in np.argwhere(before.board == EMPTY)
                   if tuple(p) not in before.legal_moves]
        if illegal:
            with pytest.raises(IllegalMove):
                engine.apply_move(illegal[rng.integers(len(illegal))])
            assert_same_state(before, engine.snapshot())

        moves = sorted(before.legal_moves)
        result = engine.apply_move(moves[rng.integers(len(moves))])

        changed = diff(before.board, result.board)
        assert len(changed) == result.flipped + 1
        assert set(changed) == set(result.changed)
        assert result.flipped >= 1
        for cell in result.changed[1:]:
            assert before.board[cell.row, cell.col] == mover.opponent
            assert result.board[cell.row, cell.col] == mover

        black, white = result.scores
        assert black + white + np.count_nonzero(result.board == EMPTY) == 64
        assert result.scores == (np.count_nonzero(result.board == BLACK),
                                 np.count_nonzero(result.board == WHITE))
        assert len(engine.history) == len(before.history) + 1

        if result.outcome is not None:
            assert not compute_legal_moves(result.board, BLACK)
            assert not compute_legal_moves(result.board, WHITE)
        elif result.passed:
            assert result.next_player == mover
            assert not compute_legal_moves(result.board, mover.opponent)
        else:
            assert result.next_player == mover.opponent

    outcome = engine.outcome
    black, white = outcome.scores
    if black > white:
        assert outcome.winner == Player.BLACK
    elif white > black:
        assert outcome.winner == Player.WHITE
    else:
        assert outcome.winner is None
