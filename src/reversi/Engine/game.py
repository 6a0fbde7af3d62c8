"""
Reversi game-state engine.

The board is an 8x8 numpy int8 array holding BLACK (1), WHITE (-1) or
EMPTY (0). A single directional scan, `scan`, decides both whether a move is
legal and which disks it captures.

One `GameEngine` instance is one game. It is not thread-safe; callers that
share an engine between threads must serialise access to it.
"""

import logging
import operator
from enum import Enum, IntEnum
from typing import FrozenSet, Iterable, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from reversi.Engine.constants import (
    BLACK,
    BOARD_SIZE,
    DIRECTIONS,
    EMPTY,
    INITIAL_DISKS,
    WHITE,
)

_log = logging.getLogger(__name__)


class Player(IntEnum):
    BLACK = BLACK
    WHITE = WHITE

    @property
    def opponent(self) -> "Player":
        return Player(-self.value)


class Position(NamedTuple):
    row: int
    col: int


class MoveRecord(NamedTuple):
    player: Player
    position: Position
    flipped: int


class Scores(NamedTuple):
    black: int
    white: int

    def for_player(self, player: Player) -> int:
        return self.black if player == Player.BLACK else self.white


class GameStatus(Enum):
    IN_PROGRESS = "in_progress"
    TERMINAL = "terminal"


class GameOutcome(NamedTuple):
    """Final result. `winner` is None for a tie."""
    winner: Optional[Player]
    scores: Scores


class MoveOutcome(NamedTuple):
    position: Position
    player: Player
    flipped: int
    changed: Tuple[Position, ...]  # placed cell first, then flipped disks
    board: np.ndarray
    scores: Scores
    next_player: Optional[Player]  # None once the game is over
    passed: bool
    passed_player: Optional[Player]
    outcome: Optional[GameOutcome]


class EngineState(NamedTuple):
    board: np.ndarray
    current_player: Player
    scores: Scores
    legal_moves: FrozenSet[Position]
    history: Tuple[MoveRecord, ...]
    status: GameStatus
    outcome: Optional[GameOutcome]


class IllegalMove(ValueError):
    """Raised when a move is rejected. The engine state is left untouched."""

    def __init__(self, position, reason: str):
        super().__init__(f"Illegal move at {position}: {reason}")
        self.position = position
        self.reason = reason

    def __reduce__(self):
        return type(self), (self.position, self.reason)


def on_board(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def to_position(position) -> Optional[Position]:
    """Normalise a (row, col) pair of integers, or return None if it is not one."""
    try:
        row, col = (operator.index(v) for v in position)
    except (TypeError, ValueError):
        return None
    return Position(row, col)


def initial_board() -> np.ndarray:
    board = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int8)
    for row, col, value in INITIAL_DISKS:
        board[row, col] = value
    return board


def scan(board: np.ndarray, position: Sequence[int], direction: Tuple[int, int],
         player: int) -> Tuple[bool, Tuple[Position, ...]]:
    """
    Walk from `position` along `direction` over contiguous opponent disks.

    Returns (valid, run): `run` holds the opponent disks walked over, and
    `valid` is True when the run is non-empty and ends on one of `player`'s
    own disks (not on an empty cell or the board edge).
    """
    dr, dc = direction
    r, c = position[0] + dr, position[1] + dc
    run = []
    while on_board(r, c) and board[r, c] == -player:
        run.append(Position(r, c))
        r, c = r + dr, c + dc
    valid = bool(run) and on_board(r, c) and bool(board[r, c] == player)
    return valid, tuple(run)


def is_legal(board: np.ndarray, position: Sequence[int], player: int) -> bool:
    """Checks if `player` may place a disk at `position`."""
    row, col = position
    # The cell must be on the board and empty
    if not on_board(row, col) or board[row, col] != EMPTY:
        return False

    # At least one direction must capture
    return any(scan(board, position, d, player)[0] for d in DIRECTIONS)


def compute_legal_moves(board: np.ndarray, player: int) -> FrozenSet[Position]:
    """Returns every position where `player` may move."""
    empties = np.argwhere(board == EMPTY)
    return frozenset(
        Position(int(r), int(c)) for r, c in empties if is_legal(board, (r, c), player)
    )


def count_disks(board: np.ndarray) -> Scores:
    """Returns the score (number of black disks, number of white disks)."""
    return Scores(int(np.sum(board == BLACK)), int(np.sum(board == WHITE)))


def diff(before: np.ndarray, after: np.ndarray) -> Tuple[Position, ...]:
    """Positions whose contents differ between two boards, in row-major order."""
    return tuple(Position(int(r), int(c)) for r, c in np.argwhere(before != after))


def _frozen(board: np.ndarray) -> np.ndarray:
    snapshot = board.copy()
    snapshot.flags.writeable = False
    return snapshot


class GameEngine:
    """
    Board, side to move, history, scores, legal moves and status of one game.

    With no arguments the engine starts from the standard opening. Passing
    `board` (and optionally `player`) starts from that position instead; if
    `player` has no legal move there the turn passes straight to the
    opponent, and the game is terminal if neither side can move.
    """

    def __init__(self, board: Optional[Iterable] = None, player: Player = Player.BLACK):
        if board is None:
            self.restart()
            return

        grid = np.array(board, dtype=np.int8)
        if grid.shape != (BOARD_SIZE, BOARD_SIZE):
            raise ValueError(f"board must be {BOARD_SIZE}x{BOARD_SIZE}, got {grid.shape}")
        if not np.isin(grid, (EMPTY, BLACK, WHITE)).all():
            raise ValueError("board cells must be EMPTY, BLACK or WHITE")

        player = Player(player)
        self._reset_to(grid, player)
        # Same pass rule as after a move, as if the opponent had just played
        self._advance_turn(player.opponent)

    @classmethod
    def from_board(cls, board: Iterable, player: Player = Player.BLACK) -> "GameEngine":
        """Builds an engine from an arbitrary position, e.g. for analysis or tests."""
        return cls(board, player)

    def restart(self) -> "GameEngine":
        """Resets the game to the standard opening with Black to move."""
        self._reset_to(initial_board(), Player.BLACK)
        return self

    def _reset_to(self, board: np.ndarray, player: Player) -> None:
        self._board = board
        self._current_player = player
        self._history: Tuple[MoveRecord, ...] = ()
        self._scores = count_disks(board)
        self._legal_moves = compute_legal_moves(board, player)
        self._status = GameStatus.IN_PROGRESS
        self._outcome: Optional[GameOutcome] = None

    @property
    def board(self) -> np.ndarray:
        """Read-only copy of the board."""
        return _frozen(self._board)

    @property
    def current_player(self) -> Player:
        return self._current_player

    @property
    def history(self) -> Tuple[MoveRecord, ...]:
        """Moves played so far, most recent first."""
        return self._history

    @property
    def scores(self) -> Scores:
        return self._scores

    @property
    def legal_moves(self) -> FrozenSet[Position]:
        """Positions where the player to move may place a disk; empty once the game is over."""
        return self._legal_moves

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def outcome(self) -> Optional[GameOutcome]:
        """Final result, or None while the game is in progress."""
        return self._outcome

    @property
    def is_over(self) -> bool:
        return self._status is GameStatus.TERMINAL

    def snapshot(self) -> EngineState:
        """Returns an immutable copy of the whole game state."""
        return EngineState(
            board=self.board,
            current_player=self._current_player,
            scores=self._scores,
            legal_moves=self._legal_moves,
            history=self._history,
            status=self._status,
            outcome=self._outcome,
        )

    def is_legal_move(self, position: Sequence[int]) -> bool:
        """Checks if the player to move may play `position`. Malformed positions are not legal."""
        position = to_position(position)
        if position is None or self.is_over:
            return False
        return is_legal(self._board, position, self._current_player)

    def apply_move(self, position: Sequence[int]) -> MoveOutcome:
        """
        Plays `position` for the player to move and advances the turn.

        Raises IllegalMove, without touching the game, if the position is
        malformed, off the board, occupied, captures nothing, or the game is
        already over.
        """
        position = self._validate(position)
        mover = self._current_player

        # Place the disk, then flip every direction that captures
        self._board[position.row, position.col] = mover
        changed = [position]
        for direction in DIRECTIONS:
            valid, run = scan(self._board, position, direction, mover)
            if valid:
                for cell in run:
                    self._board[cell.row, cell.col] = mover
                changed.extend(run)
        flipped = len(changed) - 1

        # Record the move and recount the whole board
        self._history = (MoveRecord(mover, position, flipped),) + self._history
        self._scores = count_disks(self._board)
        _log.debug("%s played %s flipping %d", mover.name, position, flipped)

        # Switch to the next player, passing or ending the game if needed
        passed_player = self._advance_turn(mover)

        return MoveOutcome(
            position=position,
            player=mover,
            flipped=flipped,
            changed=tuple(changed),
            board=self.board,
            scores=self._scores,
            next_player=None if self.is_over else self._current_player,
            passed=passed_player is not None,
            passed_player=passed_player,
            outcome=self._outcome,
        )

    def _validate(self, position: Sequence[int]) -> Position:
        """Returns `position` as a Position, or raises IllegalMove with the reason."""
        normalised = to_position(position)
        if normalised is None:
            raise IllegalMove(position, "not a (row, col) pair")
        position = normalised
        row, col = position

        reason = None
        if self.is_over:
            reason = "the game is over"
        elif not on_board(row, col):
            reason = "outside the board"
        elif self._board[row, col] != EMPTY:
            reason = "cell is occupied"
        elif position not in self._legal_moves:
            reason = "captures nothing"
        if reason is not None:
            _log.info("Rejected move %s for %s: %s", position, self._current_player.name, reason)
            raise IllegalMove(position, reason)
        return position

    def _advance_turn(self, mover: Player) -> Optional[Player]:
        """
        Hand the turn to `mover`'s opponent, applying the pass rule.

        Returns the player who had to pass, or None. When neither side has
        a legal move the game becomes terminal and None is returned.
        """
        opponent = mover.opponent
        self._current_player = opponent
        self._legal_moves = compute_legal_moves(self._board, opponent)
        if self._legal_moves:
            return None

        # The opponent has no move: the mover plays again
        self._current_player = mover
        self._legal_moves = compute_legal_moves(self._board, mover)
        if self._legal_moves:
            _log.debug("%s has no moves, %s plays again", opponent.name, mover.name)
            return opponent

        # Neither side can move
        self._finish()
        return None

    def _finish(self) -> None:
        """Ends the game and decides the winner from the live disk count."""
        scores = count_disks(self._board)
        if scores.black > scores.white:
            winner = Player.BLACK
        elif scores.white > scores.black:
            winner = Player.WHITE
        else:
            winner = None
        self._status = GameStatus.TERMINAL
        self._outcome = GameOutcome(winner, scores)
        _log.debug("Game over: %s, %d to %d",
                   winner.name if winner else "tie", scores.black, scores.white)


def new_game() -> GameEngine:
    return GameEngine()


def legal_moves(engine: GameEngine) -> FrozenSet[Position]:
    return engine.legal_moves


def apply_move(engine: GameEngine, position: Sequence[int]) -> MoveOutcome:
    return engine.apply_move(position)


def restart(engine: GameEngine) -> GameEngine:
    return engine.restart()
