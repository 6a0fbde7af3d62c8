"""Text helpers shared by the pygame window and the env's ansi renderer."""

from typing import FrozenSet, Iterable, List, Optional

import numpy as np

from reversi.Engine.constants import BLACK, BOARD_SIZE, WHITE
from reversi.Engine.game import GameOutcome, MoveOutcome, MoveRecord, Player, Position

HISTORY_LENGTH = 10


def player_name(player: Player) -> str:
    return "Black" if player == Player.BLACK else "White"


def turn_message(player: Player) -> str:
    return f"{player_name(player)}'s turn"


def pass_message(passed_player: Player) -> str:
    """Message shown when `passed_player` had no move and the other side plays again."""
    return (f"{player_name(passed_player)} has no moves. "
            f"{player_name(passed_player.opponent)}'s turn again.")


def game_over_message(outcome: GameOutcome) -> str:
    black, white = outcome.scores
    if outcome.winner == Player.BLACK:
        return f"Game Over! Black wins with {black} to {white}!"
    if outcome.winner == Player.WHITE:
        return f"Game Over! White wins with {white} to {black}!"
    return f"Game Over! It's a tie! {black} to {white}"


def status_message(result: MoveOutcome) -> str:
    """Status line to display after a successful move."""
    if result.outcome is not None:
        return game_over_message(result.outcome)
    if result.passed:
        return pass_message(result.passed_player)
    return turn_message(result.next_player)


def history_lines(history: Iterable[MoveRecord], limit: int = HISTORY_LENGTH) -> List[str]:
    """Most recent moves first, with 1-based row and column numbers."""
    lines = []
    for i, record in enumerate(history):
        if i >= limit:
            break
        row, col = record.position
        lines.append(f"{player_name(record.player)}  Row {row + 1}, Col {col + 1}"
                     f" - flipped {record.flipped}")
    return lines


def cell_at(x: int, y: int, square_size: int) -> Optional[Position]:
    """Board cell under pixel (x, y), or None outside the board."""
    if x < 0 or y < 0:
        return None
    row, col = y // square_size, x // square_size
    if row >= BOARD_SIZE or col >= BOARD_SIZE:
        return None
    return Position(row, col)


def board_to_text(board: np.ndarray, legal_moves: FrozenSet[Position] = frozenset()) -> str:
    """
    Render a board as text: X for black, O for white, * for a legal move,
    . for an empty cell.
    """
    lines = ["  " + " ".join(str(c + 1) for c in range(BOARD_SIZE))]
    for row in range(BOARD_SIZE):
        cells = []
        for col in range(BOARD_SIZE):
            if board[row, col] == BLACK:
                cells.append("X")
            elif board[row, col] == WHITE:
                cells.append("O")
            elif (row, col) in legal_moves:
                cells.append("*")
            else:
                cells.append(".")
        lines.append(f"{row + 1} " + " ".join(cells))
    return "\n".join(lines)
