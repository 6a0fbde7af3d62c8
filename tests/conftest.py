import numpy as np
import pytest

from reversi.Engine.constants import BLACK, EMPTY, WHITE

_CELLS = {".": EMPTY, "X": BLACK, "O": WHITE}


def parse_board(rows):
    """Build a board from 8 strings of '.', 'X' (black) and 'O' (white)."""
    return np.array([[_CELLS[ch] for ch in row] for row in rows], dtype=np.int8)


@pytest.fixture
def board_from():
    return parse_board
