"""Board constants shared by the engine, the gymnasium env and the UI."""

from typing import Tuple

# Cell values
BLACK = 1
WHITE = -1
EMPTY = 0

BOARD_SIZE = 8
NUM_CELLS = BOARD_SIZE * BOARD_SIZE

# Horizontal, vertical and diagonal offsets, used by both legality and capture
DIRECTIONS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)

# Standard cross in the centre of the board
INITIAL_DISKS: Tuple[Tuple[int, int, int], ...] = (
    (3, 3, WHITE),
    (3, 4, BLACK),
    (4, 3, BLACK),
    (4, 4, WHITE),
)
