"""Game constants shared across modules.

This module contains side and outcome constants used by both the stateful
(MargoBoard, MargoGame) and stateless (stateless_logic) implementations.
"""

# Cell contents in the spatial state array
EMPTY = 0
PLAYER_1 = 1
PLAYER_2 = 2
SIDES = (PLAYER_1, PLAYER_2)

# Game outcome constants
PLAYER_1_WIN = 1
PLAYER_2_WIN = -1
TIE = 0

# Base side lengths offered as game variants
SUPPORTED_SIZES = (4, 6, 7, 9)
DEFAULT_SIZE = 7


def opponent(side: int) -> int:
    """Return the other side."""
    return PLAYER_2 if side == PLAYER_1 else PLAYER_1
