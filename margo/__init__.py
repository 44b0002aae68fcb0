"""Margo: Go-like capture on a square pyramid of balls."""

from .capture_report import CaptureReport  # noqa: F401
from .errors import (  # noqa: F401
    CellOccupied,
    IllegalMove,
    InvalidCoordinate,
    KoViolation,
    NoSupport,
    SuicideMove,
    SuperkoViolation,
)
from .margo_board import MargoBoard  # noqa: F401
from .margo_game import MargoGame  # noqa: F401
from .margo_position import Cell  # noqa: F401
