"""
Margo Error Hierarchy

All custom exceptions inherit from MargoError so callers can catch the whole
family. Legality failures derive from IllegalMove and carry a ``reason`` tag;
they are expected during play and always leave the board unchanged.
Malformed coordinates and corrupted board states are programmer errors.

Usage:
    from margo.errors import IllegalMove

    try:
        board.attempt_placement(cell, side)
    except IllegalMove as e:
        logger.warning(f"Rejected {cell}: {e.reason}")
"""

from typing import Any

__all__ = [
    "CellOccupied",
    "GameOver",
    "IllegalMove",
    "InvalidCoordinate",
    "InvariantViolation",
    "KoViolation",
    "MargoError",
    "NoSupport",
    "SuicideMove",
    "SuperkoViolation",
]


class MargoError(Exception):
    """Base exception for all Margo errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "MARGO_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Programmer errors
# =============================================================================


class InvalidCoordinate(MargoError, ValueError):
    """Coordinate outside the pyramid, on the wrong parity, or unparsable."""
    code: str = "INVALID_COORDINATE"


class InvariantViolation(MargoError, AssertionError):
    """The board reached a state the engine must never produce."""
    code: str = "INVARIANT_VIOLATION"


# =============================================================================
# Placement legality
# =============================================================================


class IllegalMove(MargoError):
    """A placement rejected by the rules.

    Attributes:
        reason: Short tag naming the rule that rejected the placement
        report: The CaptureReport computed before rejection, when available
    """
    code: str = "ILLEGAL_MOVE"
    reason: str = "illegal"

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        report=None,
    ):
        super().__init__(message, context=context)
        self.report = report

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["reason"] = self.reason
        return result


class CellOccupied(IllegalMove):
    code: str = "CELL_OCCUPIED"
    reason: str = "occupied"


class NoSupport(IllegalMove):
    """The cell is not the highest placeable cell of its column."""
    code: str = "NO_SUPPORT"
    reason: str = "no_support"


class SuicideMove(IllegalMove):
    code: str = "SUICIDE_MOVE"
    reason: str = "self_capture"


class KoViolation(IllegalMove):
    code: str = "KO_VIOLATION"
    reason: str = "ko"


class SuperkoViolation(IllegalMove):
    """The resulting position, with the same player to move, occurred before."""
    code: str = "SUPERKO_VIOLATION"
    reason: str = "superko"


class GameOver(IllegalMove):
    code: str = "GAME_OVER"
    reason: str = "game_over"
