"""Pyramid addressing for Margo boards.

A board of base side N is addressed on a physical (2N - 1) x (2N - 1) grid.
Layer L holds an (N - L) x (N - L) square of balls whose physical
coordinates are x = 2 * col + L, y = 2 * row + L, so a ball on layer L + 1
sits on the four layer-L balls at (x +/- 1, y +/- 1).

    N = 3, physical grid 5 x 5 (layer index shown where a cell exists)

        x: 0  1  2  3  4
    y 0    0     0     0
      1       1     1
      2    0     0,2   0
      3       1     1
      4    0     0     0

Labels are "<layer + 1><column letter><rank>", with the column letter
counting from 'a' at x = 0 and the rank counting down from the top row,
e.g. on a 7-board the base corner (0, 0, 0) is "1a13".
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Dict, List, NamedTuple, Tuple

from margo.errors import InvalidCoordinate

# (dx, dy) offsets to the four diagonal cells one layer up or down
DIAGONALS: Tuple[Tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
# (dx, dy) offsets to same-layer orthogonal cells
ORTHOGONALS: Tuple[Tuple[int, int], ...] = ((-2, 0), (2, 0), (0, -2), (0, 2))

_LABEL_RE = re.compile(r"^([1-9])([a-z])(\d+)$")


class Cell(NamedTuple):
    """A physical pyramid coordinate (column, row, layer)."""

    x: int
    y: int
    layer: int

    @property
    def index(self) -> Tuple[int, int, int]:
        """Index into a spatial state array laid out as [layer, y, x]."""
        return self.layer, self.y, self.x

    @classmethod
    def from_layer_coords(cls, col: int, row: int, layer: int) -> "Cell":
        return cls(2 * col + layer, 2 * row + layer, layer)


def grid_width(size: int) -> int:
    """Physical width of the base layer."""
    return 2 * size - 1


def layer_width(size: int, layer: int) -> int:
    """Number of balls along one side of ``layer``."""
    return size - layer


def in_bounds(x: int, y: int, layer: int, size: int) -> bool:
    """Check that (x, y, layer) is an existing pyramid cell."""
    if layer < 0 or layer >= size:
        return False
    hi = grid_width(size) - 1 - layer
    if x < layer or y < layer or x > hi or y > hi:
        return False
    return (x - layer) % 2 == 0 and (y - layer) % 2 == 0


def validate_cell(cell: Tuple[int, int, int], size: int) -> Cell:
    """Return ``cell`` as a Cell or raise InvalidCoordinate."""
    x, y, layer = cell
    if layer < 0 or layer >= size:
        raise InvalidCoordinate(
            f"Layer index {layer} is out of bounds for board size {size}",
            context={"cell": tuple(cell)},
        )
    if not in_bounds(x, y, layer, size):
        raise InvalidCoordinate(
            f"Coordinates ({x},{y}) are not a cell of layer {layer}",
            context={"cell": tuple(cell), "size": size},
        )
    return Cell(x, y, layer)


def cell_to_label(cell: Tuple[int, int, int], size: int) -> str:
    x, y, layer = validate_cell(cell, size)
    return f"{layer + 1}{chr(ord('a') + x)}{grid_width(size) - y}"


def label_to_cell(label: str, size: int) -> Cell:
    match = _LABEL_RE.match(label.strip().lower())
    if match is None:
        raise InvalidCoordinate(f"Cannot parse cell label '{label}'")
    layer = int(match.group(1)) - 1
    x = ord(match.group(2)) - ord("a")
    y = grid_width(size) - int(match.group(3))
    return validate_cell((x, y, layer), size)


def support_cells(cell: Cell) -> List[Cell]:
    """The four cells one layer below ``cell`` that it rests on."""
    x, y, layer = cell
    if layer == 0:
        return []
    return [Cell(x + dx, y + dy, layer - 1) for dx, dy in DIAGONALS]


class PositionCollection:
    """Lazy-built caches of every cell and label for one board size."""

    def __init__(self, size: int) -> None:
        self.size = size
        self._built = False
        self._by_label: Dict[str, Cell] = {}
        self._by_cell: Dict[Cell, str] = {}

    def ensure(self) -> None:
        if self._built:
            return
        self._build()

    def _build(self) -> None:
        for layer in range(self.size):
            width = layer_width(self.size, layer)
            for row in range(width):
                for col in range(width):
                    cell = Cell.from_layer_coords(col, row, layer)
                    label = cell_to_label(cell, self.size)
                    self._by_label[label] = cell
                    self._by_cell[cell] = label
        self._built = True

    def get_by_label(self, label: str) -> Cell | None:
        self.ensure()
        return self._by_label.get(label.strip().lower())

    def label_for(self, cell: Tuple[int, int, int]) -> str:
        self.ensure()
        return self._by_cell.get(Cell(*cell), "")


@lru_cache(maxsize=None)
def positions_for(size: int) -> PositionCollection:
    """Shared PositionCollection per board size (the geometry never changes)."""
    return PositionCollection(size)
