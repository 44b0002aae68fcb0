"""Stateless rules logic for Margo.

All functions are pure: same inputs -> same outputs.
No side effects, no mutations, no hidden state.

Every function reads a spatial state array laid out as [layer, y, x]
(see margo_position for the addressing scheme) holding EMPTY, PLAYER_1 or
PLAYER_2. Cells that do not exist on the pyramid are always EMPTY, so a
lookup only needs to guard the array bounds.

Architecture:
    BoardConfig: Immutable configuration (size, dimensions, side values)
    Pure functions: Take (state, ..., config) -> return cells, groups or batches

Usage:
    config = BoardConfig.standard(size=7)
    target = highest_placeable(state, x, y, config)
    batches = find_captures(state, target, side, config)
"""

from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from margo.constants import DEFAULT_SIZE, EMPTY, PLAYER_1, PLAYER_2, opponent
from margo.margo_position import (
    DIAGONALS,
    ORTHOGONALS,
    Cell,
    grid_width,
    in_bounds,
    support_cells,
)

CaptureBatch = frozenset


class BoardConfig(NamedTuple):
    """Immutable board configuration.

    Shared by every board cloned from the same game - only created once.
    """
    # Base side length (balls per side on layer 0) and number of layers
    size: int
    # Physical grid width (2 * size - 1)
    width: int

    # Side values stored in the state array
    empty: int  # 0
    player_1: int  # 1
    player_2: int  # 2

    @classmethod
    def standard(cls, size=DEFAULT_SIZE):
        """Create a BoardConfig for a pyramid with ``size`` balls per base side.

        Args:
            size: 2 through 9 (labels use a single digit for the layer)

        Returns:
            BoardConfig instance
        """
        if size < 2 or size > 9:
            raise ValueError(f"Unsupported board size: {size}. Use 2 through 9.")
        return cls(
            size=size,
            width=grid_width(size),
            empty=EMPTY,
            player_1=PLAYER_1,
            player_2=PLAYER_2,
        )

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.size, self.width, self.width


class KoRecord(NamedTuple):
    """What the previous ply placed and captured.

    Overwritten on every committed placement; only the immediately preceding
    ply matters for ko.
    """
    placement: Optional[Cell]
    batches: Tuple[CaptureBatch, ...] = ()


# ============================================================================
# PURE HELPER FUNCTIONS
# ============================================================================

def occupant(state: np.ndarray, x: int, y: int, layer: int) -> int:
    """Return the side at (x, y, layer), or EMPTY when off the array."""
    size, height, width = state.shape
    if 0 <= layer < size and 0 <= y < height and 0 <= x < width:
        return int(state[layer, y, x])
    return EMPTY


def occupied_cells(state: np.ndarray, side: Optional[int] = None) -> List[Cell]:
    """All occupied cells (optionally only ``side``'s), bottom layer first."""
    mask = state != EMPTY if side is None else state == side
    return [Cell(int(x), int(y), int(layer)) for layer, y, x in np.argwhere(mask)]


def is_covered(state: np.ndarray, cell: Cell) -> bool:
    """A ball with another ball directly above it (two layers up) is hidden."""
    x, y, layer = cell
    return occupant(state, x, y, layer + 2) != EMPTY


# ============================================================================
# SUPPORT / PLACEMENT
# ============================================================================

def highest_placeable(state: np.ndarray, x: int, y: int, config: BoardConfig) -> Optional[Cell]:
    """Return the cell a ball dropped at physical (x, y) would occupy.

    Columns sharing (x, y) alternate layers two apart, so the walk starts on
    layer x % 2 and climbs past occupied cells. Returns None when the column
    is full, out of bounds, or starved of support below the first gap.
    """
    if not (0 <= x < config.width and 0 <= y < config.width):
        return None
    if x % 2 != y % 2:
        return None
    layer = x % 2
    while layer < config.size:
        if not in_bounds(x, y, layer, config.size):
            return None
        if state[layer, y, x] != EMPTY:
            layer += 2
            continue
        cell = Cell(x, y, layer)
        for support in support_cells(cell):
            if state[support.index] == EMPTY:
                return None
        return cell
    return None


def placeable_cells(state: np.ndarray, config: BoardConfig) -> List[Cell]:
    """Every cell currently reachable by highest_placeable, in row-major order."""
    cells = []
    for y in range(config.width):
        for x in range(config.width):
            cell = highest_placeable(state, x, y, config)
            if cell is not None:
                cells.append(cell)
    return cells


def support_violations(state: np.ndarray, config: BoardConfig) -> List[Cell]:
    """Occupied upper cells missing at least one of their four supports."""
    violations = []
    for cell in occupied_cells(state):
        if cell.layer == 0:
            continue
        if any(occupant(state, *s) == EMPTY for s in support_cells(cell)):
            violations.append(cell)
    return violations


# ============================================================================
# ADJACENCY
# ============================================================================

def orthogonal_neighbours(cell: Cell, config: BoardConfig) -> List[Cell]:
    """Same-layer orthogonal cells; only the base layer has liberties."""
    x, y, layer = cell
    if layer > 0:
        return []
    return [
        Cell(x + dx, y + dy, 0)
        for dx, dy in ORTHOGONALS
        if in_bounds(x + dx, y + dy, 0, config.size)
    ]


def _edge_bridged(state: np.ndarray, x: int, y: int, dx: int, dy: int, layer: int, other: int) -> bool:
    # The two cells one layer up that straddle the midpoint of the edge.
    mx, my = x + dx // 2, y + dy // 2
    if dx:
        first, second = (mx, my - 1), (mx, my + 1)
    else:
        first, second = (mx - 1, my), (mx + 1, my)
    return (
        occupant(state, first[0], first[1], layer + 1) == other
        and occupant(state, second[0], second[1], layer + 1) == other
    )


def present_neighbours(
    state: np.ndarray,
    cell: Cell,
    side: int,
    config: BoardConfig,
    top_only: bool = True,
) -> List[Cell]:
    """Return ``side``'s balls connected to ``cell``.

    Connections are:
        - rise: the four cells one layer up resting on ``cell``
        - drop: the four supports one layer down
        - same layer: the orthogonal cells two units away

    With ``top_only`` a ball covered from directly above (two layers up) is
    hidden from its own layer: it keeps its rise and drop links but has no
    same-layer links. A same-layer link is also severed when both cells
    bridging it one layer up belong to the opponent. ``cell`` itself does not
    need to be on the board.
    """
    x, y, layer = cell
    other = opponent(side)
    neighbours = []

    for dx, dy in DIAGONALS:
        if occupant(state, x + dx, y + dy, layer + 1) == side:
            neighbours.append(Cell(x + dx, y + dy, layer + 1))

    if layer > 0:
        for dx, dy in DIAGONALS:
            if occupant(state, x + dx, y + dy, layer - 1) == side:
                neighbours.append(Cell(x + dx, y + dy, layer - 1))

    # Covered balls keep their vertical links so a capture always takes the
    # balls resting on the captured ones.
    if top_only and is_covered(state, cell):
        return neighbours

    for dx, dy in ORTHOGONALS:
        if occupant(state, x + dx, y + dy, layer) != side:
            continue
        if top_only and _edge_bridged(state, x, y, dx, dy, layer, other):
            continue
        if top_only and is_covered(state, Cell(x + dx, y + dy, layer)):
            continue
        neighbours.append(Cell(x + dx, y + dy, layer))

    return neighbours


# ============================================================================
# GROUPS AND LIBERTIES
# ============================================================================

def group_and_liberties(
    state: np.ndarray,
    seed: Cell,
    excluded: Iterable[Cell],
    side: int,
    config: BoardConfig,
) -> Tuple[frozenset, int]:
    """Flood-fill ``side``'s group from ``seed`` and count its liberties.

    A liberty is an empty base cell orthogonally next to a base-layer member.
    ``seed`` and every cell in ``excluded`` never count as liberties, which
    lets callers look ahead at a ball that is about to be placed.

    Returns:
        (group cells, number of distinct liberties)
    """
    seed = Cell(*seed)
    excluded = set(excluded)
    seen = set()
    liberties = set()
    todo = [seed]
    while todo:
        cell = todo.pop()
        if cell in seen:
            continue
        seen.add(cell)
        for n in orthogonal_neighbours(cell, config):
            if n == seed or n in excluded or state[n.index] != EMPTY:
                continue
            liberties.add(n)
        todo.extend(present_neighbours(state, cell, side, config))
    return frozenset(seen), len(liberties)


def is_zombie(
    state: np.ndarray,
    cell: Cell,
    side: int,
    config: BoardConfig,
    cache: Optional[Dict[Tuple[Cell, int], bool]] = None,
) -> bool:
    """Check whether an opposing ball rests, directly or via a stack, on ``cell``.

    Walks upward through ``side``'s own balls; the first opposing ball found
    above makes ``cell`` immune to capture. ``cache`` is only valid until the
    state changes.
    """
    start = Cell(*cell)
    key = (start, side)
    if cache is not None and key in cache:
        return cache[key]

    result = False
    stack = [start]
    visited = {start}
    while stack and not result:
        x, y, layer = stack.pop()
        for dx, dy in DIAGONALS:
            above = Cell(x + dx, y + dy, layer + 1)
            owner = occupant(state, *above)
            if owner == EMPTY or above in visited:
                continue
            if owner != side:
                result = True
                break
            visited.add(above)
            stack.append(above)

    if cache is not None:
        cache[key] = result
    return result


def _drop_zombies(state, batches, side, config) -> List[CaptureBatch]:
    cache = {}
    survivors = []
    for batch in batches:
        kept = frozenset(c for c in batch if not is_zombie(state, c, side, config, cache))
        if kept:
            survivors.append(kept)
    return survivors


# ============================================================================
# CAPTURES
# ============================================================================

def find_captures(state: np.ndarray, placement: Cell, side: int, config: BoardConfig) -> List[CaptureBatch]:
    """Return the opponent batches captured by ``side`` placing ``placement``.

    On the base layer the candidates are the orthogonal neighbours; higher up
    they are the opposing supports the ball rests on. Groups left without
    liberties are captured except for their zombie members.
    """
    other = opponent(side)
    if placement.layer == 0:
        candidates = orthogonal_neighbours(placement, config)
    else:
        candidates = [c for c in support_cells(placement) if occupant(state, *c) == other]

    batches = []
    captured = set()
    for n in candidates:
        if n in captured or occupant(state, *n) != other:
            continue
        group, liberties = group_and_liberties(state, n, [placement], other, config)
        if liberties == 0:
            batches.append(group - captured)
            captured |= group
    return _drop_zombies(state, batches, other, config)


def cells_below(state: np.ndarray, batches: Iterable[CaptureBatch], side: int) -> List[Cell]:
    """``side``'s balls that supported any cell in ``batches``."""
    below = set()
    for batch in batches:
        for cell in batch:
            for support in support_cells(cell):
                if occupant(state, *support) == side:
                    below.add(support)
    return sorted(below)


def find_existing_captures(state: np.ndarray, cells: Sequence[Cell], side: int, config: BoardConfig) -> List[CaptureBatch]:
    """Capture ``side``'s groups through ``cells`` that have run out of liberties.

    Used after a removal, when balls that were zombies or were cut off may
    have lost their protection.
    """
    pending = list(cells)
    batches = []
    captured = set()
    while pending:
        cell = pending.pop()
        if cell in captured:
            continue
        group, liberties = group_and_liberties(state, cell, (), side, config)
        if liberties == 0:
            batches.append(group - captured)
            captured |= group
    return _drop_zombies(state, batches, side, config)


def is_ko(ko_record: Optional[KoRecord], placement: Cell, captures: Sequence[CaptureBatch]) -> bool:
    """Simple positional ko: an immediate single-ball recapture.

    The placement must capture exactly one ball, that ball must be the one the
    previous ply placed, and the previous ply must have captured exactly the
    single ball at ``placement``.
    """
    if ko_record is None or ko_record.placement is None:
        return False
    if len(captures) != 1 or len(captures[0]) != 1:
        return False
    if ko_record.placement not in captures[0]:
        return False
    return len(ko_record.batches) == 1 and ko_record.batches[0] == frozenset([placement])


def unresolved_groups(state: np.ndarray, config: BoardConfig) -> List[frozenset]:
    """Groups with no liberties that still contain a capturable (non-zombie) ball.

    Hidden balls are not used as seeds; they only join a group through a
    visible neighbour.
    """
    groups = []
    seen = set()
    cache = {}
    for cell in occupied_cells(state):
        if cell in seen or is_covered(state, cell):
            continue
        side = int(state[cell.index])
        group, liberties = group_and_liberties(state, cell, (), side, config)
        seen |= group
        if liberties == 0 and any(not is_zombie(state, c, side, config, cache) for c in group):
            groups.append(group)
    return groups
