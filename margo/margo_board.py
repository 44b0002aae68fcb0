import logging

import numpy as np

from margo.capture_report import CaptureReport
from margo.constants import EMPTY, PLAYER_1, PLAYER_2, SIDES, DEFAULT_SIZE, opponent
from margo.errors import (
    CellOccupied,
    InvariantViolation,
    KoViolation,
    NoSupport,
    SuicideMove,
)
from margo.margo_position import (
    Cell,
    label_to_cell,
    positions_for,
    validate_cell,
)
from margo.stateless_logic import (
    BoardConfig,
    KoRecord,
    cells_below,
    find_captures,
    find_existing_captures,
    group_and_liberties,
    highest_placeable,
    is_ko,
    is_zombie,
    occupied_cells,
    placeable_cells,
    support_violations,
    unresolved_groups,
)

logger = logging.getLogger(__name__)


class MargoBoard:
    # The margo board is a square pyramid stored as a 3D array [layer, y, x]
    #   Layer 0 is the base; layer L holds (N - L) x (N - L) balls
    #   A ball at (x, y, L) rests on (x +/- 1, y +/- 1, L - 1)
    #
    # 4-board (physical grid 7 x 7), layer of each cell:
    #   0 . 0 . 0 . 0
    #   . 1 . 1 . 1 .
    #   0 . 0/2 . 0/2 . 0
    #   . 1 . 1/3 . 1 .
    #   0 . 0/2 . 0/2 . 0
    #   . 1 . 1 . 1 .
    #   0 . 0 . 0 . 0
    #
    # A placement is a single cell. Placing resolves in order:
    #   1. direct captures around the new ball (zombies survive)
    #   2. self-capture check (only when nothing was captured)
    #   3. ko check against the previous ply
    #   4. cascading captures revealed by the removals
    # A rejected placement leaves the array exactly as it was.

    # Board size constants
    SMALL_BOARD_4 = 4
    MEDIUM_BOARD_7 = 7
    LARGE_BOARD_9 = 9

    # Player constants
    PLAYER_1 = PLAYER_1
    PLAYER_2 = PLAYER_2
    NUM_PLAYERS = 2

    def __init__(self, size=DEFAULT_SIZE, clone=None):
        """Initialize a Margo board.

        Args:
            size: Balls per side of the base layer (2 through 9)
            clone: MargoBoard instance to clone from
        """
        if clone is not None:
            self.size = clone.size
            self.config = clone.config
            self.state = np.copy(clone.state)
            self.ko_record = clone.ko_record
        else:
            # Raises ValueError for unsupported sizes
            self.config = BoardConfig.standard(size)
            self.size = size
            self.state = np.zeros(self.config.shape, dtype=np.int8)
            self.ko_record = None

        self.positions = positions_for(self.size)

        # (index, previous value) for every mutation since the last commit
        self._undo_log = []

    def clone(self):
        return MargoBoard(clone=self)

    # =========================  ADDRESSING  =========================

    def cell(self, cell):
        """Accept a Cell, an (x, y, layer) tuple or a label and return a valid Cell."""
        if isinstance(cell, str):
            found = self.positions.get_by_label(cell)
            if found is not None:
                return found
            # Raises InvalidCoordinate unless the label only differs in format
            return label_to_cell(cell, self.size)
        return validate_cell(cell, self.size)

    def label(self, cell):
        return self.positions.label_for(validate_cell(cell, self.size))

    # =========================  QUERIES  =========================

    def get(self, cell):
        """Return the side at ``cell`` (EMPTY when vacant)."""
        return int(self.state[self.cell(cell).index])

    def is_occupied(self, cell):
        return self.get(cell) != EMPTY

    def occupied(self):
        """Iterate (cell, side) pairs, bottom layer first."""
        for cell in occupied_cells(self.state):
            yield cell, int(self.state[cell.index])

    def cells_of(self, side):
        return occupied_cells(self.state, side)

    def count(self, side):
        return int(np.count_nonzero(self.state == side))

    def piece_counts(self):
        return self.count(PLAYER_1), self.count(PLAYER_2)

    def position_key(self, to_move):
        """Bytes identifying the position and the side to move."""
        return self.state.tobytes() + bytes([to_move])

    def highest_placeable(self, x, y):
        return highest_placeable(self.state, x, y, self.config)

    def placeable_cells(self):
        return placeable_cells(self.state, self.config)

    def group_and_liberties(self, seed, side, excluded=()):
        return group_and_liberties(self.state, self.cell(seed), excluded, side, self.config)

    def is_zombie(self, cell, side):
        return is_zombie(self.state, self.cell(cell), side, self.config)

    def unresolved_groups(self):
        return unresolved_groups(self.state, self.config)

    def check_invariants(self):
        """Raise InvariantViolation if an upper ball lacks support."""
        violations = support_violations(self.state, self.config)
        if violations:
            labels = [self.label(c) for c in violations]
            raise InvariantViolation(
                "Balls present without all four supports",
                context={"cells": labels},
            )

    # =========================  MUTATION  =========================

    def _set(self, cell, value):
        index = cell.index
        self._undo_log.append((index, int(self.state[index])))
        self.state[index] = value

    def _remove(self, batches):
        for batch in batches:
            for cell in batch:
                self._set(cell, EMPTY)

    def _rollback(self, mark):
        while len(self._undo_log) > mark:
            index, previous = self._undo_log.pop()
            self.state[index] = previous

    def set_cell(self, cell, side):
        """Write ``side`` (or EMPTY) at ``cell`` without applying any rule.

        Intended for setting up positions; the caller is responsible for the
        support invariant (see check_invariants).
        """
        cell = self.cell(cell)
        if side != EMPTY and side not in SIDES:
            raise ValueError(f"Unknown side: {side}")
        self.state[cell.index] = side

    def _validate_placement(self, cell, side):
        if side not in SIDES:
            raise ValueError(f"Unknown side: {side}")
        cell = self.cell(cell)
        if self.state[cell.index] != EMPTY:
            raise CellOccupied(
                f"Invalid placement: {self.label(cell)} is occupied",
                context={"cell": self.label(cell)},
            )
        if highest_placeable(self.state, cell.x, cell.y, self.config) != cell:
            raise NoSupport(
                f"Invalid placement: {self.label(cell)} is not supported",
                context={"cell": self.label(cell)},
            )
        return cell

    def _cascade(self, first_batches, mover):
        """Remove captures revealed by earlier removals until a round finds none."""
        batches = []
        removed = first_batches
        check_side = mover
        while removed:
            below = cells_below(self.state, removed, check_side)
            if not below:
                break
            chain = find_existing_captures(self.state, below, check_side, self.config)
            if not chain:
                break
            self._remove(chain)
            logger.debug(
                "Revealed capture for player %d: %s",
                check_side,
                [sorted(self.label(c) for c in batch) for batch in chain],
            )
            batches.extend(chain)
            removed = chain
            check_side = opponent(check_side)
        return batches

    def try_placement(self, cell, side, commit=True):
        """Resolve a placement and report the outcome without raising for rule rejections.

        Occupied or unsupported cells still raise (CellOccupied / NoSupport).
        A placement refused for self-capture or ko comes back with the matching
        flag set and the board untouched. With ``commit=False`` a legal
        placement is fully resolved, reported and then rolled back.

        Args:
            cell: Cell, (x, y, layer) tuple or label
            side: PLAYER_1 or PLAYER_2

        Returns:
            CaptureReport
        """
        cell = self._validate_placement(cell, side)
        mark = len(self._undo_log)
        try:
            report = self._resolve(cell, side)
        except Exception:
            self._rollback(mark)
            raise

        if not report.is_legal:
            self._rollback(mark)
            logger.debug("Rejected %s for player %d: %r", self.label(cell), side, report)
            return report

        if commit:
            del self._undo_log[mark:]
            self.ko_record = KoRecord(cell, tuple(report.removed_batches))
            logger.debug(
                "Player %d placed %s, captured %d",
                side,
                self.label(cell),
                report.captured_count(),
            )
        else:
            self._rollback(mark)
        return report

    def _resolve(self, cell, side):
        # Mutates through the undo log; the caller commits or rolls back.
        self._set(cell, side)
        direct = find_captures(self.state, cell, side, self.config)
        self._remove(direct)
        report = CaptureReport(
            placement=cell,
            side=side,
            removed_batches=direct,
            direct_batch_count=len(direct),
        )

        if not direct:
            _, liberties = group_and_liberties(self.state, cell, (), side, self.config)
            report.self_capture_rejected = liberties == 0
        if report.is_legal and is_ko(self.ko_record, cell, direct):
            report.ko_rejected = True

        if report.is_legal:
            report.removed_batches.extend(self._cascade(direct, side))
            report.position_key = self.position_key(opponent(side))
        return report

    def attempt_placement(self, cell, side):
        """Place a ball for ``side`` and resolve all captures.

        This is the only mutating entry point used during play. Any rejected
        placement leaves the board exactly as it was.

        Raises:
            InvalidCoordinate: ``cell`` is not a pyramid cell
            CellOccupied, NoSupport: the cell cannot receive a ball
            SuicideMove: the ball's group would have no liberties and nothing was captured
            KoViolation: immediate single-ball recapture

        Returns:
            CaptureReport
        """
        report = self.try_placement(cell, side)
        if report.self_capture_rejected:
            raise SuicideMove(
                f"Self-capture at {self.label(report.placement)}",
                context={"cell": self.label(report.placement)},
                report=report,
            )
        if report.ko_rejected:
            raise KoViolation(
                f"Ko: {self.label(report.placement)} recaptures immediately",
                context={"cell": self.label(report.placement)},
                report=report,
            )
        return report

    # =========================  ENUMERATION  =========================

    def legal_placements(self, side):
        """Return every cell where ``side`` may legally place (ko included).

        Each candidate is resolved speculatively and rolled back, so the board
        is unchanged afterwards.
        """
        legal = set()
        for cell in self.placeable_cells():
            if self.try_placement(cell, side, commit=False).is_legal:
                legal.add(cell)
        return legal

    def has_any_legal_placement(self, side):
        for cell in self.placeable_cells():
            if self.try_placement(cell, side, commit=False).is_legal:
                return True
        return False

    def legal_reports(self, side):
        """Map each legal cell to its speculative CaptureReport."""
        reports = {}
        for cell in self.placeable_cells():
            report = self.try_placement(cell, side, commit=False)
            if report.is_legal:
                reports[cell] = report
        return reports

    def __repr__(self):
        p1, p2 = self.piece_counts()
        return f"MargoBoard(size={self.size}, p1={p1}, p2={p2})"
