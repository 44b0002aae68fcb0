"""Capture report value object for placements.

This class encapsulates the complete result of resolving one placement,
including every capture batch in removal order. It spares the game loop
from reaching into board internals.
"""

from margo.margo_position import cell_to_label


class CaptureReport:
    """Encapsulates the result of a placement.

    Attributes:
        placement: The Cell that was (or would have been) played
        side: The side placing the ball
        removed_batches: List of frozensets of Cells, in removal order.
            The first entries are the direct captures of the placement,
            later entries come from cascading (revealed) captures.
        direct_batch_count: How many leading batches the placement captured directly
        self_capture_rejected: True if the placement was refused as suicide
        ko_rejected: True if the placement was refused as a ko recapture
        position_key: Bytes identifying the resulting position (None when rejected)
    """

    def __init__(
        self,
        placement=None,
        side=None,
        removed_batches=None,
        direct_batch_count=0,
        self_capture_rejected=False,
        ko_rejected=False,
        position_key=None,
    ):
        self.placement = placement
        self.side = side
        self.removed_batches = list(removed_batches or [])
        self.direct_batch_count = direct_batch_count
        self.self_capture_rejected = self_capture_rejected
        self.ko_rejected = ko_rejected
        self.position_key = position_key

    def __repr__(self):
        return (
            f"CaptureReport(placement={self.placement}, batches={self.removed_batches}, "
            f"self_capture_rejected={self.self_capture_rejected}, ko_rejected={self.ko_rejected})"
        )

    @property
    def is_legal(self):
        return not (self.self_capture_rejected or self.ko_rejected)

    @property
    def direct_captures(self):
        """Batches captured by the placement itself, before any cascade."""
        return self.removed_batches[: self.direct_batch_count]

    @property
    def cascade_captures(self):
        return self.removed_batches[self.direct_batch_count:]

    def has_captures(self):
        """Check if this placement removed any balls.

        Returns:
            bool: True if at least one ball was captured
        """
        return any(self.removed_batches)

    def captured_count(self):
        return sum(len(batch) for batch in self.removed_batches)

    def removed_cells(self):
        """All removed cells as one frozenset."""
        return frozenset().union(*self.removed_batches)

    def to_results(self, size):
        """Describe the placement as a list of result dicts.

        Args:
            size: Board size, used to label cells

        Returns:
            [{"type": "place", "where": label},
             {"type": "capture", "where": "l1,l2,...", "count": n}, ...]
        """
        results = []
        if self.placement is not None:
            results.append({"type": "place", "where": cell_to_label(self.placement, size)})
        for batch in self.removed_batches:
            labels = sorted(cell_to_label(cell, size) for cell in batch)
            results.append({"type": "capture", "where": ",".join(labels), "count": len(batch)})
        return results
