from __future__ import annotations

from margo.margo_game import MargoGame


class MargoPlayer:
    """Base player with shared state."""

    def __init__(self, game: MargoGame, n):
        self.game = game
        self.n = n
        self.name = f"Player {n}"

    def get_action(self):
        raise NotImplementedError

    def get_last_action_scores(self):
        """Get normalized scores for all legal actions from the last decision.

        Returns:
            Dict mapping cells to scores [0.0, 1.0]
        """
        raise NotImplementedError
