from __future__ import annotations

import numpy as np

from margo.margo_game import MargoGame
from margo.players.margo_player import MargoPlayer


class RandomMargoPlayer(MargoPlayer):

    def __init__(self, game: MargoGame, n, seed=None):
        super().__init__(game, n)
        self.name = f"Random {n}"
        self.rng = np.random.default_rng(seed)

    def get_action(self):
        """Select a uniformly random legal placement.

        Returns None when the player has no legal placement (the game is over).
        """
        actions = self.game.get_valid_actions()
        if not actions:
            return None
        return actions[int(self.rng.integers(len(actions)))]

    def get_last_action_scores(self):
        """Random player treats all moves equally (uniform scores)."""
        return {cell: 1.0 for cell in self.game.get_valid_actions()}
