import logging
from collections import Counter

import numpy as np

from .margo_board import MargoBoard
from .game_config import GameConfig
from .constants import (
    DEFAULT_SIZE,
    PLAYER_1,
    PLAYER_2,
    PLAYER_1_WIN,
    PLAYER_2_WIN,
    TIE,
    opponent,
)
from .errors import GameOver, IllegalMove, KoViolation, SuicideMove, SuperkoViolation

logger = logging.getLogger(__name__)


# For full rules: http://cambolbro.com/games/margo
# Class interface inspired by https://github.com/suragnair/alpha-zero-general


class MargoGame:
    def __init__(self, size=DEFAULT_SIZE, superko=True, max_moves=None, clone=None):
        if clone is not None:
            # Independent copy of clone, including its repetition history
            self.size = clone.size
            self.superko = clone.superko
            self.max_moves = clone.max_moves
            self.board = MargoBoard(clone=clone.board)
            self.cur_player = clone.cur_player
            self.move_history = list(clone.move_history)
            self.results = [list(r) for r in clone.results]
            self.position_counts = Counter(clone.position_counts)
            self.gameover = clone.gameover
            self.winner = list(clone.winner)
            self.end_reason = clone.end_reason
        else:
            self.size = size
            self.superko = superko
            # Optional cap on the number of placements before scoring
            self.max_moves = max_moves
            self.board = MargoBoard(size)
            self.cur_player = PLAYER_1

            # Labels of every placement, in order
            self.move_history = []
            # One list of result dicts per placement (see CaptureReport.to_results)
            self.results = []
            # Positions seen so far, keyed with the side to move (positional superko)
            self.position_counts = Counter([self.board.position_key(PLAYER_1)])
            self.gameover = False
            self.winner = []
            self.end_reason = None

    @classmethod
    def from_config(cls, config: GameConfig):
        return cls(size=config.size, superko=config.superko, max_moves=config.max_moves)

    def __deepcopy__(self, memo):
        return MargoGame(clone=self)

    def clone(self):
        return MargoGame(clone=self)

    def get_cur_player(self):
        return self.cur_player

    def get_cur_player_value(self):
        # Returns 1 if current player is player 1 and -1 if current player is player 2
        return 1 if self.cur_player == PLAYER_1 else -1

    def str_to_action(self, label):
        return self.board.cell(label)

    def action_to_str(self, cell):
        return self.board.label(cell)

    # =========================  LEGALITY  =========================

    def _repeats_position(self, report):
        return self.superko and self.position_counts[report.position_key] > 0

    def get_valid_actions(self, player=None):
        """Return the sorted list of cells ``player`` may place on.

        Self-capture and ko are resolved by the board; positional superko is
        checked here from each speculative report's position key.
        """
        if player is None:
            player = self.cur_player
        if self.gameover:
            return []
        reports = self.board.legal_reports(player)
        return sorted(cell for cell, report in reports.items() if not self._repeats_position(report))

    def _has_valid_moves(self, player):
        for cell in self.board.placeable_cells():
            report = self.board.try_placement(cell, player, commit=False)
            if report.is_legal and not self._repeats_position(report):
                return True
        return False

    def validate_action(self, action):
        """Check that the current player may play ``action`` (Cell, tuple or label).

        Raises:
            GameOver, CellOccupied, NoSupport, SuicideMove, KoViolation, SuperkoViolation

        Returns:
            The speculative CaptureReport for the placement
        """
        if self.gameover:
            raise GameOver("The game is over")
        cell = self.board.cell(action)
        report = self.board.try_placement(cell, self.cur_player, commit=False)
        label = self.board.label(cell)
        if report.self_capture_rejected:
            raise SuicideMove(f"Self-capture at {label}", context={"cell": label}, report=report)
        if report.ko_rejected:
            raise KoViolation(f"Ko: {label} recaptures immediately", context={"cell": label}, report=report)
        if self._repeats_position(report):
            raise SuperkoViolation(f"{label} repeats an earlier position", context={"cell": label}, report=report)
        return report

    # =========================  PLAY  =========================

    def take_action(self, action):
        """Play ``action`` for the current player and advance the turn.

        Returns:
            CaptureReport of the committed placement
        """
        self.validate_action(action)
        report = self.board.attempt_placement(action, self.cur_player)

        label = self.board.label(report.placement)
        self.move_history.append(label)
        self.results.append(report.to_results(self.size))

        self.cur_player = opponent(self.cur_player)
        self.position_counts[report.position_key] += 1

        self._check_game_over()
        return report

    def get_next_state(self, action, cur_state=None):
        """Apply ``action`` and return the resulting state dict.

        With ``cur_state`` the action is applied to a copy of this game whose
        board array is replaced by ``cur_state``; this game is not touched.
        """
        if cur_state is None:
            self.take_action(action)
            return self.get_current_state()
        temp_game = MargoGame(clone=self)
        temp_game.board.state = np.copy(cur_state)
        return temp_game.get_next_state(action)

    def _check_game_over(self):
        if self.max_moves is not None and len(self.move_history) >= self.max_moves:
            self._end_game("move_limit")
        elif not self._has_valid_moves(self.cur_player):
            self._end_game("no_moves")

    def _end_game(self, reason):
        self.gameover = True
        self.end_reason = reason
        p1_score, p2_score = self.board.piece_counts()
        if p1_score > p2_score:
            self.winner = [PLAYER_1]
        elif p2_score > p1_score:
            self.winner = [PLAYER_2]
        else:
            self.winner = [PLAYER_1, PLAYER_2]
        if self.results:
            self.results[-1].append({"type": "eog", "reason": reason})
            self.results[-1].append({"type": "winners", "players": list(self.winner)})
        logger.info(
            "Game over after %d moves (%s): %d-%d, winner %s",
            len(self.move_history),
            reason,
            p1_score,
            p2_score,
            self.winner,
        )

    # =========================  OUTCOME  =========================

    def get_player_score(self, player):
        return self.board.count(player)

    def get_scores(self):
        return self.board.piece_counts()

    def get_game_ended(self):
        """Returns outcome of the game.

        Returns:
            PLAYER_1_WIN (1): Player 1 has more balls on the board
            PLAYER_2_WIN (-1): Player 2 has more balls on the board
            TIE (0): Equal ball counts
            None: Game not over
        """
        if not self.gameover:
            return None
        if self.winner == [PLAYER_1]:
            return PLAYER_1_WIN
        if self.winner == [PLAYER_2]:
            return PLAYER_2_WIN
        return TIE

    def get_current_state(self):
        """Returns complete observable game state.

        Returns:
            dict: Complete state with keys:
                - 'spatial': (N, 2N-1, 2N-1) ndarray - side per cell, layer first
                - 'scores': (player 1 balls, player 2 balls)
                - 'player': int - 1 for Player 1, -1 for Player 2 (perspective value)
        """
        return {
            "spatial": np.copy(self.board.state),
            "scores": self.board.piece_counts(),
            "player": self.get_cur_player_value(),
        }

    def play_moves(self, labels):
        """Play a sequence of labels, stopping at the first illegal one.

        Raises:
            IllegalMove: with ``context['ply']`` set to the failing index
        """
        for ply, label in enumerate(labels):
            try:
                self.take_action(label)
            except IllegalMove as e:
                e.context["ply"] = ply
                raise
        return self
