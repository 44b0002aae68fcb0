"""
Seeded random self-play: board invariants hold after every placement and
games are reproducible.
"""

import pytest
import sys
from pathlib import Path

import numpy as np

# Add parent directory to path to import game modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from main import play_game
from margo.constants import EMPTY, PLAYER_1, PLAYER_2
from margo.game_config import GameConfig
from margo.margo_game import MargoGame
from margo.players import MargoPlayer, RandomMargoPlayer


def run_checked_game(size, seed, max_moves):
    game = MargoGame(size=size, max_moves=max_moves)
    players = {
        PLAYER_1: RandomMargoPlayer(game, PLAYER_1, seed=seed),
        PLAYER_2: RandomMargoPlayer(game, PLAYER_2, seed=seed + 1),
    }
    # Cells of groups a capturing placement left without liberties
    allowed = set()
    while game.get_game_ended() is None:
        action = players[game.get_cur_player()].get_action()
        assert action is not None

        before = game.board.state.copy()
        record = game.board.ko_record
        game.board.legal_placements(PLAYER_1)
        game.board.legal_placements(PLAYER_2)
        assert np.array_equal(game.board.state, before)
        assert game.board.ko_record == record

        report = game.take_action(action)
        game.board.check_invariants()
        assert game.board.get(report.placement) == report.side or report.placement in report.removed_cells()
        for cell in report.removed_cells():
            if cell != report.placement:
                assert game.board.get(cell) == EMPTY
        batches = report.removed_batches
        assert sum(len(b) for b in batches) == len(report.removed_cells())

        if report.has_captures() and game.board.get(report.placement) == report.side:
            group, liberties = game.board.group_and_liberties(report.placement, report.side)
            if liberties == 0:
                allowed |= group
        for group in game.board.unresolved_groups():
            assert group & allowed, f"unresolved group {sorted(group)} after {game.move_history[-1]}"
    return game


class TestRandomPlayouts:

    @pytest.mark.parametrize("seed", range(5))
    def test_invariants_hold_on_small_board(self, seed):
        game = run_checked_game(size=4, seed=seed, max_moves=60)
        assert game.gameover
        assert game.end_reason in ("move_limit", "no_moves")
        assert len(game.move_history) <= 60

    def test_medium_board(self):
        game = run_checked_game(size=6, seed=11, max_moves=40)
        assert game.gameover

    def test_same_seed_same_game(self):
        config = GameConfig(size=4, max_moves=40)
        first = play_game(config, seed=7)
        second = play_game(config, seed=7)
        assert first.move_history == second.move_history
        assert first.get_scores() == second.get_scores()

    def test_play_game_prints_moves(self, capsys):
        play_game(GameConfig(size=4, max_moves=3), seed=1, print_moves=True)
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("Random 1: ")


class TestPlayers:

    def test_random_player_picks_legal_cells(self):
        game = MargoGame(size=4)
        player = RandomMargoPlayer(game, PLAYER_1, seed=0)
        assert player.get_action() in game.get_valid_actions()

    def test_random_player_scores_are_uniform(self):
        game = MargoGame(size=4)
        scores = RandomMargoPlayer(game, PLAYER_1).get_last_action_scores()
        assert len(scores) == 16
        assert set(scores.values()) == {1.0}

    def test_random_player_without_moves(self):
        game = MargoGame(size=4, max_moves=1)
        game.take_action((0, 0, 0))
        assert RandomMargoPlayer(game, PLAYER_2).get_action() is None

    def test_base_player_is_abstract(self):
        player = MargoPlayer(MargoGame(size=4), PLAYER_1)
        assert player.name == "Player 1"
        with pytest.raises(NotImplementedError):
            player.get_action()
