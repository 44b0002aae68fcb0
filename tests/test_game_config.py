"""
Tests for GameConfig and the game specification parser.
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path to import game modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from margo.game_config import GameConfig, parse_game_spec


class TestGameConfig:

    def test_defaults(self):
        config = GameConfig()
        assert config.size == 7
        assert config.superko is True
        assert config.max_moves is None
        assert config.seed is None

    @pytest.mark.parametrize("size", [2, 5, 8, 10])
    def test_unsupported_size(self, size):
        with pytest.raises(ValueError, match="Unsupported board size"):
            GameConfig(size=size)

    def test_non_positive_move_limit(self):
        with pytest.raises(ValueError):
            GameConfig(max_moves=0)

    @pytest.mark.parametrize("variant, size", [("size-4", 4), ("size-6", 6), ("size-9", 9)])
    def test_from_variants(self, variant, size):
        assert GameConfig.from_variants([variant]).size == size

    def test_from_variants_defaults(self):
        assert GameConfig.from_variants().size == 7
        assert GameConfig.from_variants([], seed=5).seed == 5

    def test_unknown_variant(self):
        with pytest.raises(ValueError, match="Unknown variant"):
            GameConfig.from_variants(["hex"])

    def test_unsupported_variant_size(self):
        with pytest.raises(ValueError):
            GameConfig.from_variants(["size-5"])


class TestParseGameSpec:

    def test_empty_spec(self):
        assert parse_game_spec("") == GameConfig()

    def test_all_parameters(self):
        config = parse_game_spec("size=4, superko=0, seed=3, max_moves=200")
        assert config == GameConfig(size=4, superko=False, seed=3, max_moves=200)

    @pytest.mark.parametrize("value, expected", [("1", True), ("true", True), ("On", True), ("no", False)])
    def test_superko_values(self, value, expected):
        assert parse_game_spec(f"superko={value}").superko is expected

    def test_missing_equals(self):
        with pytest.raises(ValueError, match="Invalid parameter format"):
            parse_game_spec("size9")

    def test_unknown_parameter(self):
        with pytest.raises(ValueError, match="Unknown parameter"):
            parse_game_spec("colour=red")

    def test_non_integer_value(self):
        with pytest.raises(ValueError):
            parse_game_spec("size=big")
