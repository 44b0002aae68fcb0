"""Game configuration system for Margo."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .constants import DEFAULT_SIZE, SUPPORTED_SIZES


@dataclass
class GameConfig:
    """Configuration for a single game.

    Attributes:
        size: Balls per side of the base layer (4, 6, 7 or 9)
        superko: Reject placements that recreate an earlier position
        max_moves: End and score the game after this many placements (None = no limit)
        seed: Random seed for self-play drivers (None = unseeded)
    """

    size: int = DEFAULT_SIZE
    superko: bool = True
    max_moves: int | None = None
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.size not in SUPPORTED_SIZES:
            raise ValueError(
                f"Unsupported board size: {self.size}. "
                f"Supported sizes are {', '.join(str(s) for s in SUPPORTED_SIZES)}."
            )
        if self.max_moves is not None and self.max_moves < 1:
            raise ValueError(f"max_moves must be positive, got {self.max_moves}")

    @classmethod
    def from_variants(cls, variants: list[str] | None = None, **kwargs) -> GameConfig:
        """Create a configuration from variant ids such as ``"size-9"``.

        Unknown variants raise ValueError; no size variant means the default board.
        """
        size = DEFAULT_SIZE
        for variant in variants or []:
            match = re.fullmatch(r"size-(\d+)", variant.strip())
            if match is None:
                raise ValueError(f"Unknown variant: {variant}")
            size = int(match.group(1))
        return cls(size=size, **kwargs)


def parse_game_spec(spec: str) -> GameConfig:
    """Parse a game specification string into a GameConfig.

    Format:
        PARAM=VALUE[,PARAM=VALUE,...]

    Examples:
        "" -> defaults (size 7, superko on)
        "size=9" -> 9-board
        "size=4,superko=0,seed=3,max_moves=200"

    Supported parameters:
        - size (int): Base side length
        - superko (bool): Positional superko (1/0/true/false)
        - max_moves (int): Placement limit
        - seed (int): Random seed
    """
    params = {}
    for param_pair in spec.split(","):
        param_pair = param_pair.strip()
        if not param_pair:
            continue
        if "=" not in param_pair:
            raise ValueError(f"Invalid parameter format: {param_pair}. Expected PARAM=VALUE")
        key, value = param_pair.split("=", 1)
        key = key.strip()
        value = value.strip()

        if key in ["size", "max_moves", "seed"]:
            params[key] = int(value)
        elif key == "superko":
            params[key] = value.lower() in ["1", "true", "yes", "on"]
        else:
            raise ValueError(f"Unknown parameter: {key}")

    return GameConfig(**params)
