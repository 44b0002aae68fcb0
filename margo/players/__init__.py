"""Players."""

from .margo_player import MargoPlayer
from .random_margo_player import RandomMargoPlayer

__all__ = ["MargoPlayer", "RandomMargoPlayer"]
