"""Main entry point for Margo self-play."""

import argparse
import logging

from margo.constants import DEFAULT_SIZE, SUPPORTED_SIZES, PLAYER_1, PLAYER_2
from margo.game_config import GameConfig, parse_game_spec
from margo.margo_game import MargoGame
from margo.players import RandomMargoPlayer


def play_game(config: GameConfig, seed=None, print_moves=False):
    """Play one random self-play game and return the finished MargoGame."""
    game = MargoGame.from_config(config)
    players = {
        PLAYER_1: RandomMargoPlayer(game, 1, seed=seed),
        PLAYER_2: RandomMargoPlayer(game, 2, seed=None if seed is None else seed + 1),
    }
    while game.get_game_ended() is None:
        player = players[game.get_cur_player()]
        action = player.get_action()
        report = game.take_action(action)
        if print_moves:
            line = f"{player.name}: {game.action_to_str(report.placement)}"
            if report.has_captures():
                line += f" x{report.captured_count()}"
            print(line)
    return game


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Margo self-play",
        epilog="""
Game Configuration:
  Either use the individual flags or --game with the format:
    PARAM=VALUE[,PARAM=VALUE,...]

  Parameters:
    size=N          - Base side length (4, 6, 7 or 9)
    superko=0|1     - Positional superko (default: 1)
    max_moves=N     - Score the game after N placements
    seed=N          - Random seed for reproducibility

  Examples:
    --size 4 --games 10
    --game size=9,superko=0,seed=3
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--game",
        type=str,
        default=None,
        metavar="SPEC",
        help="Game configuration string (overrides the individual flags). See --help for format.",
    )
    parser.add_argument(
        "--size",
        type=int,
        choices=SUPPORTED_SIZES,
        default=DEFAULT_SIZE,
        help=f"Base side length (default: {DEFAULT_SIZE})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for reproducible games",
    )
    parser.add_argument(
        "--games", type=int, default=1, help="Number of games to play (default: 1)"
    )
    parser.add_argument(
        "--max-moves",
        type=int,
        default=None,
        help="Score the game after this many placements (default: no limit)",
    )
    parser.add_argument(
        "--no-superko",
        action="store_true",
        help="Disable the positional superko rule",
    )
    parser.add_argument(
        "--print-moves",
        action="store_true",
        help="Print every placement",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.game is not None:
            config = parse_game_spec(args.game)
        else:
            config = GameConfig(
                size=args.size,
                superko=not args.no_superko,
                max_moves=args.max_moves,
                seed=args.seed,
            )
    except ValueError as e:
        parser.error(f"Invalid game configuration: {e}")
        return

    for n in range(args.games):
        seed = None if config.seed is None else config.seed + 2 * n
        game = play_game(config, seed=seed, print_moves=args.print_moves)
        p1, p2 = game.get_scores()
        winners = " and ".join(f"Player {w}" for w in game.winner)
        print(
            f"Game {n + 1}: {len(game.move_history)} moves ({game.end_reason}), "
            f"score {p1}-{p2}, winner: {winners}"
        )


if __name__ == "__main__":
    main()
