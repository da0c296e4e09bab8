"""
Move Analysis Script

Entry point for ranking the observer's options at the start of a Cambio game.

Usage:
    # Two players, observer first, holding two tens
    cambio-analyze --players 2 --bottom-left 10 --bottom-right 10

    # Use custom config
    cambio-analyze --config configs/my_config.json

    # Fast test run on four processes
    cambio-analyze --fast --workers 4 --seed 1

    # Evaluate the search against random opponents
    cambio-analyze --fast --evaluate
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
from rich.console import Console
from rich.table import Table

from cambio.config import SearchConfig, get_fast_config, get_default_config
from cambio.evaluation.arena import Arena
from cambio.game.actions import Action
from cambio.game.partial_info import PartialInfo, new_partial_info_game
from cambio.mcts.search import search


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Rank Cambio moves with determinized Monte Carlo Tree Search",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # Table
    parser.add_argument(
        '--players',
        type=int,
        default=None,
        help='Number of players (overrides config)',
    )
    parser.add_argument(
        '--first-player',
        type=int,
        default=None,
        help='Seat that takes the first turn; you are seat 0 (overrides config)',
    )
    parser.add_argument(
        '--no-jokers',
        action='store_true',
        help='Play without the two jokers',
    )
    parser.add_argument(
        '--bottom-left',
        type=str,
        default=None,
        help='Your bottom-left card, e.g. A, 7, 10, Q, BK, RK, 0 (overrides config)',
    )
    parser.add_argument(
        '--bottom-right',
        type=str,
        default=None,
        help='Your bottom-right card (overrides config)',
    )

    # Search
    parser.add_argument(
        '--playouts',
        type=int,
        default=None,
        help='Total MCTS playouts (overrides config)',
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=None,
        help='Number of search processes (overrides config)',
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible results',
    )
    parser.add_argument(
        '--time-limit',
        type=float,
        default=None,
        help='Stop searching after this many seconds',
    )
    parser.add_argument(
        '--top',
        type=int,
        default=None,
        help='Number of ranked actions to show (overrides config)',
    )
    parser.add_argument(
        '--evaluate',
        action='store_true',
        help='Play evaluation games against random opponents instead of analyzing',
    )

    # Configuration
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to JSON config file (overrides defaults)',
    )
    parser.add_argument(
        '--fast',
        action='store_true',
        help='Use fast config for testing/debugging',
    )

    # Logging
    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Logging level (overrides config)',
    )
    parser.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Directory for analysis.log (overrides config; default console only)',
    )

    return parser.parse_args(argv)


def setup_logging(config: SearchConfig):
    """
    Setup logging (console, plus a log file when log_dir is set).

    Args:
        config: Search configuration
    """
    # Setup logging format
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    date_format = '%Y-%m-%d %H:%M:%S'

    handlers = [logging.StreamHandler(sys.stdout)]
    log_file = None
    if config.log_dir:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / 'analysis.log'
        handlers.insert(0, logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper()),
        format=log_format,
        datefmt=date_format,
        handlers=handlers,
    )

    logger = logging.getLogger(__name__)
    if log_file is not None:
        logger.info(f"Logging initialized. Log file: {log_file}")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"NumPy version: {np.__version__}")


def load_config(args: argparse.Namespace) -> SearchConfig:
    """
    Build the config from a file or a preset, then apply command line overrides.

    Args:
        args: Parsed arguments

    Returns:
        SearchConfig (not yet validated)
    """
    if args.config:
        config = SearchConfig.from_file(args.config)
    elif args.fast:
        config = get_fast_config()
    else:
        config = get_default_config()

    # Override config with command line args
    if args.players is not None:
        config.num_players = args.players
    if args.first_player is not None:
        config.first_player = args.first_player
    if args.no_jokers:
        config.jokers = False
    if args.bottom_left is not None:
        config.bottom_left = args.bottom_left
    if args.bottom_right is not None:
        config.bottom_right = args.bottom_right
    if args.playouts is not None:
        config.num_playouts = args.playouts
    if args.workers is not None:
        config.num_workers = args.workers
    if args.seed is not None:
        config.seed = args.seed
    if args.time_limit is not None:
        config.time_limit = args.time_limit
    if args.top is not None:
        config.top_n = args.top
    if args.log_dir is not None:
        config.log_dir = args.log_dir
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def build_game(config: SearchConfig) -> PartialInfo:
    """Create the observer's view of a freshly dealt game."""
    bottom_left, bottom_right = config.starting_cards()
    return new_partial_info_game(
        config.num_players,
        config.first_player,
        config.jokers,
        bottom_left,
        bottom_right,
    )


def render_ranking(
    ranked: List[Tuple[Action, float]],
    config: SearchConfig,
    console: Optional[Console] = None,
) -> Table:
    """
    Print the best actions as a table.

    Args:
        ranked: (action, win_rate) pairs, best first
        config: Search configuration (for top_n and the caption)
        console: Console to print to (defaults to stdout)

    Returns:
        The rendered table
    """
    console = console or Console()

    table = Table(title=f"Top {min(config.top_n, len(ranked))} of {len(ranked)} actions")
    table.add_column("Rank", justify="right", style="cyan", no_wrap=True)
    table.add_column("Action", style="white")
    table.add_column("Win rate", justify="right", style="green")

    for rank, (action, win_rate) in enumerate(ranked[:config.top_n], start=1):
        table.add_row(str(rank), str(action), f"{win_rate:.4f}")

    table.caption = (
        f"{config.num_playouts:,} playouts on {config.num_workers} worker(s), "
        f"{config.num_players} players"
    )
    console.print(table)
    return table


def run_analysis(config: SearchConfig, console: Optional[Console] = None) -> List[Tuple[Action, float]]:
    """
    Run the search for the configured position and print the ranking.

    Args:
        config: Validated search configuration
        console: Console to print to (defaults to stdout)

    Returns:
        Full ranking of root actions
    """
    logger = logging.getLogger(__name__)

    game = build_game(config)
    logger.info(f"Position:\n{game.summary()}")

    ranked = search(
        game,
        config.num_playouts,
        seed=config.seed,
        exploration=config.exploration,
        time_limit=config.time_limit,
        num_workers=config.num_workers,
    )
    render_ranking(ranked, config, console)
    return ranked


def run_evaluation(config: SearchConfig, console: Optional[Console] = None) -> dict:
    """
    Play evaluation games against random opponents and print a summary.

    Args:
        config: Validated search configuration
        console: Console to print to (defaults to stdout)

    Returns:
        Match results from Arena.play_match
    """
    console = console or Console()
    arena = Arena(
        num_players=config.num_players,
        num_playouts=config.eval_playouts,
        include_jokers=config.jokers,
        exploration=config.exploration,
    )
    results = arena.play_match(config.eval_games, seed=config.seed)

    table = Table(title="Evaluation vs random opponents", show_header=False)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Games", str(results['games_played']))
    table.add_row("Wins", str(results['observer_wins']))
    table.add_row("Win rate", f"{results['win_rate']:.1%} (random: {results['baseline_win_rate']:.1%})")
    table.add_row("Avg score", f"{results['observer_avg_score']:.2f}")
    table.add_row("Opponent avg score", f"{results['opponent_avg_score']:.2f}")
    console.print(table)
    return results


def main(argv: Optional[List[str]] = None):
    """Main analysis entry point."""
    # Parse arguments
    args = parse_args(argv)

    # Load config
    config = load_config(args)

    # Setup logging
    setup_logging(config)
    logger = logging.getLogger(__name__)

    # Validate config
    config.validate()
    logger.info("Configuration validated successfully")
    logger.info(f"\n{config}")

    try:
        if args.evaluate:
            run_evaluation(config)
        else:
            run_analysis(config)
    except KeyboardInterrupt:
        logger.info("\nAnalysis interrupted by user")


if __name__ == '__main__':
    main()
