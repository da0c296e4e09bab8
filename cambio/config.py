"""
Search Configuration System

Centralized configuration for move analysis and evaluation matches.
"""

import json
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

from cambio.game.cards import Card, parse_card
from cambio.game.constants import MIN_PLAYERS, MAX_PLAYERS


@dataclass
class SearchConfig:
    """Configuration for a search run."""

    # Table settings
    num_players: int = 2
    first_player: int = 0
    jokers: bool = True
    bottom_left: str = "10"  # Card abbreviation, see cambio.game.cards
    bottom_right: str = "10"

    # MCTS settings
    num_playouts: int = 1_000_000
    exploration: float = 1.414
    seed: Optional[int] = None
    num_workers: int = 1
    time_limit: Optional[float] = None  # Seconds; None = playout budget only

    # Output
    top_n: int = 5

    # Evaluation settings
    eval_games: int = 20
    eval_playouts: int = 500

    # Logging
    log_dir: Optional[str] = None  # None = console only
    log_level: str = 'INFO'

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert config to dictionary.

        Returns:
            Dictionary representation of config
        """
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'SearchConfig':
        """
        Create config from dictionary.

        Args:
            config_dict: Dictionary of configuration values

        Returns:
            SearchConfig instance
        """
        # Filter out keys that aren't valid config fields
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_dict = {k: v for k, v in config_dict.items() if k in valid_keys}
        return cls(**filtered_dict)

    @classmethod
    def from_file(cls, filepath: str) -> 'SearchConfig':
        """
        Load config from JSON file.

        Args:
            filepath: Path to JSON config file

        Returns:
            SearchConfig instance
        """
        with open(filepath, 'r') as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    def save(self, filepath: str):
        """
        Save config to JSON file.

        Args:
            filepath: Path to save config to
        """
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def starting_cards(self) -> tuple:
        """Parsed (bottom_left, bottom_right) cards."""
        return parse_card(self.bottom_left), parse_card(self.bottom_right)

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if config is valid

        Raises:
            ValueError: If config values are invalid
        """
        if self.num_players < MIN_PLAYERS or self.num_players > MAX_PLAYERS:
            raise ValueError(
                f"num_players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, "
                f"got {self.num_players}"
            )

        if not 0 <= self.first_player < self.num_players:
            raise ValueError(
                f"first_player must be in [0, {self.num_players}), got {self.first_player}"
            )

        bottom_left, bottom_right = self.starting_cards()
        if not self.jokers and Card.JOKER in (bottom_left, bottom_right):
            raise ValueError("Starting cards include a joker but jokers are disabled")

        if self.num_playouts <= 0:
            raise ValueError(f"num_playouts must be positive, got {self.num_playouts}")

        if self.exploration < 0:
            raise ValueError(f"exploration must be non-negative, got {self.exploration}")

        if self.num_workers <= 0:
            raise ValueError(f"num_workers must be positive, got {self.num_workers}")

        if self.num_workers > self.num_playouts:
            raise ValueError(
                f"num_workers ({self.num_workers}) cannot exceed num_playouts "
                f"({self.num_playouts})"
            )

        if self.time_limit is not None and self.time_limit <= 0:
            raise ValueError(f"time_limit must be positive, got {self.time_limit}")

        if self.top_n <= 0:
            raise ValueError(f"top_n must be positive, got {self.top_n}")

        if self.eval_games <= 0 or self.eval_playouts <= 0:
            raise ValueError(
                f"eval_games and eval_playouts must be positive, got "
                f"{self.eval_games} and {self.eval_playouts}"
            )

        if self.log_level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR'):
            raise ValueError(f"log_level must be a logging level name, got {self.log_level}")

        return True

    def __str__(self) -> str:
        """String representation of config."""
        lines = ["Search Configuration:"]
        lines.append(
            f"  Table: {self.num_players} players, P{self.first_player} first, "
            f"jokers={'on' if self.jokers else 'off'}"
        )
        lines.append(f"  Known cards: {self.bottom_left} {self.bottom_right}")
        lines.append(
            f"  MCTS: {self.num_playouts} playouts, C={self.exploration}, "
            f"{self.num_workers} workers, seed={self.seed}"
        )
        if self.time_limit is not None:
            lines.append(f"  Time limit: {self.time_limit}s")
        lines.append(f"  Evaluation: {self.eval_games} games, {self.eval_playouts} playouts/move")
        return "\n".join(lines)


def get_fast_config() -> SearchConfig:
    """
    Get a fast config for testing/debugging.

    Returns:
        SearchConfig with a small playout budget
    """
    return SearchConfig(
        num_playouts=2_000,
        seed=0,
        eval_games=4,
        eval_playouts=100,
    )


def get_default_config() -> SearchConfig:
    """
    Get the full analysis config.

    Returns:
        SearchConfig with the default one-million-playout budget
    """
    return SearchConfig()  # Uses defaults
