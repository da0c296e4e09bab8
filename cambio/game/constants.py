"""
Game constants for Cambio.

This module defines the table-level constants used throughout the game:
seat conventions, hand layout, player limits and deck composition.
"""

from typing import Tuple

# Seat whose knowledge the partial-information view tracks
OBSERVER = 0

# Every player starts with four face-down cards laid out in a row
HAND_SIZE = 4

# Indices of the observer's bottom-left and bottom-right cards, which are
# revealed to them at the start of the game
KNOWN_START_INDICES: Tuple[int, int] = (2, 3)

# Game constraints
MIN_PLAYERS = 2
MAX_PLAYERS = 8

# Deck composition
COPIES_PER_RANK = 4
COPIES_PER_KING = 2  # Black kings and red kings
JOKER_COUNT = 2
STANDARD_DECK_SIZE = 52


def deck_size(jokers: bool) -> int:
    """
    Number of cards in the deck.

    Args:
        jokers: Whether the two jokers are shuffled in

    Returns:
        52 without jokers, 54 with them

    Examples:
        >>> deck_size(False)
        52
        >>> deck_size(True)
        54
    """
    return STANDARD_DECK_SIZE + (JOKER_COUNT if jokers else 0)
