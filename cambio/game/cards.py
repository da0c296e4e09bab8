"""
Card model for Cambio.

Cards are identified by rank only; suits never matter except for kings,
where black and red kings behave differently. Each identity carries its point
value (lower totals win) and the phase the game enters after it is discarded.

A face-down card that we may or may not know is a ``MaybeKnown``: either a
concrete ``Card`` or the ``UNKNOWN`` marker.
"""

from collections import Counter
from enum import Enum
from typing import Union

from cambio.game.constants import COPIES_PER_KING, COPIES_PER_RANK, JOKER_COUNT
from cambio.game.state import State


class Card(Enum):
    """
    A known card and its fixed properties.

    Attributes:
        abbreviation: Short label used for display and parsing
        points: Points the card is worth at scoring time
        discard_state: State the game enters after this card is discarded
    """

    ACE = ("A", 1, State.END_OF_TURN)
    TWO = ("2", 2, State.END_OF_TURN)
    THREE = ("3", 3, State.END_OF_TURN)
    FOUR = ("4", 4, State.END_OF_TURN)
    FIVE = ("5", 5, State.END_OF_TURN)
    SIX = ("6", 6, State.END_OF_TURN)
    SEVEN = ("7", 7, State.AFTER_DISCARD_LOW)
    EIGHT = ("8", 8, State.AFTER_DISCARD_LOW)
    NINE = ("9", 9, State.AFTER_DISCARD_MID)
    TEN = ("10", 10, State.AFTER_DISCARD_MID)
    JACK = ("J", 10, State.AFTER_DISCARD_FACE)
    QUEEN = ("Q", 10, State.AFTER_DISCARD_FACE)
    BLACK_KING = ("BK", 10, State.AFTER_DISCARD_BLACK_KING)
    RED_KING = ("RK", -1, State.AFTER_DISCARD_FACE)
    JOKER = ("0", 0, State.END_OF_TURN)

    def __init__(self, abbreviation: str, points: int, discard_state: State):
        self.abbreviation = abbreviation
        self.points = points
        self.discard_state = discard_state

    def __str__(self) -> str:
        return self.abbreviation

    def __repr__(self) -> str:
        return f"Card.{self.name}"


class Unknown:
    """A face-down card whose identity is not known. Use ``UNKNOWN``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __reduce__(self):
        # Keep the singleton across pickling (multiprocessing workers)
        return (Unknown, ())

    def __str__(self) -> str:
        return "?"

    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN = Unknown()

MaybeKnown = Union[Card, Unknown]


def is_known(card: MaybeKnown) -> bool:
    """True if ``card`` is a concrete identity rather than ``UNKNOWN``."""
    return isinstance(card, Card)


def build_deck(jokers: bool) -> Counter:
    """
    Build the multiset of cards in a full deck.

    Args:
        jokers: If True, the two jokers are included

    Returns:
        Counter mapping Card -> number of copies (52 or 54 cards total)
    """
    deck = Counter()
    for card in Card:
        if card in (Card.BLACK_KING, Card.RED_KING):
            deck[card] = COPIES_PER_KING
        elif card is Card.JOKER:
            if jokers:
                deck[card] = JOKER_COUNT
        else:
            deck[card] = COPIES_PER_RANK
    return deck


def parse_card(text: str) -> Card:
    """
    Parse a card from its abbreviation or enum name.

    Args:
        text: Abbreviation ("A", "10", "BK", "0") or name ("black_king")

    Returns:
        The matching Card

    Raises:
        ValueError: If the text does not name a card

    Examples:
        >>> parse_card("bk")
        Card.BLACK_KING
        >>> parse_card("ten")
        Card.TEN
    """
    cleaned = text.strip().upper()
    for card in Card:
        if cleaned == card.abbreviation or cleaned == card.name:
            return card
    raise ValueError(
        f"Invalid card: {text!r}. Must be one of "
        f"{[card.abbreviation for card in Card]}"
    )
