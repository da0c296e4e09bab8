"""
The cards a player has in front of them.

In a physical game players lay out four cards in a 2x2 grid and look at the
bottom two. Here the grid is flattened into a row indexed 0 to 3 (top left,
top right, bottom left, bottom right), so the observer's known cards start at
indices 2 and 3.

As players shed cards by sticking, the remaining cards are re-indexed rather
than leaving a gap: if the card at index 1 is removed, the cards at indices 2
and 3 slide down to 1 and 2. Inserting a card shifts later cards up. Anyone
transferring moves between this representation and a real table has to track
which physical card sits at which index.
"""

from typing import Iterable, Iterator, List, Optional

from cambio.game.cards import UNKNOWN, MaybeKnown, is_known
from cambio.game.constants import HAND_SIZE


class Hand:
    """
    Ordered sequence of possibly-unknown card slots.

    Callers are responsible for keeping indices within ``len(hand)``; an
    out-of-range index raises IndexError.
    """

    __slots__ = ("_cards",)

    def __init__(self, cards: Optional[Iterable[MaybeKnown]] = None):
        """
        Args:
            cards: Initial slots. Defaults to HAND_SIZE unknown cards.
        """
        if cards is None:
            self._cards: List[MaybeKnown] = [UNKNOWN] * HAND_SIZE
        else:
            self._cards = list(cards)

    def get(self, index: int) -> MaybeKnown:
        """Card at ``index``."""
        self._check_index(index)
        return self._cards[index]

    def __getitem__(self, index: int) -> MaybeKnown:
        return self.get(index)

    def remove(self, index: int) -> None:
        """Remove the card at ``index``; later cards shift down by one."""
        self._check_index(index)
        del self._cards[index]

    def insert(self, index: int, card: MaybeKnown) -> None:
        """Insert ``card`` at ``index``; cards at and after it shift up by one."""
        if not 0 <= index <= len(self._cards):
            raise IndexError(
                f"Insert index {index} out of range for hand of {len(self._cards)}"
            )
        self._cards.insert(index, card)

    def append(self, card: MaybeKnown) -> None:
        """Add ``card`` after the last slot."""
        self._cards.append(card)

    def replace(self, index: int, card: MaybeKnown) -> None:
        """Overwrite the slot at ``index`` without shifting anything."""
        self._check_index(index)
        self._cards[index] = card

    def points(self) -> int:
        """
        Total points in this hand.

        Raises:
            ValueError: If any slot is still unknown
        """
        total = 0
        for card in self._cards:
            if not is_known(card):
                raise ValueError("Cannot score a hand with unknown cards")
            total += card.points
        return total

    def unknown_count(self) -> int:
        """Number of slots whose identity is unknown."""
        return sum(1 for card in self._cards if not is_known(card))

    def indices(self) -> range:
        return range(len(self._cards))

    def copy(self) -> "Hand":
        return Hand(self._cards)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._cards):
            raise IndexError(
                f"Card index {index} out of range for hand of {len(self._cards)}"
            )

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[MaybeKnown]:
        return iter(self._cards)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Hand):
            return NotImplemented
        return self._cards == other._cards

    def __str__(self) -> str:
        return "[" + " ".join(str(card) for card in self._cards) + "]"

    def __repr__(self) -> str:
        return f"Hand({self._cards!r})"
