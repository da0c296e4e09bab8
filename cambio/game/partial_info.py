"""
The observer's partial-information view of a Cambio game.

This view is the canonical record of a real game from seat 0's point of
view. It knows every face-up card (the discard pile), the cards the observer
has seen, and the multiset of identities it has not seen yet. Hidden
identities are never guessed here; ``Determinized`` samples them.
"""

import logging
from collections import Counter
from typing import Dict, Optional, Tuple

from cambio.game.actions import execute as execute_action
from cambio.game.cards import UNKNOWN, Card, build_deck, is_known
from cambio.game.constants import (
    HAND_SIZE,
    KNOWN_START_INDICES,
    MAX_PLAYERS,
    MIN_PLAYERS,
    OBSERVER,
    deck_size,
)
from cambio.game.exceptions import InconsistentRevealException, InvariantViolationException
from cambio.game.game import Game
from cambio.game.hand import Hand
from cambio.game.state import State

logger = logging.getLogger(__name__)


class PartialInfo(Game):
    """
    Everything the observer knows about the game.

    Attributes:
        include_jokers: Whether the deck has the two jokers
        unseen_cards: Multiset of identities the observer has not located.
            Its total always equals the draw pile size plus the number of
            unknown hand slots plus one if an unseen card is being held.
        draw_pile_size: Cards left in the draw pile

    Example:
        >>> game = PartialInfo(2, 0, True, Card.TEN, Card.TEN)
        >>> game.draw_pile_size
        46
        >>> str(game.hands[0])
        '[? ? 10 10]'
    """

    partial_info = True

    def __init__(
        self,
        num_players: int,
        first_player: int,
        include_jokers: bool,
        own_bottom_left: Card,
        own_bottom_right: Card,
    ):
        """
        Deal a new game.

        Args:
            num_players: Number of players (2-8)
            first_player: Seat that takes the first turn
            include_jokers: Whether the two jokers are in the deck
            own_bottom_left: Observer's card at index 2
            own_bottom_right: Observer's card at index 3

        Raises:
            ValueError: If the table or the starting cards are invalid
        """
        if not MIN_PLAYERS <= num_players <= MAX_PLAYERS:
            raise ValueError(
                f"num_players must be {MIN_PLAYERS}-{MAX_PLAYERS}, got {num_players}"
            )
        if not 0 <= first_player < num_players:
            raise ValueError(
                f"first_player must be in [0, {num_players}), got {first_player}"
            )

        self.num_players = num_players
        self.include_jokers = include_jokers
        self.turn = first_player
        self.discard_pile = []
        self.drawn_card = None
        self.cambio_caller = None
        self.stuck = False
        self.state = State.BEGINNING_OF_TURN
        self.action_history = []
        self.pending_target = None

        self.unseen_cards = build_deck(include_jokers)
        self.draw_pile_size = deck_size(include_jokers) - HAND_SIZE * num_players

        own_hand = Hand()
        for index, card in zip(KNOWN_START_INDICES, (own_bottom_left, own_bottom_right)):
            if not isinstance(card, Card):
                raise ValueError(f"Starting cards must be Card members, got {card!r}")
            if self.unseen_cards[card] == 0:
                raise ValueError(f"{card!r} is not in this deck")
            self.take_unseen(card)
            own_hand.replace(index, card)

        self.hands = [own_hand] + [Hand() for _ in range(num_players - 1)]

        logger.debug(
            f"Dealt {num_players}-player game, P{first_player} first, "
            f"observer holds {own_hand}"
        )

    @property
    def draw_pile_count(self) -> int:
        return self.draw_pile_size

    def take_unseen(self, card: Card) -> None:
        """
        Record that ``card`` has been located, removing it from the unseen set.

        Raises:
            InconsistentRevealException: If no unseen copy of ``card`` remains
        """
        if self.unseen_cards[card] <= 0:
            raise InconsistentRevealException(
                f"Revealed {card} but every copy is already accounted for"
            )
        self.unseen_cards[card] -= 1
        if self.unseen_cards[card] == 0:
            del self.unseen_cards[card]

    def decrement_draw_pile(self) -> None:
        """
        Account for one card leaving the draw pile.

        When the pile runs out, the discard pile is shuffled into it. The
        observer loses track of those cards, so they return to the unseen set.
        """
        self.draw_pile_size -= 1
        if self.draw_pile_size == 0 and self.discard_pile:
            self.unseen_cards.update(self.discard_pile)
            self.draw_pile_size = len(self.discard_pile)
            self.discard_pile = []
            logger.debug(f"Reshuffled {self.draw_pile_size} discards into the draw pile")

    def unknown_slot_count(self) -> int:
        """Hidden cards in hands plus a held card the observer has not seen."""
        count = sum(hand.unknown_count() for hand in self.hands)
        if self.drawn_card is UNKNOWN:
            count += 1
        return count

    def check_consistency(self) -> None:
        """
        Verify the unseen-card bookkeeping.

        Raises:
            InvariantViolationException: If the unseen multiset does not
                cover exactly the draw pile and the hidden slots
        """
        unseen = sum(self.unseen_cards.values())
        hidden = self.draw_pile_size + self.unknown_slot_count()
        if unseen != hidden:
            raise InvariantViolationException(
                f"{unseen} unseen cards for {hidden} hidden positions"
            )

    def known_cards(self) -> Dict[Tuple[int, int], Card]:
        """Map (player, index) to the card for every slot the observer knows."""
        known = {}
        for player, hand in enumerate(self.hands):
            for index, card in enumerate(hand):
                if is_known(card):
                    known[(player, index)] = card
        return known

    def matches(self, other: Game) -> bool:
        """
        True if ``other`` is a world this view considers possible.

        Every public field must agree, and every slot this view knows must
        hold the same card in ``other``. Used to check the partial view
        against a ground-truth game.
        """
        if (
            other.num_players != self.num_players
            or other.turn != self.turn
            or other.state is not self.state
            or other.cambio_caller != self.cambio_caller
            or other.stuck != self.stuck
            or other.pending_target != self.pending_target
            or list(other.discard_pile) != self.discard_pile
            or other.draw_pile_count != self.draw_pile_size
        ):
            return False
        if (self.drawn_card is None) != (other.drawn_card is None):
            return False
        if is_known(self.drawn_card) and other.drawn_card != self.drawn_card:
            return False
        for player in range(self.num_players):
            if len(other.hands[player]) != len(self.hands[player]):
                return False
        for (player, index), card in self.known_cards().items():
            if other.hands[player][index] != card:
                return False
        return True

    def copy(self) -> "PartialInfo":
        """Independent copy; executing actions on it leaves this view untouched."""
        clone = PartialInfo.__new__(PartialInfo)
        clone.num_players = self.num_players
        clone.include_jokers = self.include_jokers
        clone.turn = self.turn
        clone.hands = [hand.copy() for hand in self.hands]
        clone.discard_pile = list(self.discard_pile)
        clone.drawn_card = self.drawn_card
        clone.cambio_caller = self.cambio_caller
        clone.stuck = self.stuck
        clone.state = self.state
        clone.action_history = list(self.action_history)
        clone.pending_target = self.pending_target
        clone.unseen_cards = Counter(self.unseen_cards)
        clone.draw_pile_size = self.draw_pile_size
        return clone

    def execute(self, action, revealed: Optional[Card] = None, validate: bool = True) -> None:
        """Execute ``action``; see ``cambio.game.actions.execute``."""
        execute_action(action, self, revealed, validate)

    def summary(self) -> str:
        """Multi-line description of the observer's knowledge."""
        lines = [
            f"Turn: P{self.turn}  State: {self.state}  "
            f"Cambio: {'P' + str(self.cambio_caller) if self.cambio_caller is not None else '-'}",
            f"Draw pile: {self.draw_pile_size}  "
            f"Discard top: {self.top_of_discard() or '-'}",
        ]
        for player, hand in enumerate(self.hands):
            marker = " (you)" if player == OBSERVER else ""
            lines.append(f"P{player}{marker}: {hand}")
        if self.drawn_card is not None:
            lines.append(f"Holding: {self.drawn_card}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"PartialInfo(players={self.num_players}, turn={self.turn}, "
            f"state={self.state}, draw_pile={self.draw_pile_size})"
        )


def new_partial_info_game(
    num_players: int,
    first_player: int,
    include_jokers: bool,
    own_bottom_left: Card,
    own_bottom_right: Card,
) -> PartialInfo:
    """
    Start tracking a new game from the observer's seat.

    Args:
        num_players: Number of players (2-8)
        first_player: Seat that takes the first turn
        include_jokers: Whether the two jokers are in the deck
        own_bottom_left: Observer's bottom-left card (index 2)
        own_bottom_right: Observer's bottom-right card (index 3)

    Returns:
        A PartialInfo view at the beginning of the first turn
    """
    return PartialInfo(
        num_players, first_player, include_jokers, own_bottom_left, own_bottom_right
    )
