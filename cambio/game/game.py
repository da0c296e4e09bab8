"""
State shared by both views of a Cambio game.

``PartialInfo`` (what the observer knows) and ``Determinized`` (one concrete
hypothesis of reality) are peer state machines driven by the same actions.
This base class holds the fields and helpers the action effects need from
either view.
"""

from typing import ClassVar, List, Optional, Tuple

from cambio.game.cards import Card, MaybeKnown
from cambio.game.hand import Hand
from cambio.game.state import State


class Game:
    """
    Fields common to both game views.

    Attributes:
        num_players: Number of players at the table
        turn: Seat whose turn it is
        hands: One Hand per seat
        discard_pile: Face-up discard pile, top card last
        drawn_card: Card held after drawing (None when no card is held)
        cambio_caller: Seat that called Cambio, if any
        stuck: True once the current top of the discard pile has been stuck
        state: Current turn phase
        action_history: Every executed action, in order
        pending_target: (player, index) peeked after a black king discard,
            consumed by BlackKingSwitch
    """

    # True for the observer's partial-information view
    partial_info: ClassVar[bool] = False

    num_players: int
    turn: int
    hands: List[Hand]
    discard_pile: List[Card]
    drawn_card: Optional[MaybeKnown]
    cambio_caller: Optional[int]
    stuck: bool
    state: State
    action_history: list
    pending_target: Optional[Tuple[int, int]]

    @property
    def draw_pile_count(self) -> int:
        """Number of cards left in the draw pile."""
        raise NotImplementedError

    def advance_turn(self) -> None:
        """Pass the turn to the next seat, wrapping around to seat 0."""
        self.turn = (self.turn + 1) % self.num_players

    def top_of_discard(self) -> Optional[Card]:
        """The face-up card on top of the discard pile, or None if empty."""
        return self.discard_pile[-1] if self.discard_pile else None

    def hand(self, player: int) -> Hand:
        return self.hands[player]

    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def shift_pending_after_removal(self, player: int, index: int) -> None:
        """Keep the pending target on the same card after a hand removal."""
        if self.pending_target is None or self.pending_target[0] != player:
            return
        target_index = self.pending_target[1]
        if target_index == index:
            # The target card itself left the hand
            self.pending_target = None
        elif target_index > index:
            self.pending_target = (player, target_index - 1)

    def shift_pending_after_insert(self, player: int, index: int) -> None:
        """Keep the pending target on the same card after a hand insertion."""
        if self.pending_target is None or self.pending_target[0] != player:
            return
        target_index = self.pending_target[1]
        if target_index >= index:
            self.pending_target = (player, target_index + 1)
