"""
Determinized (perfect-information) samples of a partial-information game.

A ``Determinized`` game is one concrete guess at the hidden cards: the unseen
identities are shuffled and dealt into every unknown hand slot, an unknown
held card, and the draw pile. The sample then runs as an ordinary
perfect-information game, which is what lets MCTS simulate to the end.

Each playout builds its own sample and throws it away afterwards, so a
sample never writes back into the PartialInfo it came from.
"""

from typing import List

import numpy as np

from cambio.game.actions import (
    Action,
    BlackKingSwitch,
    BlindSwitch,
    CallCambio,
    Discard,
    Draw,
    EndTurn,
    OpponentDiscard,
    OpponentDraw,
    OpponentPeekOther,
    OpponentPeekOwn,
    PeekOther,
    PeekOwn,
    Skip,
    Swap,
    TrueStick,
    TrueStickAndGiveAway,
)
from cambio.game.actions import execute as execute_action
from cambio.game.cards import UNKNOWN, Card, is_known
from cambio.game.constants import OBSERVER
from cambio.game.exceptions import EmptyPileException, InvariantViolationException
from cambio.game.game import Game
from cambio.game.partial_info import PartialInfo
from cambio.game.state import State


class Determinized(Game):
    """
    One concrete world consistent with a PartialInfo view.

    Attributes:
        draw_pile: Concrete draw pile, next card last
        include_jokers: Whether the deck has the two jokers
        rng: Generator used for the deal and for reshuffles
    """

    def __init__(self, partial: PartialInfo, rng: np.random.Generator):
        """
        Sample hidden cards for ``partial``.

        Args:
            partial: View to determinize. It is only read.
            rng: Source of randomness for the deal

        Raises:
            InvariantViolationException: If the unseen cards do not exactly
                cover the hidden positions of ``partial``
        """
        self.rng = rng
        self.num_players = partial.num_players
        self.include_jokers = partial.include_jokers
        self.turn = partial.turn
        self.discard_pile = list(partial.discard_pile)
        self.cambio_caller = partial.cambio_caller
        self.stuck = partial.stuck
        self.state = partial.state
        self.action_history = list(partial.action_history)
        self.pending_target = partial.pending_target

        pool = list(partial.unseen_cards.elements())
        pool = [pool[i] for i in rng.permutation(len(pool))]

        self.hands = []
        for hand in partial.hands:
            concrete = hand.copy()
            for index, card in enumerate(hand):
                if not is_known(card):
                    concrete.replace(index, self._deal_from(pool))
            self.hands.append(concrete)

        if partial.drawn_card is UNKNOWN:
            self.drawn_card = self._deal_from(pool)
        else:
            self.drawn_card = partial.drawn_card

        if len(pool) != partial.draw_pile_size:
            raise InvariantViolationException(
                f"Determinization left {len(pool)} cards for a draw pile "
                f"of {partial.draw_pile_size}"
            )
        self.draw_pile = pool

    @staticmethod
    def _deal_from(pool: List[Card]) -> Card:
        if not pool:
            raise InvariantViolationException("Ran out of unseen cards while dealing")
        return pool.pop()

    @property
    def draw_pile_count(self) -> int:
        return len(self.draw_pile)

    def draw(self) -> Card:
        """
        Take the top card of the draw pile.

        If that empties the pile, the discard pile is shuffled into a new draw
        pile and the discard pile is cleared.

        Raises:
            EmptyPileException: If there is nothing to draw
        """
        if not self.draw_pile:
            raise EmptyPileException("Cannot draw: the draw pile is empty")
        card = self.draw_pile.pop()
        if not self.draw_pile and self.discard_pile:
            order = self.rng.permutation(len(self.discard_pile))
            self.draw_pile = [self.discard_pile[i] for i in order]
            self.discard_pile = []
        return card

    def execute(self, action: Action, validate: bool = True) -> None:
        """Execute ``action``; see ``cambio.game.actions.execute``."""
        execute_action(action, self, None, validate)

    def legal_actions(self) -> List[Action]:
        """
        Every action available in the current state, in a fixed order.

        The phase action(s) come first, then Skip when the follow-up is
        optional, then every true stick when the top of the discard pile can
        still be stuck.

        Returns:
            List of actions (empty once the game is over)
        """
        state = self.state
        if state is State.END_OF_GAME:
            return []

        observer_turn = self.turn == OBSERVER
        own_indices = self.hands[self.turn].indices()
        actions: List[Action] = []

        if state is State.BEGINNING_OF_TURN:
            if self.draw_pile:
                actions.append(Draw() if observer_turn else OpponentDraw())
                if self.cambio_caller is None:
                    actions.append(CallCambio())
            elif self.cambio_caller is None:
                actions.append(CallCambio())
            else:
                actions.append(EndTurn())
        elif state is State.AFTER_DRAW:
            actions.append(Discard() if observer_turn else OpponentDiscard())
            actions.extend(Swap(i) for i in own_indices)
        elif state is State.AFTER_DISCARD_LOW:
            peek = PeekOwn if observer_turn else OpponentPeekOwn
            actions.extend(peek(i) for i in own_indices)
        elif state in (State.AFTER_DISCARD_MID, State.AFTER_DISCARD_BLACK_KING):
            peek = PeekOther if observer_turn else OpponentPeekOther
            for player in range(self.num_players):
                if player != self.turn:
                    actions.extend(peek(player, i) for i in self.hands[player].indices())
        elif state is State.AFTER_DISCARD_FACE:
            for player_a in range(self.num_players):
                for player_b in range(player_a + 1, self.num_players):
                    for index_a in self.hands[player_a].indices():
                        for index_b in self.hands[player_b].indices():
                            actions.append(BlindSwitch(player_a, index_a, player_b, index_b))
        elif state is State.AFTER_PEEK_BLACK_KING:
            if self.pending_target is not None:
                actions.extend(BlackKingSwitch(i) for i in own_indices)
        elif state is State.END_OF_TURN:
            actions.append(EndTurn())

        if state.optional:
            actions.append(Skip())

        if state.stickable and not self.stuck and self.discard_pile:
            actions.extend(self._true_sticks())

        return actions

    def _true_sticks(self) -> List[Action]:
        top = self.discard_pile[-1]
        sticks: List[Action] = []
        for player, hand in enumerate(self.hands):
            for index, card in enumerate(hand):
                if card != top:
                    continue
                sticks.append(TrueStick(player, index))
                for stick_player in range(self.num_players):
                    if stick_player == player:
                        continue
                    sticks.extend(
                        TrueStickAndGiveAway(player, index, stick_player, give_index)
                        for give_index in self.hands[stick_player].indices()
                    )
        return sticks

    def scores(self) -> List[int]:
        """Points per seat; lower is better."""
        return [hand.points() for hand in self.hands]

    def winners(self) -> List[int]:
        """
        Seats with the lowest score.

        The Cambio caller loses ties, unless they are the only player on the
        lowest score.

        Returns:
            Non-empty list of winning seats in seat order
        """
        scores = self.scores()
        best = min(scores)
        tied = [player for player, score in enumerate(scores) if score == best]
        if len(tied) > 1 and self.cambio_caller in tied:
            tied.remove(self.cambio_caller)
        return tied

    def card_count(self) -> int:
        """Cards in hands, piles and hand-held; always the full deck size."""
        held = 1 if self.drawn_card is not None else 0
        return (
            sum(len(hand) for hand in self.hands)
            + len(self.discard_pile)
            + len(self.draw_pile)
            + held
        )

    def __repr__(self) -> str:
        return (
            f"Determinized(players={self.num_players}, turn={self.turn}, "
            f"state={self.state}, draw_pile={len(self.draw_pile)})"
        )
