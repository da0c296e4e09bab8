"""
Unit tests for the action vocabulary.

Tests each action's effect on a determinized game, legality checks, the
pending black king target and actor attribution. The partial-information
effects are covered in test_partial_info.py.
"""

import numpy as np
import pytest
from cambio.game.actions import (
    BlackKingSwitch,
    BlindSwitch,
    CallCambio,
    Discard,
    Draw,
    EndTurn,
    OpponentDiscard,
    OpponentDraw,
    OpponentPeekOther,
    PeekOther,
    PeekOwn,
    Skip,
    Swap,
    TrueStick,
    TrueStickAndGiveAway,
    actor,
    execute,
    legality_problem,
    revealed_card,
)
from cambio.game.cards import Card
from cambio.game.determinized import Determinized
from cambio.game.exceptions import (
    EmptyPileException,
    IllegalActionException,
    InconsistentRevealException,
    InvariantViolationException,
)
from cambio.game.hand import Hand
from cambio.game.partial_info import new_partial_info_game
from cambio.game.state import State


def make_world(hands, draw_pile=None, discard=None, turn=0, state=State.BEGINNING_OF_TURN):
    """Build a determinized game with the given cards in place."""
    partial = new_partial_info_game(len(hands), turn, True, Card.ACE, Card.ACE)
    world = Determinized(partial, np.random.default_rng(0))
    world.hands = [Hand(cards) for cards in hands]
    world.draw_pile = list(draw_pile) if draw_pile is not None else [Card.FIVE] * 10
    world.discard_pile = list(discard or [])
    world.state = state
    return world


FOUR_LOW = [Card.ACE, Card.TWO, Card.THREE, Card.FOUR]
FOUR_HIGH = [Card.JACK, Card.QUEEN, Card.NINE, Card.TEN]


# ============================================================================
# Test draw and discard
# ============================================================================


class TestDrawDiscard:
    """Test drawing, discarding and swapping."""

    def test_draw_takes_top_of_pile(self):
        """Test that Draw moves the last pile card into the drawn slot."""
        world = make_world([FOUR_LOW, FOUR_HIGH], draw_pile=[Card.ACE, Card.SIX])
        world.execute(Draw())

        assert world.drawn_card is Card.SIX
        assert world.draw_pile == [Card.ACE]
        assert world.state is State.AFTER_DRAW
        assert world.action_history == [Draw()]

    def test_opponent_draw_same_effect(self):
        """Test that OpponentDraw behaves like Draw in a determinized game."""
        world = make_world([FOUR_LOW, FOUR_HIGH], draw_pile=[Card.ACE, Card.SIX], turn=1)
        world.execute(OpponentDraw())

        assert world.drawn_card is Card.SIX
        assert world.state is State.AFTER_DRAW

    def test_draw_last_card_reshuffles_discard(self):
        """Test that emptying the pile moves the discard pile into it."""
        world = make_world(
            [FOUR_LOW, FOUR_HIGH],
            draw_pile=[Card.SIX],
            discard=[Card.NINE, Card.TEN, Card.JOKER],
        )
        world.execute(Draw())

        assert world.drawn_card is Card.SIX
        assert world.discard_pile == []
        assert sorted(world.draw_pile, key=lambda c: c.name) == sorted(
            [Card.NINE, Card.TEN, Card.JOKER], key=lambda c: c.name
        )

    def test_draw_from_empty_pile(self):
        """Test that an empty pile rejects Draw, and raises if forced."""
        world = make_world([FOUR_LOW, FOUR_HIGH], draw_pile=[])

        with pytest.raises(IllegalActionException, match="draw pile is empty"):
            world.execute(Draw())
        with pytest.raises(EmptyPileException):
            world.execute(Draw(), validate=False)

    def test_discard_enters_card_phase(self):
        """Test that the discarded card decides the next phase."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.AFTER_DRAW)
        world.drawn_card = Card.SEVEN
        world.execute(Discard())

        assert world.discard_pile == [Card.SEVEN]
        assert world.drawn_card is None
        assert world.state is State.AFTER_DISCARD_LOW

    def test_discard_black_king(self):
        """Test the black king phase."""
        world = make_world([FOUR_LOW, FOUR_HIGH], turn=1, state=State.AFTER_DRAW)
        world.drawn_card = Card.BLACK_KING
        world.execute(OpponentDiscard())

        assert world.state is State.AFTER_DISCARD_BLACK_KING

    def test_swap_replaces_own_card(self):
        """Test that Swap discards the replaced card."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.AFTER_DRAW)
        world.drawn_card = Card.NINE
        world.execute(Swap(1))

        assert list(world.hands[0]) == [Card.ACE, Card.NINE, Card.THREE, Card.FOUR]
        assert world.discard_pile == [Card.TWO]
        assert world.drawn_card is None
        assert world.state is State.END_OF_TURN

    def test_swap_outside_after_draw(self):
        """Test that Swap is rejected before drawing and leaves the game untouched."""
        world = make_world([FOUR_LOW, FOUR_HIGH])

        with pytest.raises(IllegalActionException, match="expected after_draw"):
            world.execute(Swap(0))
        assert world.state is State.BEGINNING_OF_TURN
        assert world.action_history == []
        assert list(world.hands[0]) == FOUR_LOW

    def test_observer_action_on_opponent_turn(self):
        """Test that observer and opponent variants are tied to the seat."""
        world = make_world([FOUR_LOW, FOUR_HIGH], turn=1)
        with pytest.raises(IllegalActionException, match="observer action"):
            world.execute(Draw())

        world = make_world([FOUR_LOW, FOUR_HIGH], turn=0)
        with pytest.raises(IllegalActionException, match="opponent action"):
            world.execute(OpponentDraw())


# ============================================================================
# Test special card powers
# ============================================================================


class TestPowers:
    """Test peeks, blind switches and the black king."""

    def test_peek_own(self):
        """Test that peeking ends the turn without changing cards."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.AFTER_DISCARD_LOW)
        world.execute(PeekOwn(2))

        assert world.state is State.END_OF_TURN
        assert list(world.hands[0]) == FOUR_LOW

    def test_peek_other_after_mid_card(self):
        """Test that a 9/10 peek ends the turn without a pending target."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.AFTER_DISCARD_MID)
        world.execute(PeekOther(1, 3))

        assert world.state is State.END_OF_TURN
        assert world.pending_target is None

    def test_peek_own_card_with_mid_card_rejected(self):
        """Test that PeekOther cannot target the acting player."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.AFTER_DISCARD_MID)
        with pytest.raises(IllegalActionException, match="own card"):
            world.execute(PeekOther(0, 1))

    def test_blind_switch(self):
        """Test exchanging two players' cards."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.AFTER_DISCARD_FACE)
        world.execute(BlindSwitch(0, 0, 1, 3))

        assert world.hands[0][0] is Card.TEN
        assert world.hands[1][3] is Card.ACE
        assert world.state is State.END_OF_TURN

    def test_blind_switch_same_player_rejected(self):
        """Test that a blind switch needs two players."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.AFTER_DISCARD_FACE)
        assert legality_problem(BlindSwitch(0, 0, 0, 1), world) is not None

    def test_black_king_peek_then_switch(self):
        """Test the full black king sequence."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.AFTER_DISCARD_BLACK_KING)
        world.execute(PeekOther(1, 2))

        assert world.state is State.AFTER_PEEK_BLACK_KING
        assert world.pending_target == (1, 2)

        world.execute(BlackKingSwitch(0))

        assert world.hands[0][0] is Card.NINE
        assert world.hands[1][2] is Card.ACE
        assert world.pending_target is None
        assert world.state is State.END_OF_TURN

    def test_opponent_black_king_peek(self):
        """Test that an opponent's black king peek also records the target."""
        world = make_world(
            [FOUR_LOW, FOUR_HIGH, FOUR_LOW], turn=2, state=State.AFTER_DISCARD_BLACK_KING
        )
        world.execute(OpponentPeekOther(0, 1))

        assert world.pending_target == (0, 1)
        world.execute(BlackKingSwitch(3))
        assert world.hands[0][1] is Card.FOUR
        assert world.hands[2][3] is Card.TWO

    def test_black_king_skip_clears_target(self):
        """Test that skipping the switch forgets the peeked card."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.AFTER_DISCARD_BLACK_KING)
        world.execute(PeekOther(1, 0))
        world.execute(Skip())

        assert world.pending_target is None
        assert world.state is State.END_OF_TURN

    def test_black_king_switch_without_target(self):
        """Test that a missing target is rejected, and fatal if forced."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.AFTER_PEEK_BLACK_KING)

        with pytest.raises(IllegalActionException, match="no longer in play"):
            world.execute(BlackKingSwitch(0))
        with pytest.raises(InvariantViolationException):
            world.execute(BlackKingSwitch(0), validate=False)

    def test_skip_requires_optional_state(self):
        """Test that Skip is only legal when the follow-up is optional."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.END_OF_TURN)
        with pytest.raises(IllegalActionException, match="nothing to skip"):
            world.execute(Skip())

        world.state = State.AFTER_DISCARD_LOW
        world.execute(Skip())
        assert world.state is State.END_OF_TURN


# ============================================================================
# Test sticking
# ============================================================================


class TestSticks:
    """Test true sticks and giveaways."""

    def test_true_stick_own_card(self):
        """Test that a matching card leaves the hand for the discard pile."""
        world = make_world(
            [FOUR_LOW, [Card.JACK, Card.QUEEN, Card.FIVE, Card.TEN]],
            discard=[Card.FIVE],
            state=State.END_OF_TURN,
        )
        world.execute(TrueStick(1, 2))

        assert list(world.hands[1]) == [Card.JACK, Card.QUEEN, Card.TEN]
        assert world.discard_pile == [Card.FIVE, Card.FIVE]
        assert world.stuck
        assert world.state is State.END_OF_TURN

    def test_stick_keeps_state(self):
        """Test that sticking mid-power does not change the phase."""
        world = make_world(
            [[Card.NINE, Card.TWO, Card.THREE, Card.FOUR], FOUR_HIGH],
            discard=[Card.NINE],
            state=State.AFTER_DISCARD_MID,
        )
        world.execute(TrueStick(0, 0))

        assert world.state is State.AFTER_DISCARD_MID

    def test_stick_mismatch_rejected(self):
        """Test that a card that does not match cannot be stuck."""
        world = make_world([FOUR_LOW, FOUR_HIGH], discard=[Card.FIVE], state=State.END_OF_TURN)

        with pytest.raises(IllegalActionException, match="not 5"):
            world.execute(TrueStick(0, 0))
        assert len(world.hands[0]) == 4

    def test_only_one_stick_per_discard(self):
        """Test the stuck flag."""
        world = make_world(
            [[Card.FIVE, Card.FIVE, Card.THREE, Card.FOUR], FOUR_HIGH],
            discard=[Card.FIVE],
            state=State.END_OF_TURN,
        )
        world.execute(TrueStick(0, 0))

        with pytest.raises(IllegalActionException, match="already been stuck"):
            world.execute(TrueStick(0, 0))

    def test_no_stick_before_draw(self):
        """Test that unstickable phases reject sticks."""
        world = make_world(
            [[Card.FIVE, Card.TWO, Card.THREE, Card.FOUR], FOUR_HIGH], discard=[Card.FIVE]
        )
        with pytest.raises(IllegalActionException, match="cannot stick"):
            world.execute(TrueStick(0, 0))

    def test_stick_and_give_away(self):
        """Test sticking an opponent's card and filling the gap."""
        world = make_world(
            [FOUR_LOW, [Card.FIVE, Card.QUEEN, Card.NINE, Card.TEN]],
            discard=[Card.FIVE],
            state=State.END_OF_TURN,
        )
        world.execute(TrueStickAndGiveAway(1, 0, 0, 3))

        assert list(world.hands[0]) == [Card.ACE, Card.TWO, Card.THREE]
        assert list(world.hands[1]) == [Card.FOUR, Card.QUEEN, Card.NINE, Card.TEN]
        assert world.discard_pile == [Card.FIVE, Card.FIVE]
        assert world.stuck

    def test_stick_shifts_pending_target(self):
        """Test that removing an earlier card re-indexes the peeked card."""
        world = make_world(
            [FOUR_LOW, [Card.FIVE, Card.QUEEN, Card.NINE, Card.TEN]],
            discard=[Card.FIVE],
            state=State.AFTER_PEEK_BLACK_KING,
        )
        world.pending_target = (1, 2)
        world.execute(TrueStick(1, 0))

        assert world.pending_target == (1, 1)
        world.execute(BlackKingSwitch(0))
        assert world.hands[0][0] is Card.NINE

    def test_sticking_target_cancels_switch(self):
        """Test that the peeked card leaving play cancels the switch."""
        world = make_world(
            [FOUR_LOW, [Card.FIVE, Card.QUEEN, Card.NINE, Card.TEN]],
            discard=[Card.FIVE],
            state=State.AFTER_PEEK_BLACK_KING,
        )
        world.pending_target = (1, 0)
        world.execute(TrueStick(1, 0))

        assert world.pending_target is None
        assert BlackKingSwitch(0) not in world.legal_actions()
        assert Skip() in world.legal_actions()

    def test_give_away_moves_target(self):
        """Test that giving away the peeked card moves the target with it."""
        world = make_world(
            [[Card.FIVE, Card.TWO, Card.THREE, Card.FOUR], FOUR_HIGH, FOUR_LOW],
            discard=[Card.FIVE],
            turn=0,
            state=State.AFTER_PEEK_BLACK_KING,
        )
        world.pending_target = (2, 1)
        world.execute(TrueStickAndGiveAway(0, 0, 2, 1))

        assert world.pending_target == (0, 0)
        assert world.hands[0][0] is Card.TWO


# ============================================================================
# Test turn flow
# ============================================================================


class TestTurnFlow:
    """Test Cambio calls and ending turns."""

    def test_call_cambio(self):
        """Test that calling Cambio passes the turn."""
        world = make_world([FOUR_LOW, FOUR_HIGH])
        world.execute(CallCambio())

        assert world.cambio_caller == 0
        assert world.turn == 1
        assert world.state is State.BEGINNING_OF_TURN

    def test_second_cambio_rejected(self):
        """Test that Cambio can only be called once."""
        world = make_world([FOUR_LOW, FOUR_HIGH])
        world.execute(CallCambio())

        with pytest.raises(IllegalActionException, match="already called Cambio"):
            world.execute(CallCambio())
        with pytest.raises(IllegalActionException, match="already called Cambio"):
            world.execute(CallCambio(), validate=False)

    def test_end_turn_resets_stuck(self):
        """Test that EndTurn clears the stuck flag and passes the turn."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.END_OF_TURN)
        world.stuck = True
        world.execute(EndTurn())

        assert not world.stuck
        assert world.turn == 1
        assert world.state is State.BEGINNING_OF_TURN

    def test_end_turn_wraps_around(self):
        """Test seat wrap-around."""
        world = make_world([FOUR_LOW, FOUR_HIGH, FOUR_LOW], turn=2, state=State.END_OF_TURN)
        world.execute(EndTurn())
        assert world.turn == 0

    def test_game_ends_back_at_caller(self):
        """Test that the game ends when the turn returns to the caller."""
        world = make_world([FOUR_LOW, FOUR_HIGH])
        world.execute(CallCambio())
        world.execute(OpponentDraw())
        world.execute(OpponentDiscard())
        world.state = State.END_OF_TURN
        world.execute(EndTurn())

        assert world.state is State.END_OF_GAME
        assert world.is_terminal()
        assert world.legal_actions() == []

    def test_end_turn_with_empty_pile_after_cambio(self):
        """Test passing when nothing can be drawn once Cambio is called."""
        world = make_world([FOUR_LOW, FOUR_HIGH], draw_pile=[])
        world.cambio_caller = 1
        world.execute(EndTurn())
        assert world.state is State.END_OF_GAME

    def test_end_turn_at_start_of_turn_otherwise_rejected(self):
        """Test that a turn cannot be passed while cards can be drawn."""
        world = make_world([FOUR_LOW, FOUR_HIGH])
        world.cambio_caller = 1
        with pytest.raises(IllegalActionException):
            world.execute(EndTurn())


# ============================================================================
# Test action values and attribution
# ============================================================================


class TestActionValues:
    """Test action identity and attribution."""

    def test_actions_are_hashable_values(self):
        """Test that equal actions collide as dictionary keys."""
        assert Swap(1) == Swap(1)
        assert Swap(1) != Swap(2)
        assert len({Swap(1), Swap(1), Draw(), Draw(), Skip()}) == 3

    def test_actor(self):
        """Test who performs each action."""
        world = make_world([FOUR_LOW, FOUR_HIGH, FOUR_LOW], turn=1)
        assert actor(OpponentDraw(), world) == 1
        assert actor(TrueStick(2, 0), world) == 2
        assert actor(TrueStickAndGiveAway(1, 0, 0, 2), world) == 0

    def test_reveals_card_flags(self):
        """Test which actions show a card to the observer."""
        revealing = {Draw(), OpponentDiscard(), Swap(0), PeekOwn(0), PeekOther(1, 0)}
        silent = {OpponentDraw(), Discard(), Skip(), EndTurn(), CallCambio(), TrueStick(0, 0)}
        assert all(action.reveals_card for action in revealing)
        assert not any(action.reveals_card for action in silent)

    def test_module_execute(self):
        """Test the module-level execute function."""
        world = make_world([FOUR_LOW, FOUR_HIGH], draw_pile=[Card.TWO])
        execute(Draw(), world)
        assert world.drawn_card is Card.TWO

    def test_readable_strings(self):
        """Test action display."""
        assert str(Swap(2)) == "Swap drawn card with own card 2"
        assert str(CallCambio()) == "Call Cambio"
        assert "P1#3" in str(PeekOther(1, 3))


# ============================================================================
# Test revealed cards on a fully dealt game
# ============================================================================


class TestRevealedCards:
    """Test reveal checks when executing on a determinized view."""

    def test_revealed_card_lookup(self):
        """Test the card each revealing action shows."""
        world = make_world([FOUR_LOW, FOUR_HIGH], draw_pile=[Card.ACE, Card.SIX])

        assert revealed_card(Draw(), world) is Card.SIX
        assert revealed_card(PeekOwn(2), world) is Card.THREE
        assert revealed_card(PeekOther(1, 0), world) is Card.JACK
        assert revealed_card(Swap(3), world) is Card.FOUR
        assert revealed_card(CallCambio(), world) is None

    def test_revealed_card_empty_pile(self):
        """Test that a draw from an empty pile shows nothing."""
        world = make_world([FOUR_LOW, FOUR_HIGH], draw_pile=[])
        assert revealed_card(Draw(), world) is None

    def test_matching_reveal_accepted(self):
        """Test that a reveal agreeing with the dealt card executes."""
        world = make_world([FOUR_HIGH, FOUR_LOW], state=State.AFTER_DISCARD_LOW)
        execute(PeekOwn(2), world, Card.NINE)

        assert world.action_history == [PeekOwn(2)]
        assert world.state is State.END_OF_TURN

    def test_contradicting_peek_rejected(self):
        """Test that a peek claiming the wrong card leaves the game untouched."""
        world = make_world([FOUR_HIGH, FOUR_LOW], state=State.AFTER_DISCARD_LOW)

        with pytest.raises(InconsistentRevealException):
            execute(PeekOwn(2), world, Card.ACE)

        assert world.state is State.AFTER_DISCARD_LOW
        assert world.action_history == []
        assert list(world.hands[0]) == FOUR_HIGH

    def test_contradicting_draw_rejected(self):
        """Test that a draw claiming the wrong card keeps the pile intact."""
        world = make_world([FOUR_LOW, FOUR_HIGH], draw_pile=[Card.ACE, Card.SIX])

        with pytest.raises(InconsistentRevealException):
            execute(Draw(), world, Card.ACE)

        assert world.draw_pile == [Card.ACE, Card.SIX]
        assert world.drawn_card is None
        assert world.state is State.BEGINNING_OF_TURN

    def test_silent_action_rejects_revealed_card(self):
        """Test that a card cannot accompany an action that reveals nothing."""
        world = make_world([FOUR_LOW, FOUR_HIGH], state=State.END_OF_TURN)

        with pytest.raises(IllegalActionException, match="does not reveal"):
            execute(EndTurn(), world, Card.ACE)
        assert world.state is State.END_OF_TURN
