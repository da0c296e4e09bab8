"""
Unit tests for the Cambio card model and turn phases.

Tests Card values and discard phases, the UNKNOWN marker, deck composition,
card parsing and the State flags.
"""

import pickle

import pytest
from cambio.game.cards import UNKNOWN, Card, Unknown, build_deck, is_known, parse_card
from cambio.game.constants import deck_size
from cambio.game.state import State


# ============================================================================
# Test Card
# ============================================================================


class TestCard:
    """Test Card values and discard phases."""

    def test_number_card_points(self):
        """Test that A-10 score their face value."""
        numbered = [
            Card.ACE, Card.TWO, Card.THREE, Card.FOUR, Card.FIVE,
            Card.SIX, Card.SEVEN, Card.EIGHT, Card.NINE, Card.TEN,
        ]
        assert [card.points for card in numbered] == list(range(1, 11))

    def test_special_card_points(self):
        """Test face cards, kings and the joker."""
        assert Card.JACK.points == 10
        assert Card.QUEEN.points == 10
        assert Card.BLACK_KING.points == 10
        assert Card.RED_KING.points == -1
        assert Card.JOKER.points == 0

    def test_discard_states(self):
        """Test the phase entered after discarding each card."""
        for card in (Card.ACE, Card.TWO, Card.SIX, Card.JOKER):
            assert card.discard_state is State.END_OF_TURN
        assert Card.SEVEN.discard_state is State.AFTER_DISCARD_LOW
        assert Card.EIGHT.discard_state is State.AFTER_DISCARD_LOW
        assert Card.NINE.discard_state is State.AFTER_DISCARD_MID
        assert Card.TEN.discard_state is State.AFTER_DISCARD_MID
        assert Card.JACK.discard_state is State.AFTER_DISCARD_FACE
        assert Card.QUEEN.discard_state is State.AFTER_DISCARD_FACE
        assert Card.RED_KING.discard_state is State.AFTER_DISCARD_FACE
        assert Card.BLACK_KING.discard_state is State.AFTER_DISCARD_BLACK_KING

    def test_fifteen_distinct_identities(self):
        """Test that no two cards alias each other."""
        assert len(list(Card)) == 15
        assert len({card.abbreviation for card in Card}) == 15

    def test_card_str(self):
        """Test display abbreviations."""
        assert str(Card.TEN) == "10"
        assert str(Card.BLACK_KING) == "BK"
        assert str(Card.JOKER) == "0"


class TestUnknown:
    """Test the UNKNOWN marker."""

    def test_singleton(self):
        """Test that Unknown() always returns the same marker."""
        assert Unknown() is UNKNOWN

    def test_survives_pickling(self):
        """Test that pickling keeps identity (used by worker processes)."""
        assert pickle.loads(pickle.dumps(UNKNOWN)) is UNKNOWN

    def test_is_known(self):
        """Test is_known on both kinds of slot."""
        assert is_known(Card.ACE)
        assert not is_known(UNKNOWN)
        assert str(UNKNOWN) == "?"


class TestDeck:
    """Test deck composition."""

    def test_deck_without_jokers(self):
        """Test the 52-card deck."""
        deck = build_deck(jokers=False)
        assert sum(deck.values()) == 52 == deck_size(False)
        assert deck[Card.JOKER] == 0
        assert deck[Card.QUEEN] == 4

    def test_deck_with_jokers(self):
        """Test the 54-card deck."""
        deck = build_deck(jokers=True)
        assert sum(deck.values()) == 54 == deck_size(True)
        assert deck[Card.JOKER] == 2

    def test_kings_split_by_colour(self):
        """Test that the four kings are two black and two red."""
        deck = build_deck(jokers=False)
        assert deck[Card.BLACK_KING] == 2
        assert deck[Card.RED_KING] == 2


class TestParseCard:
    """Test parsing cards from text."""

    def test_parse_abbreviations(self):
        """Test abbreviations, case-insensitively."""
        assert parse_card("A") is Card.ACE
        assert parse_card("10") is Card.TEN
        assert parse_card("bk") is Card.BLACK_KING
        assert parse_card(" rk ") is Card.RED_KING
        assert parse_card("0") is Card.JOKER

    def test_parse_names(self):
        """Test enum names."""
        assert parse_card("queen") is Card.QUEEN
        assert parse_card("BLACK_KING") is Card.BLACK_KING

    def test_parse_invalid(self):
        """Test that unknown text raises ValueError."""
        with pytest.raises(ValueError, match="Invalid card"):
            parse_card("K")


# ============================================================================
# Test State
# ============================================================================


class TestState:
    """Test phase flags."""

    def test_unstickable_states(self):
        """Test phases in which nobody can stick."""
        for state in (State.BEGINNING_OF_TURN, State.AFTER_DRAW, State.END_OF_GAME):
            assert not state.stickable
            assert not state.optional

    def test_optional_states(self):
        """Test phases whose follow-up can be skipped."""
        for state in (
            State.AFTER_DISCARD_LOW,
            State.AFTER_DISCARD_MID,
            State.AFTER_DISCARD_FACE,
            State.AFTER_DISCARD_BLACK_KING,
            State.AFTER_PEEK_BLACK_KING,
        ):
            assert state.stickable
            assert state.optional

    def test_end_of_turn(self):
        """Test that end of turn allows sticking but nothing to skip."""
        assert State.END_OF_TURN.stickable
        assert not State.END_OF_TURN.optional

    def test_terminal(self):
        """Test that only END_OF_GAME is terminal."""
        assert [state for state in State if state.is_terminal] == [State.END_OF_GAME]
