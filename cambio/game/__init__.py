"""
Cambio Game Engine Package.

This package contains the game model for Cambio: cards, hands, turn phases,
the action vocabulary and the two views of a game (the observer's partial
information and determinized samples of it).
"""

from cambio.game.constants import (
    OBSERVER,
    HAND_SIZE,
    KNOWN_START_INDICES,
    MIN_PLAYERS,
    MAX_PLAYERS,
    deck_size,
)
from cambio.game.state import State
from cambio.game.cards import UNKNOWN, Card, MaybeKnown, build_deck, is_known, parse_card
from cambio.game.hand import Hand
from cambio.game.exceptions import (
    CambioGameException,
    IllegalActionException,
    InconsistentRevealException,
    EmptyPileException,
    InvariantViolationException,
)
from cambio.game.actions import (
    Action,
    Draw,
    OpponentDraw,
    Discard,
    OpponentDiscard,
    Swap,
    BlindSwitch,
    PeekOwn,
    OpponentPeekOwn,
    PeekOther,
    OpponentPeekOther,
    BlackKingSwitch,
    TrueStick,
    TrueStickAndGiveAway,
    CallCambio,
    EndTurn,
    Skip,
    actor,
    execute,
    revealed_card,
)
from cambio.game.partial_info import PartialInfo, new_partial_info_game
from cambio.game.determinized import Determinized

__all__ = [
    "OBSERVER",
    "HAND_SIZE",
    "KNOWN_START_INDICES",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "deck_size",
    "State",
    "UNKNOWN",
    "Card",
    "MaybeKnown",
    "build_deck",
    "is_known",
    "parse_card",
    "Hand",
    "CambioGameException",
    "IllegalActionException",
    "InconsistentRevealException",
    "EmptyPileException",
    "InvariantViolationException",
    "Action",
    "Draw",
    "OpponentDraw",
    "Discard",
    "OpponentDiscard",
    "Swap",
    "BlindSwitch",
    "PeekOwn",
    "OpponentPeekOwn",
    "PeekOther",
    "OpponentPeekOther",
    "BlackKingSwitch",
    "TrueStick",
    "TrueStickAndGiveAway",
    "CallCambio",
    "EndTurn",
    "Skip",
    "actor",
    "execute",
    "revealed_card",
    "PartialInfo",
    "new_partial_info_game",
    "Determinized",
]
