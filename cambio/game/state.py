"""
Turn phases of a Cambio game.

A game moves through these phases as actions are executed. Each phase carries
two static traits consumed by legal-move enumeration:

- stickable: any player may stick the top card of the discard pile
- optional: the follow-up action of a discarded card may be skipped
"""

from enum import Enum


class State(Enum):
    """Turn phase with its stickable/optional traits."""

    BEGINNING_OF_TURN = ("beginning_of_turn", False, False)
    AFTER_DRAW = ("after_draw", False, False)
    # 7 or 8 discarded: peek at one of your own cards
    AFTER_DISCARD_LOW = ("after_discard_low", True, True)
    # 9 or 10 discarded: peek at another player's card
    AFTER_DISCARD_MID = ("after_discard_mid", True, True)
    # Jack, queen or red king discarded: blind switch
    AFTER_DISCARD_FACE = ("after_discard_face", True, True)
    # Black king discarded: peek at another player's card, then maybe switch
    AFTER_DISCARD_BLACK_KING = ("after_discard_black_king", True, True)
    AFTER_PEEK_BLACK_KING = ("after_peek_black_king", True, True)
    END_OF_TURN = ("end_of_turn", True, False)
    END_OF_GAME = ("end_of_game", False, False)

    def __init__(self, label: str, stickable: bool, optional: bool):
        self.label = label
        self.stickable = stickable
        self.optional = optional

    @property
    def is_terminal(self) -> bool:
        """True once the game is over and no actions remain."""
        return self is State.END_OF_GAME

    def __str__(self) -> str:
        return self.label
