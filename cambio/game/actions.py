"""
The closed action vocabulary of Cambio.

Every move in the game is one of the frozen dataclasses below. An action only
carries the data needed to replay it (target indices and players); its
meaning lives in three generic functions dispatched on the action's type:

- determinized_effect(action, game): mutate a Determinized view, return the
  next State
- partial_info_effect(action, game, revealed): mutate a PartialInfo view,
  return the next State. Card-revealing actions receive the card the observer
  saw; the others receive None.
- legality_problem(action, game): reason the action cannot be executed in
  the game's current phase, or None

execute() ties these together: validate, apply the right effect, assign the
new state and record the action in the history.

Actions that exist in an observer and an opponent flavour (Draw /
OpponentDraw, PeekOwn / OpponentPeekOwn, ...) have identical effects on a
determinized game. They differ in what the observer learns, which is why the
partial view needs them apart.
"""

from dataclasses import dataclass
from functools import singledispatch
from typing import ClassVar, Optional

from cambio.game.cards import UNKNOWN, Card, MaybeKnown, is_known
from cambio.game.constants import OBSERVER
from cambio.game.exceptions import (
    EmptyPileException,
    IllegalActionException,
    InconsistentRevealException,
    InvariantViolationException,
)
from cambio.game.game import Game
from cambio.game.state import State


# ============================================================================
# Action variants
# ============================================================================


@dataclass(frozen=True)
class Action:
    """Base class for all moves."""

    # True if the partial view needs the revealed card to apply this action
    reveals_card: ClassVar[bool] = False


@dataclass(frozen=True)
class Draw(Action):
    """The observer draws a card and sees it."""

    reveals_card: ClassVar[bool] = True

    def __str__(self) -> str:
        return "Draw"


@dataclass(frozen=True)
class OpponentDraw(Action):
    """Another player draws a card the observer cannot see."""

    def __str__(self) -> str:
        return "Opponent draws"


@dataclass(frozen=True)
class Discard(Action):
    """The observer discards the card they just drew."""

    def __str__(self) -> str:
        return "Discard drawn card"


@dataclass(frozen=True)
class OpponentDiscard(Action):
    """Another player discards the card they drew, revealing it."""

    reveals_card: ClassVar[bool] = True

    def __str__(self) -> str:
        return "Opponent discards drawn card"


@dataclass(frozen=True)
class Swap(Action):
    """Replace one of the acting player's cards with the drawn card."""

    index: int
    reveals_card: ClassVar[bool] = True

    def __str__(self) -> str:
        return f"Swap drawn card with own card {self.index}"


@dataclass(frozen=True)
class BlindSwitch(Action):
    """Switch any two players' cards without looking at either."""

    player_a: int
    index_a: int
    player_b: int
    index_b: int

    def __str__(self) -> str:
        return (
            f"Blind switch P{self.player_a}#{self.index_a} "
            f"<-> P{self.player_b}#{self.index_b}"
        )


@dataclass(frozen=True)
class PeekOwn(Action):
    """The observer looks at one of their own cards."""

    index: int
    reveals_card: ClassVar[bool] = True

    def __str__(self) -> str:
        return f"Peek at own card {self.index}"


@dataclass(frozen=True)
class OpponentPeekOwn(Action):
    """Another player looks at one of their own cards."""

    index: int

    def __str__(self) -> str:
        return f"Opponent peeks at own card {self.index}"


@dataclass(frozen=True)
class PeekOther(Action):
    """The observer looks at another player's card."""

    player: int
    index: int
    reveals_card: ClassVar[bool] = True

    def __str__(self) -> str:
        return f"Peek at P{self.player}#{self.index}"


@dataclass(frozen=True)
class OpponentPeekOther(Action):
    """Another player looks at a card that is not theirs."""

    player: int
    index: int

    def __str__(self) -> str:
        return f"Opponent peeks at P{self.player}#{self.index}"


@dataclass(frozen=True)
class BlackKingSwitch(Action):
    """After a black king peek, switch the peeked card with an own card."""

    index: int

    def __str__(self) -> str:
        return f"Switch peeked card with own card {self.index}"


@dataclass(frozen=True)
class TrueStick(Action):
    """A player sticks one of their own cards that matches the discard pile."""

    player: int
    index: int

    def __str__(self) -> str:
        return f"P{self.player} sticks own card {self.index}"


@dataclass(frozen=True)
class TrueStickAndGiveAway(Action):
    """
    ``stick_player`` sticks ``player``'s matching card, then hands one of
    their own cards (``give_index``) to ``player`` to fill the gap.
    """

    player: int
    index: int
    stick_player: int
    give_index: int

    def __str__(self) -> str:
        return (
            f"P{self.stick_player} sticks P{self.player}#{self.index} "
            f"and gives away own card {self.give_index}"
        )


@dataclass(frozen=True)
class CallCambio(Action):
    """Declare the last round. The game ends when the turn returns to the caller."""

    def __str__(self) -> str:
        return "Call Cambio"


@dataclass(frozen=True)
class EndTurn(Action):
    """End the turn, which also closes the window for sticking."""

    def __str__(self) -> str:
        return "End turn"


@dataclass(frozen=True)
class Skip(Action):
    """Skip the optional follow-up of a discarded card."""

    def __str__(self) -> str:
        return "Skip"


def actor(action: Action, game: Game) -> int:
    """
    Seat responsible for ``action`` in ``game``'s current state.

    Sticks can be made by anyone; every other action belongs to the player
    whose turn it is.
    """
    if isinstance(action, TrueStick):
        return action.player
    if isinstance(action, TrueStickAndGiveAway):
        return action.stick_player
    return game.turn


# ============================================================================
# Shared effect helpers
# ============================================================================


def _learn(game: Game, current: MaybeKnown, revealed: Card) -> None:
    """
    Reconcile a revealed card with what a partial view records for its slot.

    A known slot must match the reveal. An unknown slot's identity leaves the
    unseen multiset.
    """
    if is_known(current):
        if current != revealed:
            raise InconsistentRevealException(
                f"Revealed {revealed} where {current} is recorded"
            )
    else:
        game.take_unseen(revealed)


def _switch(game: Game, player_a: int, index_a: int, player_b: int, index_b: int) -> None:
    hand_a = game.hands[player_a]
    hand_b = game.hands[player_b]
    card_a = hand_a[index_a]
    hand_a.replace(index_a, hand_b[index_b])
    hand_b.replace(index_b, card_a)


def _peek_other_next_state(game: Game, player: int, index: int) -> State:
    if game.state is State.AFTER_DISCARD_BLACK_KING:
        game.pending_target = (player, index)
        return State.AFTER_PEEK_BLACK_KING
    return State.END_OF_TURN


def _black_king_switch(game: Game, index: int) -> State:
    if game.pending_target is None:
        raise InvariantViolationException(
            "BlackKingSwitch executed without a peeked target"
        )
    player, target_index = game.pending_target
    _switch(game, player, target_index, game.turn, index)
    game.pending_target = None
    return State.END_OF_TURN


def _remove_stuck_card(game: Game, player: int, index: int) -> None:
    """Shed a matching card: it leaves the hand and joins the discard pile."""
    top = game.top_of_discard()
    game.hands[player].remove(index)
    game.shift_pending_after_removal(player, index)
    game.discard_pile.append(top)
    game.stuck = True


def _give_away(game: Game, action: "TrueStickAndGiveAway") -> None:
    giver = game.hands[action.stick_player]
    given = giver[action.give_index]
    moves_target = game.pending_target == (action.stick_player, action.give_index)
    giver.remove(action.give_index)
    game.shift_pending_after_removal(action.stick_player, action.give_index)
    game.hands[action.player].insert(action.index, given)
    game.shift_pending_after_insert(action.player, action.index)
    if moves_target:
        game.pending_target = (action.player, action.index)


def _call_cambio(game: Game, action: Action) -> State:
    if game.cambio_caller is not None:
        raise IllegalActionException(
            action, f"P{game.cambio_caller} has already called Cambio"
        )
    game.cambio_caller = game.turn
    game.advance_turn()
    return State.BEGINNING_OF_TURN


def _end_turn(game: Game) -> State:
    game.stuck = False
    game.pending_target = None
    game.advance_turn()
    if game.turn == game.cambio_caller:
        return State.END_OF_GAME
    return State.BEGINNING_OF_TURN


# ============================================================================
# Determinized effects
# ============================================================================


@singledispatch
def determinized_effect(action: Action, game) -> State:
    """Apply ``action`` to a determinized game and return the next state."""
    raise TypeError(f"No determinized effect for {type(action).__name__}")


@determinized_effect.register(Draw)
@determinized_effect.register(OpponentDraw)
def _draw_determinized(action, game) -> State:
    game.drawn_card = game.draw()
    return State.AFTER_DRAW


@determinized_effect.register(Discard)
@determinized_effect.register(OpponentDiscard)
def _discard_determinized(action, game) -> State:
    card = game.drawn_card
    game.discard_pile.append(card)
    game.drawn_card = None
    return card.discard_state


@determinized_effect.register(Swap)
def _swap_determinized(action: Swap, game) -> State:
    hand = game.hands[game.turn]
    game.discard_pile.append(hand[action.index])
    hand.replace(action.index, game.drawn_card)
    game.drawn_card = None
    return State.END_OF_TURN


@determinized_effect.register(BlindSwitch)
def _blind_switch_determinized(action: BlindSwitch, game) -> State:
    _switch(game, action.player_a, action.index_a, action.player_b, action.index_b)
    return State.END_OF_TURN


@determinized_effect.register(PeekOwn)
@determinized_effect.register(OpponentPeekOwn)
def _peek_own_determinized(action, game) -> State:
    return State.END_OF_TURN


@determinized_effect.register(PeekOther)
@determinized_effect.register(OpponentPeekOther)
def _peek_other_determinized(action, game) -> State:
    return _peek_other_next_state(game, action.player, action.index)


@determinized_effect.register(BlackKingSwitch)
def _black_king_switch_determinized(action: BlackKingSwitch, game) -> State:
    return _black_king_switch(game, action.index)


@determinized_effect.register(TrueStick)
def _true_stick_determinized(action: TrueStick, game) -> State:
    _remove_stuck_card(game, action.player, action.index)
    return game.state


@determinized_effect.register(TrueStickAndGiveAway)
def _true_stick_give_away_determinized(action: TrueStickAndGiveAway, game) -> State:
    _remove_stuck_card(game, action.player, action.index)
    _give_away(game, action)
    return game.state


@determinized_effect.register(CallCambio)
def _call_cambio_determinized(action: CallCambio, game) -> State:
    return _call_cambio(game, action)


@determinized_effect.register(EndTurn)
def _end_turn_determinized(action: EndTurn, game) -> State:
    return _end_turn(game)


@determinized_effect.register(Skip)
def _skip_determinized(action: Skip, game) -> State:
    game.pending_target = None
    return State.END_OF_TURN


# ============================================================================
# Partial-information effects
# ============================================================================


@singledispatch
def partial_info_effect(action: Action, game, revealed: Optional[Card]) -> State:
    """Apply ``action`` to a partial-information game and return the next state."""
    raise TypeError(f"No partial-info effect for {type(action).__name__}")


@partial_info_effect.register(Draw)
def _draw_partial(action: Draw, game, revealed: Card) -> State:
    if game.draw_pile_size <= 0:
        raise EmptyPileException("Cannot draw: the draw pile is empty")
    game.take_unseen(revealed)
    game.drawn_card = revealed
    game.decrement_draw_pile()
    return State.AFTER_DRAW


@partial_info_effect.register(OpponentDraw)
def _opponent_draw_partial(action: OpponentDraw, game, revealed: None) -> State:
    if game.draw_pile_size <= 0:
        raise EmptyPileException("Cannot draw: the draw pile is empty")
    game.drawn_card = UNKNOWN
    game.decrement_draw_pile()
    return State.AFTER_DRAW


@partial_info_effect.register(Discard)
def _discard_partial(action: Discard, game, revealed: None) -> State:
    card = game.drawn_card
    if not is_known(card):
        raise InvariantViolationException(
            "The observer discarded a drawn card they never saw"
        )
    game.discard_pile.append(card)
    game.drawn_card = None
    return card.discard_state


@partial_info_effect.register(OpponentDiscard)
def _opponent_discard_partial(action: OpponentDiscard, game, revealed: Card) -> State:
    _learn(game, game.drawn_card, revealed)
    game.discard_pile.append(revealed)
    game.drawn_card = None
    return revealed.discard_state


@partial_info_effect.register(Swap)
def _swap_partial(action: Swap, game, revealed: Card) -> State:
    hand = game.hands[game.turn]
    _learn(game, hand[action.index], revealed)
    # The displaced card is face up on the discard pile now
    game.discard_pile.append(revealed)
    hand.replace(action.index, game.drawn_card)
    game.drawn_card = None
    return State.END_OF_TURN


@partial_info_effect.register(BlindSwitch)
def _blind_switch_partial(action: BlindSwitch, game, revealed: None) -> State:
    _switch(game, action.player_a, action.index_a, action.player_b, action.index_b)
    return State.END_OF_TURN


@partial_info_effect.register(PeekOwn)
def _peek_own_partial(action: PeekOwn, game, revealed: Card) -> State:
    hand = game.hands[OBSERVER]
    _learn(game, hand[action.index], revealed)
    hand.replace(action.index, revealed)
    return State.END_OF_TURN


@partial_info_effect.register(OpponentPeekOwn)
def _opponent_peek_own_partial(action: OpponentPeekOwn, game, revealed: None) -> State:
    return State.END_OF_TURN


@partial_info_effect.register(PeekOther)
def _peek_other_partial(action: PeekOther, game, revealed: Card) -> State:
    hand = game.hands[action.player]
    _learn(game, hand[action.index], revealed)
    hand.replace(action.index, revealed)
    return _peek_other_next_state(game, action.player, action.index)


@partial_info_effect.register(OpponentPeekOther)
def _opponent_peek_other_partial(action: OpponentPeekOther, game, revealed: None) -> State:
    return _peek_other_next_state(game, action.player, action.index)


@partial_info_effect.register(BlackKingSwitch)
def _black_king_switch_partial(action: BlackKingSwitch, game, revealed: None) -> State:
    return _black_king_switch(game, action.index)


@partial_info_effect.register(TrueStick)
def _true_stick_partial(action: TrueStick, game, revealed: None) -> State:
    # A true stick shows the card, and it is a copy of the top of discard
    _learn(game, game.hands[action.player][action.index], game.top_of_discard())
    _remove_stuck_card(game, action.player, action.index)
    return game.state


@partial_info_effect.register(TrueStickAndGiveAway)
def _true_stick_give_away_partial(action: TrueStickAndGiveAway, game, revealed: None) -> State:
    _learn(game, game.hands[action.player][action.index], game.top_of_discard())
    _remove_stuck_card(game, action.player, action.index)
    _give_away(game, action)
    return game.state


@partial_info_effect.register(CallCambio)
def _call_cambio_partial(action: CallCambio, game, revealed: None) -> State:
    return _call_cambio(game, action)


@partial_info_effect.register(EndTurn)
def _end_turn_partial(action: EndTurn, game, revealed: None) -> State:
    return _end_turn(game)


@partial_info_effect.register(Skip)
def _skip_partial(action: Skip, game, revealed: None) -> State:
    game.pending_target = None
    return State.END_OF_TURN


# ============================================================================
# Legality
# ============================================================================


def _phase_problem(game: Game, *states: State) -> Optional[str]:
    if game.state not in states:
        expected = ", ".join(str(state) for state in states)
        return f"state is {game.state}, expected {expected}"
    return None


def _seat_problem(game: Game, observer_variant: bool) -> Optional[str]:
    if observer_variant and game.turn != OBSERVER:
        return f"observer action on P{game.turn}'s turn"
    if not observer_variant and game.turn == OBSERVER:
        return "opponent action on the observer's turn"
    return None


def _slot_problem(game: Game, player: int, index: int) -> Optional[str]:
    if not 0 <= player < game.num_players:
        return f"no player {player}"
    if not 0 <= index < len(game.hands[player]):
        return f"P{player} has no card {index}"
    return None


def _pile_problem(game: Game) -> Optional[str]:
    if game.draw_pile_count == 0:
        return "the draw pile is empty"
    return None


def _first_problem(*problems: Optional[str]) -> Optional[str]:
    for problem in problems:
        if problem is not None:
            return problem
    return None


def _stick_problem(game: Game, player: int, index: int) -> Optional[str]:
    if not game.state.stickable:
        return f"cannot stick in state {game.state}"
    if game.stuck:
        return "the top of the discard pile has already been stuck"
    top = game.top_of_discard()
    if top is None:
        return "the discard pile is empty"
    problem = _slot_problem(game, player, index)
    if problem is not None:
        return problem
    card = game.hands[player][index]
    if is_known(card) and card != top:
        return f"P{player}#{index} is {card}, not {top}"
    return None


@singledispatch
def legality_problem(action: Action, game: Game) -> Optional[str]:
    """
    Explain why ``action`` cannot be executed in ``game`` right now.

    Checks the phase, whose turn it is, the observer/opponent flavour, index
    ranges and the Cambio/stick bookkeeping. Hidden card identities are only
    checked where the view knows them.

    Returns:
        A human-readable reason, or None if the action is legal
    """
    return f"unknown action type {type(action).__name__}"


@legality_problem.register(Draw)
def _draw_legality(action: Draw, game: Game) -> Optional[str]:
    return _first_problem(
        _phase_problem(game, State.BEGINNING_OF_TURN),
        _seat_problem(game, observer_variant=True),
        _pile_problem(game),
    )


@legality_problem.register(OpponentDraw)
def _opponent_draw_legality(action: OpponentDraw, game: Game) -> Optional[str]:
    return _first_problem(
        _phase_problem(game, State.BEGINNING_OF_TURN),
        _seat_problem(game, observer_variant=False),
        _pile_problem(game),
    )


@legality_problem.register(Discard)
def _discard_legality(action: Discard, game: Game) -> Optional[str]:
    return _first_problem(
        _phase_problem(game, State.AFTER_DRAW),
        _seat_problem(game, observer_variant=True),
    )


@legality_problem.register(OpponentDiscard)
def _opponent_discard_legality(action: OpponentDiscard, game: Game) -> Optional[str]:
    return _first_problem(
        _phase_problem(game, State.AFTER_DRAW),
        _seat_problem(game, observer_variant=False),
    )


@legality_problem.register(Swap)
def _swap_legality(action: Swap, game: Game) -> Optional[str]:
    return _first_problem(
        _phase_problem(game, State.AFTER_DRAW),
        _slot_problem(game, game.turn, action.index),
    )


@legality_problem.register(BlindSwitch)
def _blind_switch_legality(action: BlindSwitch, game: Game) -> Optional[str]:
    if action.player_a == action.player_b:
        return "a blind switch needs two different players"
    return _first_problem(
        _phase_problem(game, State.AFTER_DISCARD_FACE),
        _slot_problem(game, action.player_a, action.index_a),
        _slot_problem(game, action.player_b, action.index_b),
    )


@legality_problem.register(PeekOwn)
def _peek_own_legality(action: PeekOwn, game: Game) -> Optional[str]:
    return _first_problem(
        _phase_problem(game, State.AFTER_DISCARD_LOW),
        _seat_problem(game, observer_variant=True),
        _slot_problem(game, game.turn, action.index),
    )


@legality_problem.register(OpponentPeekOwn)
def _opponent_peek_own_legality(action: OpponentPeekOwn, game: Game) -> Optional[str]:
    return _first_problem(
        _phase_problem(game, State.AFTER_DISCARD_LOW),
        _seat_problem(game, observer_variant=False),
        _slot_problem(game, game.turn, action.index),
    )


def _peek_other_legality(game: Game, player: int, index: int, observer_variant: bool) -> Optional[str]:
    if player == game.turn:
        return "cannot peek at your own card with a 9, 10 or black king"
    return _first_problem(
        _phase_problem(game, State.AFTER_DISCARD_MID, State.AFTER_DISCARD_BLACK_KING),
        _seat_problem(game, observer_variant),
        _slot_problem(game, player, index),
    )


@legality_problem.register(PeekOther)
def _observer_peek_other_legality(action: PeekOther, game: Game) -> Optional[str]:
    return _peek_other_legality(game, action.player, action.index, observer_variant=True)


@legality_problem.register(OpponentPeekOther)
def _opponent_peek_other_legality(action: OpponentPeekOther, game: Game) -> Optional[str]:
    return _peek_other_legality(game, action.player, action.index, observer_variant=False)


@legality_problem.register(BlackKingSwitch)
def _black_king_switch_legality(action: BlackKingSwitch, game: Game) -> Optional[str]:
    problem = _first_problem(
        _phase_problem(game, State.AFTER_PEEK_BLACK_KING),
        _slot_problem(game, game.turn, action.index),
    )
    if problem is None and game.pending_target is None:
        return "the peeked card is no longer in play"
    return problem


@legality_problem.register(TrueStick)
def _true_stick_legality(action: TrueStick, game: Game) -> Optional[str]:
    return _stick_problem(game, action.player, action.index)


@legality_problem.register(TrueStickAndGiveAway)
def _true_stick_give_away_legality(action: TrueStickAndGiveAway, game: Game) -> Optional[str]:
    if action.stick_player == action.player:
        return "use TrueStick to stick your own card"
    return _first_problem(
        _stick_problem(game, action.player, action.index),
        _slot_problem(game, action.stick_player, action.give_index),
    )


@legality_problem.register(CallCambio)
def _call_cambio_legality(action: CallCambio, game: Game) -> Optional[str]:
    if game.cambio_caller is not None:
        return f"P{game.cambio_caller} has already called Cambio"
    return _phase_problem(game, State.BEGINNING_OF_TURN)


@legality_problem.register(EndTurn)
def _end_turn_legality(action: EndTurn, game: Game) -> Optional[str]:
    # With nothing left to draw, a player can only pass once Cambio is called
    if (
        game.state is State.BEGINNING_OF_TURN
        and game.draw_pile_count == 0
        and game.cambio_caller is not None
    ):
        return None
    return _phase_problem(game, State.END_OF_TURN)


@legality_problem.register(Skip)
def _skip_legality(action: Skip, game: Game) -> Optional[str]:
    if not game.state.optional:
        return f"nothing to skip in state {game.state}"
    return None


# ============================================================================
# Execution
# ============================================================================


def revealed_card(action: Action, game: Game) -> Optional[Card]:
    """
    Card the observer sees when ``action`` is executed on a fully dealt game.

    Must be called before the action is executed.

    Args:
        action: Action about to be executed
        game: Determinized view that knows every card

    Returns:
        The revealed card, or None for actions that reveal nothing (and for
        a draw from an empty pile)
    """
    if isinstance(action, Draw):
        return game.draw_pile[-1] if game.draw_pile else None
    if isinstance(action, OpponentDiscard):
        return game.drawn_card
    if isinstance(action, Swap):
        return game.hands[game.turn][action.index]
    if isinstance(action, PeekOwn):
        return game.hands[OBSERVER][action.index]
    if isinstance(action, PeekOther):
        return game.hands[action.player][action.index]
    return None


def execute(
    action: Action,
    game: Game,
    revealed: Optional[Card] = None,
    validate: bool = True,
) -> None:
    """
    Execute ``action`` against either game view.

    Computes the next state with the view's effect function, assigns it and
    appends the action to the history. The history append happens for every
    action, including those without other side effects.

    Args:
        action: Action to execute
        game: PartialInfo or Determinized view to mutate
        revealed: Card the observer saw. Required by card-revealing actions
            on a partial view; optional on a determinized view, where it is
            checked against the card the view already holds.
        validate: Reject actions that are illegal in the current phase. The
            search disables this for actions drawn from legal_actions().

    Raises:
        IllegalActionException: If the action is rejected (game untouched)
        InconsistentRevealException: If the revealed card contradicts the view
        EmptyPileException: If a draw finds nothing to draw
    """
    if validate:
        problem = legality_problem(action, game)
        if problem is not None:
            raise IllegalActionException(action, problem)

    if game.partial_info:
        if action.reveals_card and not is_known(revealed):
            raise IllegalActionException(action, "the revealed card is required")
        if not action.reveals_card and revealed is not None:
            raise IllegalActionException(action, "this action does not reveal a card")
        next_state = partial_info_effect(action, game, revealed)
    else:
        if revealed is not None:
            if not action.reveals_card:
                raise IllegalActionException(action, "this action does not reveal a card")
            expected = revealed_card(action, game)
            if revealed is not expected:
                raise InconsistentRevealException(
                    f"Revealed {revealed} where {expected} is recorded"
                )
        next_state = determinized_effect(action, game)

    game.state = next_state
    game.action_history.append(action)

