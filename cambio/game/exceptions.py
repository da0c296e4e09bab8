"""
Exceptions raised by the Cambio game engine.

Recoverable problems (a rejected action, a contradictory reveal, an empty
pile) derive from CambioGameException. Broken internal invariants derive from
RuntimeError instead so that handlers for rejected moves never swallow them.
"""


class CambioGameException(Exception):
    """Base exception for Cambio game errors."""

    pass


class IllegalActionException(CambioGameException):
    """Raised when an action is executed outside its legal context."""

    def __init__(self, action, reason: str):
        self.action = action
        self.reason = reason
        super().__init__(f"Illegal action {action}: {reason}")


class InconsistentRevealException(CambioGameException):
    """Raised when a revealed card contradicts what the game already records."""

    pass


class EmptyPileException(CambioGameException):
    """Raised when a card must be drawn but the draw and discard piles are empty."""

    pass


class InvariantViolationException(RuntimeError):
    """Raised when an internal invariant that state gating guarantees is broken."""

    pass
