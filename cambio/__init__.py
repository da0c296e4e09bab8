"""
Cambio move search.

Tracks a Cambio game from one seat's point of view and ranks that seat's
moves with determinized Monte Carlo Tree Search.

Example:
    >>> from cambio import Card, new_partial_info_game, search
    >>> game = new_partial_info_game(2, 0, True, Card.TEN, Card.TEN)
    >>> for action, win_rate in search(game, num_playouts=5000)[:5]:
    ...     print(f"{action}: {win_rate:.3f}")
"""

from cambio.game import Card, execute, new_partial_info_game
from cambio.mcts import search, search_parallel

__version__ = "0.1.0"

__all__ = ["Card", "execute", "new_partial_info_game", "search", "search_parallel"]
