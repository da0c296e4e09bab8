"""
Monte Carlo Tree Search (MCTS) for Cambio.

This module provides the search used to rank the observer's moves:
- MCTSNode: Tree node with UCT selection and backpropagation
- MCTS: Determinized search over a partial-information game
- search / search_parallel: One-call entry points (single tree or
  root-parallel trees in a process pool)

Example:
    >>> from cambio.game import Card, new_partial_info_game
    >>> from cambio.mcts import MCTS
    >>>
    >>> game = new_partial_info_game(2, 0, True, Card.TEN, Card.TEN)
    >>> mcts = MCTS(num_playouts=1000, seed=0)
    >>> for action, win_rate in mcts.search(game)[:5]:
    ...     print(f"{action}: {win_rate:.3f}")
"""

from cambio.mcts.node import DEFAULT_EXPLORATION, MCTSNode
from cambio.mcts.search import (
    MCTS,
    enable_metrics,
    get_metrics,
    merge_root_statistics,
    reset_metrics,
    search,
    search_parallel,
    split_credit,
)

__all__ = [
    "DEFAULT_EXPLORATION",
    "MCTSNode",
    "MCTS",
    "search",
    "search_parallel",
    "merge_root_statistics",
    "split_credit",
    "enable_metrics",
    "reset_metrics",
    "get_metrics",
]
