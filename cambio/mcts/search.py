"""
Determinized Monte Carlo Tree Search for Cambio.

The observer cannot see most cards, so each playout first samples one world
consistent with what they know (a ``Determinized`` game) and then runs a
classic four-phase MCTS iteration in it:

    1. Selection: descend with UCT among children legal in this world
    2. Expansion: add one child for a random untried legal action
    3. Simulation: play uniformly random legal actions to the end of the game
    4. Backpropagation: credit the winners on the path back to the root

One tree is shared by all determinizations, so root statistics average over
the hidden cards. Root-parallel search runs independent trees in worker
processes and sums their root statistics.

Example:
    >>> from cambio.game import Card, new_partial_info_game
    >>> from cambio.mcts import search
    >>>
    >>> game = new_partial_info_game(2, 0, True, Card.TEN, Card.TEN)
    >>> ranked = search(game, num_playouts=2000, seed=7)
    >>> best_action, win_rate = ranked[0]
"""

import logging
import multiprocessing as mp
import time
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from cambio.game.actions import Action, actor
from cambio.game.determinized import Determinized
from cambio.game.partial_info import PartialInfo
from cambio.mcts.node import DEFAULT_EXPLORATION, MCTSNode

logger = logging.getLogger(__name__)


def split_credit(winners: Sequence[int]) -> float:
    """
    Win credit given to each winner of a playout.

    Shared wins split one point evenly, so credit summed over winners is 1.

    Raises:
        ValueError: If there are no winners
    """
    if not winners:
        raise ValueError("A finished game has at least one winner")
    return 1.0 / len(winners)


class MCTS:
    """
    Determinized MCTS over a partial-information game.

    Attributes:
        num_playouts: Maximum playouts per search
        exploration: UCT exploration constant
        time_limit: Optional wall-clock budget in seconds, checked between
            playouts
        rng: Generator for determinizations, expansion and simulation

    Example:
        >>> game = new_partial_info_game(2, 0, True, Card.TEN, Card.TEN)
        >>> mcts = MCTS(num_playouts=500, seed=1)
        >>> ranked = mcts.search(game)
        >>> best_action, win_rate = ranked[0]
    """

    def __init__(
        self,
        num_playouts: int = 1000,
        exploration: float = DEFAULT_EXPLORATION,
        seed=None,
        time_limit: Optional[float] = None,
    ):
        """
        Initialize MCTS search.

        Args:
            num_playouts: Number of playouts per search (must be positive)
            exploration: UCT exploration constant (default: 1.414)
            seed: Seed for numpy's default_rng; an int, a SeedSequence or
                None for fresh entropy
            time_limit: Optional wall-clock limit in seconds. The search
                stops at whichever of the playout budget or the limit comes
                first; a playout in progress always completes.
        """
        if num_playouts <= 0:
            raise ValueError(f"num_playouts must be positive, got {num_playouts}")
        if time_limit is not None and time_limit <= 0:
            raise ValueError(f"time_limit must be positive, got {time_limit}")

        self.num_playouts = num_playouts
        self.exploration = exploration
        self.time_limit = time_limit
        self.rng = np.random.default_rng(seed)

    def search(self, game: PartialInfo) -> List[Tuple[Action, float]]:
        """
        Rank the actions available at the root of ``game``.

        Args:
            game: Observer's view of the current position. Never mutated.

        Returns:
            (action, win_rate) pairs for every root child, best first. The
            win rate belongs to the seat that takes the action.
        """
        root = self.build_tree(game)
        return [(action, child.win_rate()) for action, child in root.ranked_children()]

    def build_tree(self, game: PartialInfo) -> MCTSNode:
        """
        Run playouts from ``game`` and return the resulting tree's root.

        Args:
            game: Observer's view of the current position. Never mutated.

        Returns:
            Root node; its ``playouts`` is the number of playouts completed
        """
        root = MCTSNode()
        if game.is_terminal():
            return root

        start = time.perf_counter()
        logger.debug(
            f"Starting search: {self.num_playouts} playouts, "
            f"time limit {self.time_limit}, state {game.state}"
        )

        for _ in range(self.num_playouts):
            if self.time_limit is not None and time.perf_counter() - start >= self.time_limit:
                break
            self._playout(root, game)

        elapsed = time.perf_counter() - start
        rate = root.playouts / elapsed if elapsed > 0 else 0.0
        logger.info(
            f"Search finished: {root.playouts} playouts in {elapsed:.2f}s "
            f"({rate:.0f} playouts/s), {len(root.children)} root actions"
        )
        return root

    def _choose(self, actions: List[Action]) -> Action:
        return actions[int(self.rng.integers(len(actions)))]

    def _playout(self, root: MCTSNode, game: PartialInfo) -> None:
        """Run one determinize/select/expand/simulate/backpropagate iteration."""
        _start = time.perf_counter() if _SEARCH_METRICS_ENABLED else 0.0
        world = Determinized(game, self.rng)
        if _SEARCH_METRICS_ENABLED:
            _SEARCH_METRICS['determinize_calls'] += 1
            _SEARCH_METRICS['determinize_total_sec'] += time.perf_counter() - _start

        # Selection and expansion
        node = root
        while not world.is_terminal():
            legal = world.legal_actions()
            untried = node.unexpanded(legal)
            if untried:
                action = self._choose(untried)
                player = actor(action, world)
                world.execute(action, validate=False)
                node = node.add_child(action, player)
                break
            action, node = node.select_child(legal, self.exploration)
            world.execute(action, validate=False)

        # Simulation
        steps = 0
        while not world.is_terminal():
            world.execute(self._choose(world.legal_actions()), validate=False)
            steps += 1

        winners = world.winners()
        node.backpropagate(winners, split_credit(winners))

        if _SEARCH_METRICS_ENABLED:
            _SEARCH_METRICS['playouts'] += 1
            _SEARCH_METRICS['simulation_steps'] += steps


def search(
    game: PartialInfo,
    num_playouts: int,
    seed=None,
    exploration: float = DEFAULT_EXPLORATION,
    time_limit: Optional[float] = None,
    num_workers: int = 1,
) -> List[Tuple[Action, float]]:
    """
    Rank the observer's options in ``game`` with determinized MCTS.

    Args:
        game: Observer's view of the current position. Never mutated.
        num_playouts: Total playout budget
        seed: Seed for reproducible results (None = nondeterministic)
        exploration: UCT exploration constant
        time_limit: Optional wall-clock limit in seconds
        num_workers: Number of processes; more than one runs
            search_parallel()

    Returns:
        (action, win_rate) pairs sorted by win rate, best first
    """
    if num_workers > 1:
        return search_parallel(
            game,
            num_playouts,
            num_workers,
            seed=seed,
            exploration=exploration,
            time_limit=time_limit,
        )
    mcts = MCTS(
        num_playouts=num_playouts,
        exploration=exploration,
        seed=seed,
        time_limit=time_limit,
    )
    return mcts.search(game)


def search_parallel(
    game: PartialInfo,
    num_playouts: int,
    num_workers: int,
    seed=None,
    exploration: float = DEFAULT_EXPLORATION,
    time_limit: Optional[float] = None,
) -> List[Tuple[Action, float]]:
    """
    Root-parallel search: independent trees in a process pool.

    The playout budget is split evenly across workers, each worker gets its
    own seed spawned from ``seed``, and the root statistics of every tree are
    summed per action before ranking.
    When metrics are enabled, each worker's counters are added to this
    process's metrics.

    Args:
        game: Observer's view of the current position
        num_playouts: Total playout budget across all workers
        num_workers: Number of worker processes
        seed: Root seed; the same seed and worker count reproduce a result
        exploration: UCT exploration constant
        time_limit: Optional wall-clock limit in seconds per worker

    Returns:
        (action, win_rate) pairs sorted by merged win rate, best first
    """
    if num_workers <= 0:
        raise ValueError(f"num_workers must be positive, got {num_workers}")
    if num_playouts < num_workers:
        raise ValueError(
            f"num_playouts ({num_playouts}) must be at least num_workers ({num_workers})"
        )

    # Distribute playouts evenly across workers
    per_worker = num_playouts // num_workers
    remaining = num_playouts % num_workers
    seeds = np.random.SeedSequence(seed).spawn(num_workers)

    tasks = []
    for worker_id in range(num_workers):
        worker_playouts = per_worker + (1 if worker_id < remaining else 0)
        tasks.append((
            game,
            worker_playouts,
            seeds[worker_id],
            exploration,
            time_limit,
            _SEARCH_METRICS_ENABLED,
        ))

    logger.info(f"Starting parallel search: {num_playouts} playouts on {num_workers} workers")
    with mp.Pool(processes=num_workers) as pool:
        results = pool.starmap(_worker_search, tasks)

    # Worker counters are folded into this process's metrics
    for _, worker_metrics in results:
        if worker_metrics is not None:
            for k, v in worker_metrics.items():
                _SEARCH_METRICS[k] += v

    return merge_root_statistics([stats for stats, _ in results])


def merge_root_statistics(
    results: List[List[Tuple[Action, float, int]]],
) -> List[Tuple[Action, float]]:
    """
    Sum per-action (wins, playouts) over trees and rank by merged win rate.

    Args:
        results: One list of (action, wins, playouts) per tree

    Returns:
        (action, win_rate) pairs, best first; ties keep first-seen order
    """
    totals: Dict[Action, List[float]] = {}
    for tree_stats in results:
        for action, wins, playouts in tree_stats:
            entry = totals.setdefault(action, [0.0, 0])
            entry[0] += wins
            entry[1] += playouts

    merged = [
        (action, wins / playouts if playouts else 0.0)
        for action, (wins, playouts) in totals.items()
    ]
    merged.sort(key=lambda item: item[1], reverse=True)
    return merged


def _worker_search(
    game: PartialInfo,
    num_playouts: int,
    seed: np.random.SeedSequence,
    exploration: float,
    time_limit: Optional[float],
    collect_metrics: bool = False,
) -> Tuple[List[Tuple[Action, float, int]], Optional[dict]]:
    """
    Static worker function for root-parallel search.

    Defined at module level so it can be pickled by multiprocessing.

    Returns:
        (root statistics, raw metric counters or None when metrics are off)
    """
    if collect_metrics:
        enable_metrics(True)
        reset_metrics()

    mcts = MCTS(
        num_playouts=num_playouts,
        exploration=exploration,
        seed=seed,
        time_limit=time_limit,
    )
    root = mcts.build_tree(game)
    stats = [
        (action, child.wins, child.playouts)
        for action, child in root.children.items()
    ]
    return stats, (dict(_SEARCH_METRICS) if collect_metrics else None)


# -------------------
# Lightweight metrics
# -------------------
_SEARCH_METRICS_ENABLED = False
_SEARCH_METRICS = {
    'playouts': 0,
    'simulation_steps': 0,
    'determinize_calls': 0,
    'determinize_total_sec': 0.0,
}


def enable_metrics(enabled: bool = True) -> None:
    global _SEARCH_METRICS_ENABLED
    _SEARCH_METRICS_ENABLED = bool(enabled)


def reset_metrics() -> None:
    for k in list(_SEARCH_METRICS.keys()):
        _SEARCH_METRICS[k] = 0.0 if k.endswith('_sec') else 0


def get_metrics() -> dict:
    m = dict(_SEARCH_METRICS)
    playouts = m.get('playouts', 0) or 0
    calls = m.get('determinize_calls', 0) or 0
    m['avg_simulation_steps'] = m.get('simulation_steps', 0) / (playouts or 1)
    m['avg_determinize_ms'] = (
        (m.get('determinize_total_sec', 0.0) / (calls or 1)) * 1000.0
    )
    return m
