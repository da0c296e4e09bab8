"""
MCTS Node implementation with UCT selection.

Nodes are shared by every determinization of a search (single-observer
information set MCTS): a child is keyed by the action that leads to it, and
an action that is legal in one sampled world may be illegal in the next.
Selection therefore only ever considers the children that are legal in the
determinization of the current playout.

Each node records the seat that took the action leading to it. A win for
that seat is a win for the node, which is how multiplayer statistics stay
meaningful without a zero-sum assumption.
"""

import weakref
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from cambio.game.actions import Action

# UCT exploration constant (approximately sqrt(2))
DEFAULT_EXPLORATION = 1.414


class MCTSNode:
    """
    Node in the search tree.

    Attributes:
        player: Seat that took the action leading here (None at the root)
        action_taken: Action that led to this node from its parent
        wins: Credited wins for ``player`` across playouts through this node
        playouts: Playouts that passed through this node
        children: Dictionary mapping action -> child node
    """

    __slots__ = ("player", "action_taken", "wins", "playouts", "children", "_parent", "__weakref__")

    def __init__(
        self,
        player: Optional[int] = None,
        parent: Optional["MCTSNode"] = None,
        action_taken: Optional[Action] = None,
    ):
        """
        Args:
            player: Seat credited when this node's playouts are won
            parent: Parent node (None for root). Held by weak reference; the
                parent owns its children, not the other way around.
            action_taken: Action that led to this node

        Example:
            >>> root = MCTSNode()
            >>> root.is_root()
            True
            >>> child = root.add_child(Skip(), player=1)
            >>> child.parent is root
            True
        """
        self.player = player
        self.action_taken = action_taken
        self.wins = 0.0
        self.playouts = 0
        self.children: Dict[Action, MCTSNode] = {}
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def parent(self) -> Optional["MCTSNode"]:
        return self._parent() if self._parent is not None else None

    def is_root(self) -> bool:
        return self._parent is None

    def win_rate(self) -> float:
        """Fraction of playouts won by ``player``; 0.0 before any playout."""
        if self.playouts == 0:
            return 0.0
        return self.wins / self.playouts

    def add_child(self, action: Action, player: int) -> "MCTSNode":
        """
        Create the child reached by ``action``.

        Raises:
            ValueError: If the child already exists
        """
        if action in self.children:
            raise ValueError(f"Child for {action} already exists")
        child = MCTSNode(player=player, parent=self, action_taken=action)
        self.children[action] = child
        return child

    def unexpanded(self, legal_actions: Iterable[Action]) -> List[Action]:
        """Legal actions without a child yet, in the order given."""
        return [action for action in legal_actions if action not in self.children]

    def uct_scores(self, children: List["MCTSNode"], exploration: float) -> np.ndarray:
        """
        UCT value of each child.

        UCT(child) = w / n + C * sqrt(ln(N) / n)

        Where w and n are the child's wins and playouts and N is this node's
        playouts. Children without playouts score infinity.

        Args:
            children: Children to score (all must belong to this node)
            exploration: Exploration constant C

        Returns:
            Array of scores aligned with ``children``
        """
        wins = np.array([child.wins for child in children], dtype=np.float64)
        playouts = np.array([child.playouts for child in children], dtype=np.float64)
        scores = np.full(len(children), np.inf)
        visited = playouts > 0
        log_parent = np.log(max(self.playouts, 1))
        scores[visited] = wins[visited] / playouts[visited] + exploration * np.sqrt(
            log_parent / playouts[visited]
        )
        return scores

    def select_child(
        self,
        legal_actions: Iterable[Action],
        exploration: float = DEFAULT_EXPLORATION,
    ) -> Tuple[Action, "MCTSNode"]:
        """
        Select the legal child with the highest UCT score.

        Ties go to the child listed first in ``legal_actions``, so selection
        is deterministic for a given tree and legal set.

        Args:
            legal_actions: Actions legal in the current determinization
            exploration: Exploration constant C

        Returns:
            (action, child) pair

        Raises:
            ValueError: If no legal action has a child
        """
        candidates = [
            (action, self.children[action])
            for action in legal_actions
            if action in self.children
        ]
        if not candidates:
            raise ValueError("Cannot select child: no legal action has been expanded")

        scores = self.uct_scores([child for _, child in candidates], exploration)
        return candidates[int(np.argmax(scores))]

    def backpropagate(self, winners: Iterable[int], credit: float) -> None:
        """
        Record a finished playout on this node and every ancestor.

        Args:
            winners: Seats that won the playout
            credit: Win credit per winner (1 / number of winners)

        Example:
            >>> child.backpropagate([1], 1.0)
            >>> child.playouts, child.wins
            (1, 1.0)
            >>> root.playouts
            1
        """
        winning = set(winners)
        node = self
        while node is not None:
            node.playouts += 1
            if node.player in winning:
                node.wins += credit
            node = node.parent

    def ranked_children(self) -> List[Tuple[Action, "MCTSNode"]]:
        """Children ordered by win rate, best first; ties keep insertion order."""
        return sorted(
            self.children.items(), key=lambda item: item[1].win_rate(), reverse=True
        )

    def __repr__(self) -> str:
        """String representation of node for debugging."""
        return (
            f"MCTSNode(action={self.action_taken}, "
            f"player={self.player}, "
            f"wins={self.wins:.2f}, "
            f"playouts={self.playouts}, "
            f"children={len(self.children)})"
        )
