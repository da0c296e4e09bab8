"""
Arena for evaluating the search against random opponents.

Each game is played against a hidden ground truth: a fully dealt
``Determinized`` game that stands in for the physical table. Seat 0 (the
observer) only sees its ``PartialInfo`` view and decides with MCTS; the
other seats play uniformly random legal moves. Every action is executed on
the ground truth and replayed on the observer's view with whatever card the
truth reveals, so the partial view is exercised exactly the way it would be
driven by a real game.
"""

import logging
from typing import Any, Dict, List

import numpy as np

from cambio.game.actions import Action, actor, revealed_card
from cambio.game.cards import build_deck
from cambio.game.constants import OBSERVER
from cambio.game.determinized import Determinized
from cambio.game.exceptions import InvariantViolationException
from cambio.game.partial_info import PartialInfo, new_partial_info_game
from cambio.mcts.node import DEFAULT_EXPLORATION
from cambio.mcts.search import MCTS

logger = logging.getLogger(__name__)


class Arena:
    """
    Plays MCTS (seat 0) against random opponents.

    The observer acts on its own turns and the opponents act on theirs;
    sticks are available to whoever is acting.
    """

    def __init__(
        self,
        num_players: int = 2,
        num_playouts: int = 500,
        include_jokers: bool = True,
        exploration: float = DEFAULT_EXPLORATION,
        check_consistency: bool = True,
    ):
        """
        Initialize arena.

        Args:
            num_players: Players per game, including the observer
            num_playouts: MCTS playouts per observer decision
            include_jokers: Whether the deck has the two jokers
            exploration: UCT exploration constant for the observer
            check_consistency: Verify the observer's view against the ground
                truth after every action
        """
        self.num_players = num_players
        self.num_playouts = num_playouts
        self.include_jokers = include_jokers
        self.exploration = exploration
        self.check_consistency = check_consistency

    def deal(self, rng: np.random.Generator) -> tuple:
        """
        Deal a new game.

        Returns:
            (partial, truth): the observer's view and the hidden ground truth
        """
        deck = list(build_deck(self.include_jokers).elements())
        bottom_left, bottom_right = (deck[i] for i in rng.choice(len(deck), size=2, replace=False))
        first_player = int(rng.integers(self.num_players))
        partial = new_partial_info_game(
            self.num_players, first_player, self.include_jokers, bottom_left, bottom_right
        )
        truth = Determinized(partial, rng)
        return partial, truth

    def play_game(self, seed=None) -> Dict[str, Any]:
        """
        Play one complete game.

        Args:
            seed: Seed for the deal, the opponents and the observer's search

        Returns:
            Game result:
            - scores: Final points per seat
            - winners: Winning seats
            - observer_won: Whether seat 0 is among the winners
            - actions: Number of actions executed
            - cambio_caller: Seat that called Cambio
        """
        table_seed, search_seed = np.random.SeedSequence(seed).spawn(2)
        rng = np.random.default_rng(table_seed)
        mcts = MCTS(
            num_playouts=self.num_playouts,
            exploration=self.exploration,
            seed=search_seed,
        )

        partial, truth = self.deal(rng)
        while not truth.is_terminal():
            action = self._choose_action(partial, truth, mcts, rng)
            self.step(partial, truth, action)

        winners = truth.winners()
        return {
            'scores': truth.scores(),
            'winners': winners,
            'observer_won': OBSERVER in winners,
            'actions': len(truth.action_history),
            'cambio_caller': truth.cambio_caller,
        }

    def step(self, partial: PartialInfo, truth: Determinized, action: Action) -> None:
        """
        Execute ``action`` on the ground truth and the observer's view.

        Raises:
            InvariantViolationException: If the views disagree afterwards
        """
        revealed = revealed_card(action, truth)
        truth.execute(action)
        partial.execute(action, revealed)
        if self.check_consistency:
            partial.check_consistency()
            if not partial.matches(truth):
                raise InvariantViolationException(
                    f"Observer view diverged from the table after {action}"
                )

    def _choose_action(
        self,
        partial: PartialInfo,
        truth: Determinized,
        mcts: MCTS,
        rng: np.random.Generator,
    ) -> Action:
        legal = truth.legal_actions()
        if truth.turn == OBSERVER:
            own = [action for action in legal if actor(action, truth) == OBSERVER]
            legal_set = set(own)
            for action, _ in mcts.search(partial):
                if action in legal_set:
                    return action
            # Search never expanded a move that is legal here
            return own[int(rng.integers(len(own)))]
        theirs = [action for action in legal if actor(action, truth) != OBSERVER]
        return theirs[int(rng.integers(len(theirs)))]

    def play_match(
        self,
        num_games: int = 20,
        seed=None,
        verbose: bool = False,
    ) -> Dict[str, Any]:
        """
        Play a series of games and summarize the observer's results.

        Args:
            num_games: Number of games to play
            seed: Seed for the whole match (None = nondeterministic)
            verbose: Log progress after every game instead of every tenth

        Returns:
            Match results:
            - observer_wins: Games seat 0 won (shared wins count)
            - games_played: Total games played
            - win_rate: observer_wins / games_played
            - baseline_win_rate: Expected win rate of a random player
            - observer_avg_score: Average final points of seat 0
            - opponent_avg_score: Average final points of the other seats
        """
        if num_games <= 0:
            raise ValueError(f"num_games must be positive, got {num_games}")

        logger.info(
            f"Starting match: {num_games} games, {self.num_players} players, "
            f"{self.num_playouts} playouts/move"
        )

        observer_scores: List[int] = []
        opponent_scores: List[float] = []
        observer_wins = 0

        game_seeds = np.random.SeedSequence(seed).spawn(num_games)
        for games_played, game_seed in enumerate(game_seeds, start=1):
            result = self.play_game(game_seed)
            scores = result['scores']
            observer_scores.append(scores[OBSERVER])
            opponent_scores.append(float(np.mean(scores[1:])))
            if result['observer_won']:
                observer_wins += 1

            if verbose or games_played % 10 == 0:
                logger.info(
                    f"  Progress: {games_played}/{num_games} games, "
                    f"observer win rate: {observer_wins / games_played:.1%}"
                )

        results = {
            'observer_wins': observer_wins,
            'games_played': num_games,
            'win_rate': observer_wins / num_games,
            'baseline_win_rate': 1.0 / self.num_players,
            'observer_avg_score': float(np.mean(observer_scores)),
            'opponent_avg_score': float(np.mean(opponent_scores)),
        }

        logger.info(
            f"Match complete: observer won {observer_wins}/{num_games} "
            f"({results['win_rate']:.1%}), avg score {results['observer_avg_score']:.1f} "
            f"vs {results['opponent_avg_score']:.1f}"
        )
        return results
