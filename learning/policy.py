# learning/policy.py
"""Epsilon-greedy action selection over a Q-table."""
import logging
import random

logger = logging.getLogger(__name__)


class EpsilonGreedyPolicy:
    """
    Chooses between exploring a random action and exploiting the best known one.

    The random source is injectable so that tests and reproducible training
    runs can pin it. It must provide random() and randrange().
    """

    def __init__(self, rng=None):
        """
        Initialize the policy.

        Args:
            rng: Random source (defaults to a fresh random.Random)
        """
        self.rng = rng if rng is not None else random.Random()

    def select_action(self, q_table, state: int, epsilon: float) -> int:
        """
        Pick an action for a state.

        Args:
            q_table: QTable to exploit
            state: Current state index
            epsilon: Exploration probability in [0, 1]

        Returns:
            int: Selected action index
        """
        # Exploration: choose a random action
        if self.rng.random() < epsilon:
            action = self.rng.randrange(q_table.action_count)
            logger.debug(f"Exploring random action {action} in state {state} (epsilon={epsilon:.3f})")
            return action

        # Exploitation: choose action with highest Q-value
        return self.greedy_action(q_table, state)

    def greedy_action(self, q_table, state: int) -> int:
        """Best known action for a state, no exploration."""
        return q_table.best_action(state)
