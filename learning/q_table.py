# learning/q_table.py
"""
Tabular state-action value store.
Holds the Q matrix for a single goal and applies the Q-learning update.
"""
import logging
from typing import List, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class QTable:
    """
    State x action matrix of Q-values.

    The table is created filled with zeros and is mutated only by the
    training run that owns it. Once published it is frozen: the
    underlying array becomes read-only and further updates are rejected.
    """

    def __init__(self, state_count: int, action_count: int, values: Optional[np.ndarray] = None):
        """
        Initialize a Q matrix.

        Args:
            state_count: Number of discrete states
            action_count: Number of discrete actions
            values: Optional initial matrix of shape (state_count, action_count)
        """
        if state_count <= 0 or action_count <= 0:
            raise ValueError(f"Q-table dimensions must be positive, got {state_count}x{action_count}")

        if values is None:
            self.q = np.zeros((state_count, action_count), dtype=float)
        else:
            self.q = np.array(values, dtype=float)
            if self.q.shape != (state_count, action_count):
                raise ValueError(f"Q-table values have shape {self.q.shape}, "
                                 f"expected {(state_count, action_count)}")

        self.state_count = state_count
        self.action_count = action_count

    @property
    def frozen(self) -> bool:
        """Whether the table has been published and is read-only."""
        return not self.q.flags.writeable

    def freeze(self) -> "QTable":
        """Make the table read-only."""
        self.q.flags.writeable = False
        return self

    def value(self, state: int, action: int) -> float:
        """Q-value of a state-action pair."""
        return float(self.q[state, action])

    def best_action(self, state: int) -> int:
        """
        Action with the highest Q-value in a state.

        Ties go to the lowest action index.
        """
        return int(np.argmax(self.q[state]))

    def best_value(self, state: int) -> float:
        """Maximum Q-value over all actions in a state."""
        return float(np.max(self.q[state]))

    def update(self, state: int, action: int, reward: float, next_state: int,
               alpha: float, gamma: float) -> float:
        """
        Apply one Q-learning update.

        Q(s,a) <- Q(s,a) + alpha * (reward + gamma * max_a' Q(s',a') - Q(s,a))

        Args:
            state: State the action was taken in
            action: Action taken
            reward: Immediate reward received
            next_state: Resulting state
            alpha: Learning rate
            gamma: Discount factor

        Returns:
            float: The new Q-value
        """
        if self.frozen:
            raise RuntimeError("Cannot update a frozen Q-table")

        old_value = self.q[state, action]
        target = reward + gamma * self.best_value(next_state)
        new_value = old_value + alpha * (target - old_value)
        self.q[state, action] = new_value
        return float(new_value)

    def copy(self) -> "QTable":
        """Writable copy of this table."""
        return QTable(self.state_count, self.action_count, self.q.copy())

    def to_list(self) -> List[List[float]]:
        """Nested list representation for JSON serialization."""
        return self.q.tolist()

    @classmethod
    def from_list(cls, values: List[List[float]]) -> "QTable":
        """Create a table from a nested list of Q-values."""
        array = np.array(values, dtype=float)
        if array.ndim != 2:
            raise ValueError(f"Q-table values must be two-dimensional, got {array.ndim} dimensions")
        return cls(array.shape[0], array.shape[1], array)

    def to_dataframe(self) -> pd.DataFrame:
        """Q matrix as a DataFrame with one column per action."""
        return pd.DataFrame(
            self.q,
            columns=[f"Action {a}" for a in range(self.action_count)],
            index=pd.RangeIndex(self.state_count, name="state")
        )

    def format(self) -> str:
        """Render the Q matrix one state per line."""
        lines = ["Q matrix"]
        for state in range(self.state_count):
            row = " ".join(f"{value:6.2f}" for value in self.q[state])
            lines.append(f"From state {state}:  {row}")
        return "\n".join(lines)

    def __repr__(self):
        return f"QTable({self.state_count}x{self.action_count}, frozen={self.frozen})"
