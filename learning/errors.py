# learning/errors.py
"""Exceptions raised by the Q-learning engine."""


class QLearningError(Exception):
    """Base class for all Q-learning failures."""


class ConfigurationError(QLearningError, ValueError):
    """Malformed goal description or out-of-range hyperparameters."""


class EnvironmentInteractionError(QLearningError):
    """An environment call failed or returned an invalid state index."""


class PolicyNotTrainedError(QLearningError, LookupError):
    """Inference was requested for a goal that has no trained Q-table."""

    def __init__(self, goal_key):
        super().__init__(f"Q-Table for goal state not found: {goal_key}")
        self.goal_key = goal_key


class InvalidActionError(QLearningError, IndexError):
    """Action index outside the actuator mapping."""

    def __init__(self, action_index, action_count=None):
        message = f"Invalid action index: {action_index}"
        if action_count is not None:
            message += f" (expected 0..{action_count - 1})"
        super().__init__(message)
        self.action_index = action_index
