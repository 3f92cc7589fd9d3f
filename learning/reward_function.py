# learning/reward_function.py
"""
Reward function for goal-directed Q-learning.
Rewards reaching the goal configuration and penalizes every other step.
"""
import logging
from typing import Dict, Any, Optional, Sequence

logger = logging.getLogger(__name__)


class RewardFunction:
    """
    Calculates reward signals for the Q-learner.

    A state is a goal state when every goal dimension of its description
    equals the goal value exactly. Goal states earn the goal reward, all
    other states the step penalty.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize reward function with configuration parameters.

        Args:
            config: Dictionary of configuration parameters
        """
        # Set default reward parameters
        self.config = {
            "GOAL_REWARD": 10.0,
            "STEP_PENALTY": -1.0,
        }

        # Override defaults with provided config
        if config:
            for key, value in config.items():
                self.config[key] = value

        logger.info(f"Initialized reward function: goal reward={self.config['GOAL_REWARD']}, "
                    f"step penalty={self.config['STEP_PENALTY']}")

    def is_goal_state(self, description: Sequence, goal) -> bool:
        """
        Check whether a state description satisfies a goal.

        Args:
            description: State description values
            goal: Goal to check against

        Returns:
            bool: True if all goal dimensions match exactly
        """
        is_goal = goal.matches(description)
        if is_goal:
            logger.debug(f"State {list(description)} matches goal state: {goal}")
        return is_goal

    def calculate_reward(self, description: Sequence, goal,
                         goal_reward: Optional[float] = None,
                         step_penalty: Optional[float] = None) -> float:
        """
        Calculate the reward for arriving in a state.

        Args:
            description: Description of the state that was reached
            goal: Goal being learned
            goal_reward: Reward for reaching the goal (config default if None)
            step_penalty: Reward for any other state (config default if None)

        Returns:
            float: Reward value
        """
        if goal_reward is None:
            goal_reward = self.config["GOAL_REWARD"]
        if step_penalty is None:
            step_penalty = self.config["STEP_PENALTY"]

        if self.is_goal_state(description, goal):
            return float(goal_reward)
        return float(step_penalty)
