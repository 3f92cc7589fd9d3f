# learning/q_learner.py
"""Q-learning trainer and per-goal policy service for the smart space."""
import logging
import numbers
import random
import threading
from dataclasses import dataclass
from typing import Optional, Sequence

from learning.action_translator import ActionTranslator, ActuatorCommand
from learning.errors import (
    ConfigurationError,
    EnvironmentInteractionError,
    QLearningError,
)
from learning.goal import Goal, parse_goal_description
from learning.policy import EpsilonGreedyPolicy
from learning.q_table import QTable
from learning.q_table_cache import QTableCache
from learning.reward_function import RewardFunction
from learning.telemetry import StepEvent, TelemetryObserver

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 100
DEFAULT_STEP_PENALTY = -1.0
DEFAULT_SNAPSHOT_INTERVAL = 100


def _to_number(name, value, kind):
    """Coerce a hyperparameter to int or float the way the dashboard text fields are parsed."""
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be numeric, got {value!r}")
    try:
        if kind is int:
            if isinstance(value, numbers.Real) and not float(value).is_integer():
                raise ValueError("not an integer")
            return int(str(value).strip()) if isinstance(value, str) else int(value)
        return float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be {'an integer' if kind is int else 'numeric'}, "
                                 f"got {value!r}") from None


@dataclass(frozen=True)
class TrainingParameters:
    """Validated hyperparameters of one training run."""
    episodes: int
    alpha: float
    gamma: float
    epsilon: float
    goal_reward: float
    step_penalty: float = DEFAULT_STEP_PENALTY
    max_steps: int = DEFAULT_MAX_STEPS

    @classmethod
    def from_values(cls, episodes, alpha, gamma, epsilon, goal_reward,
                    step_penalty=DEFAULT_STEP_PENALTY, max_steps=DEFAULT_MAX_STEPS) -> "TrainingParameters":
        """
        Coerce and validate raw hyperparameters.

        Raises:
            ConfigurationError: If a value is non-numeric or out of range
        """
        params = cls(
            episodes=_to_number("episodes", episodes, int),
            alpha=_to_number("alpha", alpha, float),
            gamma=_to_number("gamma", gamma, float),
            epsilon=_to_number("epsilon", epsilon, float),
            goal_reward=_to_number("goal_reward", goal_reward, float),
            step_penalty=_to_number("step_penalty", step_penalty, float),
            max_steps=_to_number("max_steps", max_steps, int),
        )

        for name in ("alpha", "gamma", "epsilon"):
            value = getattr(params, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name} must be in [0, 1], got {value}")
        if params.episodes < 0:
            raise ConfigurationError(f"episodes must be non-negative, got {params.episodes}")
        if params.max_steps < 1:
            raise ConfigurationError(f"max_steps must be at least 1, got {params.max_steps}")
        return params


class QLearner:
    """
    Learns Q-tables for goal configurations of a smart space.

    Training drives the environment through episodes of epsilon-greedy
    interaction and publishes the finished table into the cache. Runs for
    the same goal wait on the cache's training lock; runs for different
    goals on this learner share its environment and are serialized too.
    Inference looks a goal's table up and returns the actuator command of
    the best action for the current state.
    """

    def __init__(self, environment, cache: Optional[QTableCache] = None,
                 translator: Optional[ActionTranslator] = None,
                 reward_function: Optional[RewardFunction] = None,
                 policy: Optional[EpsilonGreedyPolicy] = None,
                 rng=None,
                 observer: Optional[TelemetryObserver] = None,
                 snapshot_interval: int = DEFAULT_SNAPSHOT_INTERVAL):
        """
        Initialize the learner.

        Args:
            environment: LearningEnvironment to learn
            cache: Store for trained tables (a new one if None)
            translator: Action index to actuator command table
            reward_function: Goal reward model
            policy: Action selection policy (epsilon-greedy over rng if None)
            rng: Random source for start-state perturbation and the default policy
            observer: Optional telemetry observer
            snapshot_interval: Steps between Q-table snapshots sent to the observer (0 disables)
        """
        self.environment = environment
        self.cache = cache if cache is not None else QTableCache()
        self.translator = translator if translator is not None else ActionTranslator()
        self.reward_function = reward_function if reward_function is not None else RewardFunction()
        self.rng = rng if rng is not None else random.Random()
        self.policy = policy if policy is not None else EpsilonGreedyPolicy(self.rng)
        self.observer = observer
        self.snapshot_interval = snapshot_interval
        # One training run drives the environment at a time
        self._run_lock = threading.Lock()

        try:
            self.state_count = int(self.environment.get_state_count())
            self.action_count = int(self.environment.get_action_count())
        except QLearningError:
            raise
        except Exception as e:
            raise EnvironmentInteractionError(f"Could not read environment dimensions: {e}") from e

        logger.info(f"Initialized with a state space of n={self.state_count}")
        logger.info(f"Initialized with an action space of m={self.action_count}")

        if not self.translator.covers(self.action_count):
            raise ConfigurationError(
                f"Action table has {self.translator.action_count} entries but the environment "
                f"has {self.action_count} actions"
            )

    # -- environment access ------------------------------------------------

    def _env_call(self, description, func, *args):
        try:
            return func(*args)
        except EnvironmentInteractionError:
            raise
        except Exception as e:
            raise EnvironmentInteractionError(f"Environment failed to {description}: {e}") from e

    def _perform_action(self, action: int):
        self._env_call(f"perform action {action}", self.environment.perform_action, action)

    def _read_state(self) -> int:
        state = self._env_call("read current state", self.environment.read_current_state)
        if isinstance(state, bool) or not isinstance(state, numbers.Integral) \
                or not 0 <= state < self.state_count:
            raise EnvironmentInteractionError(f"Environment returned invalid state index: {state!r}")
        return int(state)

    def _describe(self, state: int) -> tuple:
        return tuple(self._env_call(f"describe state {state}", self.environment.get_state_description, state))

    # -- telemetry ---------------------------------------------------------

    def _notify(self, hook, *args):
        if self.observer is None:
            return
        try:
            getattr(self.observer, hook)(*args)
        except Exception as e:
            logger.warning(f"Telemetry observer failed in {hook}: {e}")

    # -- training ----------------------------------------------------------

    def train(self, goal_description, episodes, alpha, gamma, epsilon, goal_reward,
              step_penalty=None, max_steps=None) -> QTable:
        """
        Compute a Q-table for a goal and publish it into the cache.

        Args:
            goal_description: Desired goal, e.g. [2, 3] for zone levels
            episodes: Number of training episodes
            alpha: Learning rate in [0, 1]
            gamma: Discount factor in [0, 1]
            epsilon: Exploration probability in [0, 1]
            goal_reward: Reward for reaching the goal state
            step_penalty: Reward for every other state (reward function default if None)
            max_steps: Step cap per episode (100 if None)

        Returns:
            QTable: The trained, frozen table

        Raises:
            ConfigurationError: Malformed goal or hyperparameters
            EnvironmentInteractionError: Environment failure; nothing is published
        """
        goal = parse_goal_description(goal_description)
        params = TrainingParameters.from_values(
            episodes, alpha, gamma, epsilon, goal_reward,
            step_penalty=self.reward_function.config["STEP_PENALTY"] if step_penalty is None else step_penalty,
            max_steps=DEFAULT_MAX_STEPS if max_steps is None else max_steps,
        )

        with self.cache.training_lock(goal), self._run_lock:
            logger.info(f"Training goal {goal}: episodes={params.episodes}, alpha={params.alpha}, "
                        f"gamma={params.gamma}, epsilon={params.epsilon}, reward={params.goal_reward}")
            q_table = self._run_episodes(goal, params)
            self.cache.put(goal, q_table)

        self._notify("on_training_finished", goal, q_table)
        return q_table

    def _run_episodes(self, goal: Goal, params: TrainingParameters) -> QTable:
        q_table = QTable(self.state_count, self.action_count)
        step = 0
        goals_reached = 0

        for episode in range(params.episodes):
            # No reset primitive: perturb the start state with one random action
            self._perform_action(self.rng.randrange(self.action_count))
            state = self._read_state()
            description = self._describe(state)

            for _ in range(params.max_steps):
                action = self.policy.select_action(q_table, state, params.epsilon)

                self._perform_action(action)
                next_state = self._read_state()
                next_description = self._describe(next_state)

                reward = self.reward_function.calculate_reward(
                    next_description, goal, params.goal_reward, params.step_penalty
                )
                reached = self.reward_function.is_goal_state(next_description, goal)

                q_table.update(state, action, reward, next_state, params.alpha, params.gamma)

                self._notify("on_step", StepEvent(step, episode, description, goal.values,
                                                  action, reward, reached))
                step += 1
                if self.snapshot_interval and step % self.snapshot_interval == 0:
                    self._notify("on_q_table", step, q_table)

                logger.debug(f"Transition to state: {next_state}")
                state, description = next_state, next_description

                if reached:
                    goals_reached += 1
                    logger.debug(f"Goal reached: {goal} in episode {episode}")
                    break

        logger.info(f"Finished training goal {goal}: {step} steps, "
                    f"goal reached in {goals_reached}/{params.episodes} episodes")
        return q_table

    # -- inference ---------------------------------------------------------

    def get_next_action(self, goal_description, current_state_description: Sequence) -> ActuatorCommand:
        """
        Best actuator command for the current state under a trained goal.

        Args:
            goal_description: Goal the table was trained for, e.g. [2, 3]
            current_state_description: Current state, e.g. [2, 2, True, False, True, True, 2]

        Returns:
            ActuatorCommand: Tag, payload tags and payload values to invoke

        Raises:
            PolicyNotTrainedError: If the goal was never trained
            InvalidActionError: If the best action has no actuator mapping
            EnvironmentInteractionError: If the description does not resolve to a state
        """
        goal = parse_goal_description(goal_description)
        q_table = self.cache.get(goal)

        state = self._env_call("resolve state description", self.environment.get_state_index,
                               list(current_state_description))
        if isinstance(state, bool) or not isinstance(state, numbers.Integral) \
                or not 0 <= state < q_table.state_count:
            raise EnvironmentInteractionError(f"Environment returned invalid state index: {state!r}")

        action = self.policy.greedy_action(q_table, int(state))
        command = self.translator.translate(action)
        logger.info(f"Next best action for goal {goal} in state {state}: {action} -> {command.tag}")
        return command
