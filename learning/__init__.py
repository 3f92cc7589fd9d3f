"""
Tabular Q-learning engine for smart-space actuator control.
Trains one Q-table per goal configuration and turns learned actions into actuator commands.
"""

from learning.errors import (
    QLearningError,
    ConfigurationError,
    EnvironmentInteractionError,
    PolicyNotTrainedError,
    InvalidActionError
)
from learning.q_table import QTable
from learning.policy import EpsilonGreedyPolicy
from learning.goal import Goal, parse_goal_description
from learning.reward_function import RewardFunction
from learning.action_translator import ActionTranslator, ActuatorCommand, DEFAULT_ACTION_TABLE
from learning.q_table_cache import QTableCache
from learning.environment import LearningEnvironment, GuardedEnvironment
from learning.telemetry import StepEvent, TelemetryObserver, QueuedTelemetryObserver
from learning.metrics_collector import TrainingMetricsCollector
from learning.q_learner import QLearner, TrainingParameters

__version__ = '1.0.0'
__all__ = [
    'QLearningError',
    'ConfigurationError',
    'EnvironmentInteractionError',
    'PolicyNotTrainedError',
    'InvalidActionError',
    'QTable',
    'EpsilonGreedyPolicy',
    'Goal',
    'parse_goal_description',
    'RewardFunction',
    'ActionTranslator',
    'ActuatorCommand',
    'DEFAULT_ACTION_TABLE',
    'QTableCache',
    'LearningEnvironment',
    'GuardedEnvironment',
    'StepEvent',
    'TelemetryObserver',
    'QueuedTelemetryObserver',
    'TrainingMetricsCollector',
    'QLearner',
    'TrainingParameters'
]
