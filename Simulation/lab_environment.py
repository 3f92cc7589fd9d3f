# Simulation/lab_environment.py
"""
Simulated two-zone lab for training the Q-learner.
Models zone light levels from light switches, blinds and outdoor light.
"""
import itertools
import logging
import random
from collections import deque
from typing import Dict, Any, List, Optional, Sequence, Tuple

from learning.action_translator import ACTUATORS
from learning.environment import LearningEnvironment

logger = logging.getLogger(__name__)

# Description attribute fed by each actuator
ACTUATOR_ATTRIBUTES = {
    "Z1Light": "z1_light",
    "Z2Light": "z2_light",
    "Z1Blinds": "z1_blinds",
    "Z2Blinds": "z2_blinds",
}


class SimulatedLab(LearningEnvironment):
    """
    Discrete lab model with two zones.

    Each zone has a light switch and blinds. A zone's light level is the
    light contribution when the light is on plus the outdoor light level
    when the blinds are open, capped at the maximum level. Every
    combination of actuator settings is one state, so the default lab has
    16 states and 8 actions (switch each actuator on or off).

    State descriptions are ordered as
    (z1_level, z2_level, z1_light, z2_light, z1_blinds, z2_blinds, outdoor_light).
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, rng=None):
        """
        Initialize the simulated lab with configuration parameters.

        Args:
            config: Dictionary of configuration parameters
            rng: Random source for stochastic actuation
        """
        # Set default parameters
        self.config = {
            "OUTDOOR_LIGHT_LEVEL": 1,
            "LIGHT_CONTRIBUTION": 2,
            "MAX_LIGHT_LEVEL": 3,
            # Probability that an actuator ignores a command
            "ACTION_FAILURE_PROBABILITY": 0.0,
            # Most recent (action, state) pairs kept in history
            "HISTORY_LENGTH": 1000,
            "INITIAL_ACTUATORS": {
                "z1_light": False,
                "z2_light": False,
                "z1_blinds": False,
                "z2_blinds": False
            }
        }

        # Override defaults with provided config
        if config:
            for key, value in config.items():
                if isinstance(value, dict) and key in self.config and isinstance(self.config[key], dict):
                    # Merge nested dictionaries
                    self.config[key].update(value)
                else:
                    self.config[key] = value

        self.rng = rng if rng is not None else random.Random()
        self.actuators = list(ACTUATORS)

        # Enumerate every actuator combination once; index order is fixed for the lab's lifetime
        self._descriptions: List[Tuple] = []
        self._index_by_description: Dict[Tuple, int] = {}
        for z1_light, z2_light, z1_blinds, z2_blinds in itertools.product((False, True), repeat=4):
            description = self._describe(z1_light, z2_light, z1_blinds, z2_blinds)
            self._index_by_description[description] = len(self._descriptions)
            self._descriptions.append(description)

        self.history = deque(maxlen=self.config["HISTORY_LENGTH"])
        self.reset()

        logger.info(f"Initialized SimulatedLab with {len(self._descriptions)} states and "
                    f"{self.get_action_count()} actions (outdoor light level "
                    f"{self.config['OUTDOOR_LIGHT_LEVEL']})")

    def _zone_level(self, light_on: bool, blinds_open: bool) -> int:
        level = 0
        if light_on:
            level += self.config["LIGHT_CONTRIBUTION"]
        if blinds_open:
            level += self.config["OUTDOOR_LIGHT_LEVEL"]
        return min(level, self.config["MAX_LIGHT_LEVEL"])

    def _describe(self, z1_light, z2_light, z1_blinds, z2_blinds) -> Tuple:
        return (
            self._zone_level(z1_light, z1_blinds),
            self._zone_level(z2_light, z2_blinds),
            z1_light,
            z2_light,
            z1_blinds,
            z2_blinds,
            self.config["OUTDOOR_LIGHT_LEVEL"]
        )

    def reset(self) -> Tuple:
        """
        Restore the initial actuator settings.

        Returns:
            tuple: Current state description after reset
        """
        self.state = {attr: bool(self.config["INITIAL_ACTUATORS"].get(attr, False))
                      for attr in ACTUATOR_ATTRIBUTES.values()}
        self.history.clear()
        return self.get_current_description()

    def get_current_description(self) -> Tuple:
        return self._describe(self.state["z1_light"], self.state["z2_light"],
                              self.state["z1_blinds"], self.state["z2_blinds"])

    def get_state_count(self) -> int:
        return len(self._descriptions)

    def get_action_count(self) -> int:
        return len(self.actuators) * 2

    def perform_action(self, action_index: int):
        """
        Switch one actuator.

        Action 2*i sets actuator i on (open), action 2*i+1 sets it off (closed).

        Raises:
            ValueError: If the index is out of range
        """
        if isinstance(action_index, bool) or not 0 <= action_index < self.get_action_count():
            raise ValueError(f"Invalid action index: {action_index}")

        actuator = self.actuators[action_index // 2]
        value = action_index % 2 == 0
        attribute = ACTUATOR_ATTRIBUTES[actuator]

        failure_probability = self.config["ACTION_FAILURE_PROBABILITY"]
        if failure_probability and self.rng.random() < failure_probability:
            logger.debug(f"Actuator {actuator} ignored command {value}")
        else:
            self.state[attribute] = value

        self.history.append((action_index, self._index_by_description[self.get_current_description()]))

    def read_current_state(self) -> int:
        return self._index_by_description[self.get_current_description()]

    def get_state_description(self, state_index: int) -> Tuple:
        if isinstance(state_index, bool) or not 0 <= state_index < len(self._descriptions):
            raise ValueError(f"Invalid state index: {state_index}")
        return self._descriptions[state_index]

    def get_state_index(self, description: Sequence) -> int:
        """
        Resolve a full state description to its index.

        Raises:
            ValueError: If no state matches the description
        """
        key = tuple(description)
        if key not in self._index_by_description:
            raise ValueError(f"No state matches description {list(description)}")
        return self._index_by_description[key]
