# learning/action_translator.py
"""Maps learned action indices to actuator commands."""
import json
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from learning.errors import ConfigurationError, InvalidActionError

logger = logging.getLogger(__name__)

ACTION_TAG_PREFIX = "http://example.org/was#"

# Binary actuators in action order; action index = actuator * 2 + (0 for on/open, 1 for off/closed)
ACTUATORS = ["Z1Light", "Z2Light", "Z1Blinds", "Z2Blinds"]


class ActuatorCommand(NamedTuple):
    """Semantic command an external agent can invoke on the smart space."""
    tag: str
    payload_tags: Tuple[str, ...]
    payload_values: Tuple[Any, ...]


def build_binary_action_table(actuators: List[str], prefix: str = ACTION_TAG_PREFIX) -> List[ActuatorCommand]:
    """Two commands (true, false) per binary actuator."""
    table = []
    for actuator in actuators:
        for value in (True, False):
            table.append(ActuatorCommand(f"{prefix}Set{actuator}", (actuator,), (value,)))
    return table


DEFAULT_ACTION_TABLE = build_binary_action_table(ACTUATORS)


class ActionTranslator:
    """Static lookup table from action index to ActuatorCommand."""

    def __init__(self, table: Optional[List[ActuatorCommand]] = None):
        """
        Initialize the translator.

        Args:
            table: Commands indexed by action id (defaults to the two-zone lab table)
        """
        self.table = list(table) if table is not None else list(DEFAULT_ACTION_TABLE)
        logger.info(f"Initialized action translator with {len(self.table)} actions")

    @property
    def action_count(self) -> int:
        return len(self.table)

    def covers(self, action_count: int) -> bool:
        """True if every action 0..action_count-1 has a command."""
        return action_count == len(self.table)

    def translate(self, action_index: int) -> ActuatorCommand:
        """
        Look up the command for an action.

        Raises:
            InvalidActionError: If the index is outside the table
        """
        if isinstance(action_index, bool) or not 0 <= action_index < len(self.table):
            raise InvalidActionError(action_index, len(self.table))
        return self.table[action_index]

    @classmethod
    def from_config(cls, entries: List[Dict[str, Any]]) -> "ActionTranslator":
        """
        Build a translator from a list of {"tag", "payload_tags", "payload_values"} dicts.

        Entries may carry an explicit "index"; the table must then be dense from 0.
        """
        commands = {}
        for position, entry in enumerate(entries):
            try:
                index = int(entry.get("index", position))
                command = ActuatorCommand(
                    str(entry["tag"]),
                    tuple(entry["payload_tags"]),
                    tuple(entry["payload_values"])
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(f"Malformed action table entry {entry!r}: {e}") from e
            if index in commands:
                raise ConfigurationError(f"Duplicate action index {index} in action table")
            commands[index] = command

        if sorted(commands) != list(range(len(commands))):
            raise ConfigurationError(f"Action table indices must be 0..{len(commands) - 1}, "
                                     f"got {sorted(commands)}")
        return cls([commands[i] for i in range(len(commands))])

    @classmethod
    def from_json(cls, filepath: str) -> "ActionTranslator":
        """Load a declarative action table from a JSON file."""
        try:
            with open(filepath, 'r') as f:
                entries = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Error loading action table from {filepath}: {e}") from e

        if isinstance(entries, dict):
            entries = entries.get("actions", [])
        translator = cls.from_config(entries)
        logger.info(f"Loaded action table from {filepath}: {translator.action_count} actions")
        return translator
