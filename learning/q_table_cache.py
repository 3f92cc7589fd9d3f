# learning/q_table_cache.py
"""
Store of trained Q-tables, one per goal.
"""
import os
import json
import logging
import threading
from contextlib import contextmanager
from typing import Dict, List

from learning.errors import PolicyNotTrainedError
from learning.goal import Goal, parse_goal_description
from learning.q_table import QTable

logger = logging.getLogger(__name__)

MODEL_FORMAT_VERSION = 1


class QTableCache:
    """
    Maps goals to their trained Q-tables.

    Entries are replaced wholesale; a goal never maps to more than one
    table. Inserts and lookups share one lock so readers never observe a
    half-published entry. Training runs take a per-goal lock so that two
    trainers for the same goal are serialized while different goals
    proceed independently.
    """

    def __init__(self):
        self._tables: Dict[str, QTable] = {}
        self._goals: Dict[str, Goal] = {}
        self._lock = threading.Lock()
        self._training_locks: Dict[str, threading.Lock] = {}

    def put(self, goal: Goal, q_table: QTable):
        """Publish a trained table for a goal, replacing any previous one."""
        q_table.freeze()
        with self._lock:
            replaced = goal.key in self._tables
            self._tables[goal.key] = q_table
            self._goals[goal.key] = goal
        logger.info(f"{'Replaced' if replaced else 'Stored'} Q-table for goal {goal} "
                    f"({q_table.state_count} states, {q_table.action_count} actions)")

    def get(self, goal: Goal) -> QTable:
        """
        Trained table for a goal.

        Raises:
            PolicyNotTrainedError: If the goal was never trained
        """
        with self._lock:
            q_table = self._tables.get(goal.key)
        if q_table is None:
            raise PolicyNotTrainedError(goal.key)
        return q_table

    def contains(self, goal: Goal) -> bool:
        with self._lock:
            return goal.key in self._tables

    def remove(self, goal: Goal) -> bool:
        """Drop the table for a goal. Returns False if there was none."""
        with self._lock:
            self._goals.pop(goal.key, None)
            return self._tables.pop(goal.key, None) is not None

    def goals(self) -> List[Goal]:
        with self._lock:
            return list(self._goals.values())

    def __len__(self):
        with self._lock:
            return len(self._tables)

    @contextmanager
    def training_lock(self, goal: Goal):
        """Hold the exclusive training slot for a goal."""
        with self._lock:
            lock = self._training_locks.setdefault(goal.key, threading.Lock())
        with lock:
            yield

    def save(self, filepath: str) -> bool:
        """
        Save all Q-tables to a JSON file.

        Args:
            filepath: Path where the Q-tables will be saved

        Returns:
            bool: Success indicator
        """
        with self._lock:
            payload = {
                "version": MODEL_FORMAT_VERSION,
                "tables": {
                    key: {
                        "goal": list(self._goals[key].values),
                        "dimensions": list(self._goals[key].dimensions),
                        "values": q_table.to_list()
                    }
                    for key, q_table in self._tables.items()
                }
            }

        try:
            directory = os.path.dirname(filepath)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(filepath, 'w') as f:
                json.dump(payload, f, indent=2)

            logger.info(f"Q-tables saved to {filepath}: {len(payload['tables'])} goals")
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Error saving Q-tables to {filepath}: {e}")
            return False

    def load(self, filepath: str) -> bool:
        """
        Load Q-tables from a JSON file, replacing entries for the goals it contains.

        Args:
            filepath: Path to the JSON file containing Q-tables

        Returns:
            bool: Success indicator
        """
        if not os.path.exists(filepath):
            logger.info(f"Q-tables file not found at {filepath}. Starting with empty cache.")
            return False

        try:
            with open(filepath, 'r') as f:
                payload = json.load(f)

            loaded = []
            for entry in payload.get("tables", {}).values():
                goal = parse_goal_description(entry["goal"], entry["dimensions"])
                loaded.append((goal, QTable.from_list(entry["values"]).freeze()))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error loading Q-tables from {filepath}: {e}")
            return False

        with self._lock:
            for goal, q_table in loaded:
                self._tables[goal.key] = q_table
                self._goals[goal.key] = goal

        logger.info(f"Loaded Q-tables from {filepath}: {len(loaded)} goals")
        return True
