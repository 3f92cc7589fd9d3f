# learning/metrics_collector.py
"""
Metrics collection for Q-learning training runs.
Records per-step telemetry and periodic Q-table snapshots.
"""
import os
import logging
from collections import Counter
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd

from learning.telemetry import StepEvent, TelemetryObserver

logger = logging.getLogger(__name__)

# Field names of the lab's state description, in order
STATE_DESCRIPTION_FIELDS = [
    "z1_level", "z2_level", "z1_light", "z2_light", "z1_blinds", "z2_blinds", "outdoor_light"
]


class TrainingMetricsCollector(TelemetryObserver):
    """
    Collects step events and Q-table snapshots during training.

    Provides the data the training dashboard plots: state against goal,
    actions taken, rewards received and device states per step.
    """

    def __init__(self, description_fields: List[str] = None):
        """
        Initialize metrics collector.

        Args:
            description_fields: Column names for the state description values
        """
        self.description_fields = description_fields or STATE_DESCRIPTION_FIELDS
        self.events: List[StepEvent] = []
        self.q_table_snapshots: List[Tuple[int, np.ndarray]] = []
        self.finished_goals = []

    def reset(self):
        """Reset all metrics to initial values."""
        self.__init__(self.description_fields)
        logger.info("Training metrics collector reset")

    def on_step(self, event: StepEvent):
        self.events.append(event)

    def on_q_table(self, step: int, q_table):
        self.q_table_snapshots.append((step, np.array(q_table.q, copy=True)))

    def on_training_finished(self, goal, q_table):
        self.finished_goals.append(goal)
        self.q_table_snapshots.append((len(self.events), np.array(q_table.q, copy=True)))

    @property
    def latest_q_values(self):
        """Most recent Q matrix snapshot, or None."""
        return self.q_table_snapshots[-1][1] if self.q_table_snapshots else None

    def to_dataframe(self) -> pd.DataFrame:
        """One row per recorded step."""
        rows = []
        for event in self.events:
            row = {
                "step": event.step,
                "episode": event.episode,
                "action": event.action,
                "reward": event.reward,
                "goal_reached": event.goal_reached,
            }
            for i, value in enumerate(event.state_description):
                name = self.description_fields[i] if i < len(self.description_fields) else f"attr_{i}"
                row[name] = value
            for i, value in enumerate(event.goal_description):
                row[f"goal_{i}"] = value
            rows.append(row)
        return pd.DataFrame(rows)

    def export_csv(self, filepath: str) -> bool:
        """
        Write the step history to CSV.

        Returns:
            bool: Success indicator
        """
        try:
            directory = os.path.dirname(filepath)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self.to_dataframe().to_csv(filepath, index=False)
            logger.info(f"Exported {len(self.events)} training steps to {filepath}")
            return True
        except OSError as e:
            logger.error(f"Error exporting training metrics to {filepath}: {e}")
            return False

    def get_summary(self) -> Dict[str, Any]:
        """Aggregate statistics over the recorded steps."""
        if not self.events:
            return {
                "steps": 0,
                "episodes": 0,
                "goal_hits": 0,
                "total_reward": 0.0,
                "mean_reward": 0.0,
                "action_distribution": {}
            }

        rewards = np.array([event.reward for event in self.events], dtype=float)
        actions = Counter(event.action for event in self.events)

        return {
            "steps": len(self.events),
            "episodes": len({event.episode for event in self.events}),
            "goal_hits": sum(1 for event in self.events if event.goal_reached),
            "total_reward": float(rewards.sum()),
            "mean_reward": float(rewards.mean()),
            "action_distribution": {
                action: count / len(self.events) for action, count in sorted(actions.items())
            }
        }
