# learning/telemetry.py
"""
Observer hooks for training telemetry.
Observers are passive: they receive events but never influence learning.
"""
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepEvent:
    """One training step as seen by an observer."""
    step: int
    episode: int
    state_description: Tuple[Any, ...]
    goal_description: Tuple[Any, ...]
    action: int
    reward: float
    goal_reached: bool = False


class TelemetryObserver:
    """Base observer; override the hooks you need."""

    def on_step(self, event: StepEvent):
        pass

    def on_q_table(self, step: int, q_table):
        pass

    def on_training_finished(self, goal, q_table):
        pass


class QueuedTelemetryObserver(TelemetryObserver):
    """
    Forwards events to another observer from a background thread.

    Emission only enqueues, so a slow observer never stalls training.
    Q-table snapshots are copied before they are queued.
    """

    def __init__(self, observer: TelemetryObserver, max_queue_size: int = 10000):
        self.observer = observer
        self._queue = queue.Queue(maxsize=max_queue_size)
        self.dropped_events = 0
        self._thread = threading.Thread(target=self._dispatch_loop, daemon=True)
        self._thread.start()

    def _enqueue(self, item):
        try:
            self._queue.put_nowait(item)
        except queue.Full:
            self.dropped_events += 1
            if self.dropped_events % 1000 == 1:
                logger.warning(f"Telemetry queue full, dropped {self.dropped_events} events")

    def on_step(self, event: StepEvent):
        self._enqueue(("on_step", (event,)))

    def on_q_table(self, step: int, q_table):
        self._enqueue(("on_q_table", (step, q_table.copy())))

    def on_training_finished(self, goal, q_table):
        self._enqueue(("on_training_finished", (goal, q_table)))

    def _dispatch_loop(self):
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                name, args = item
                getattr(self.observer, name)(*args)
            except Exception as e:
                logger.error(f"Error in telemetry observer: {e}")
            finally:
                self._queue.task_done()

    def flush(self):
        """Block until every queued event has been delivered."""
        self._queue.join()

    def close(self):
        """Deliver pending events and stop the dispatch thread."""
        self._queue.put(None)
        self._thread.join()
