# learning/environment.py
"""
Environment contract consumed by the Q-learner.
"""
import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Sequence, Tuple

from learning.errors import EnvironmentInteractionError

logger = logging.getLogger(__name__)


class LearningEnvironment(ABC):
    """
    A discrete environment that can be learned by interaction.

    State and action counts are fixed once the environment is initialized.
    """

    @abstractmethod
    def get_state_count(self) -> int:
        """Number of discrete states."""

    @abstractmethod
    def get_action_count(self) -> int:
        """Number of discrete actions."""

    @abstractmethod
    def perform_action(self, action_index: int):
        """Apply an action. Fails if the index is out of range."""

    @abstractmethod
    def read_current_state(self) -> int:
        """Index of the current state."""

    @abstractmethod
    def get_state_description(self, state_index: int) -> Tuple:
        """Ordered attribute values of a state."""

    @abstractmethod
    def get_state_index(self, description: Sequence) -> int:
        """Index of the state with the given description. Fails if none matches."""


class GuardedEnvironment(LearningEnvironment):
    """
    Wraps an environment so every call has a timeout and bounded retries.

    Calls run on a single worker thread so that they stay strictly
    sequential. A call that times out or raises is retried up to
    `retries` more times; when retries are exhausted an
    EnvironmentInteractionError is raised.

    A running call cannot be cancelled, so a timed-out action may still
    take effect. Actions are therefore never retried after a timeout,
    only after they raised.
    """

    def __init__(self, environment: LearningEnvironment, timeout: float = 5.0, retries: int = 2):
        """
        Args:
            environment: Environment to guard
            timeout: Seconds to wait for each call
            retries: Extra attempts after the first failure
        """
        self.environment = environment
        self.timeout = timeout
        self.retries = max(0, retries)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="environment")
        self._lock = threading.Lock()

    def _call(self, name, *args, retry_on_timeout=True):
        method = getattr(self.environment, name)
        last_error = None

        with self._lock:
            for attempt in range(1, self.retries + 2):
                future = self._executor.submit(method, *args)
                try:
                    return future.result(timeout=self.timeout)
                except FutureTimeoutError:
                    future.cancel()
                    last_error = TimeoutError(f"{name} timed out after {self.timeout}s")
                    if not retry_on_timeout:
                        logger.warning(f"Environment call {name}{args} timed out, not retrying")
                        break
                except Exception as e:
                    last_error = e
                logger.warning(f"Environment call {name}{args} failed (attempt {attempt}/{self.retries + 1}): "
                               f"{last_error}")

        raise EnvironmentInteractionError(
            f"Environment call {name} failed after {attempt} attempts: {last_error}"
        ) from last_error

    def get_state_count(self) -> int:
        return self._call("get_state_count")

    def get_action_count(self) -> int:
        return self._call("get_action_count")

    def perform_action(self, action_index: int):
        return self._call("perform_action", action_index, retry_on_timeout=False)

    def read_current_state(self) -> int:
        return self._call("read_current_state")

    def get_state_description(self, state_index: int) -> Tuple:
        return self._call("get_state_description", state_index)

    def get_state_index(self, description: Sequence) -> int:
        return self._call("get_state_index", description)

    def close(self):
        """Shut down the worker thread."""
        self._executor.shutdown(wait=False)
