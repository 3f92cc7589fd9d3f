"""Unit tests for timeouts and retries around environment calls."""
import time
import unittest

from learning.environment import GuardedEnvironment
from learning.errors import EnvironmentInteractionError
from Simulation.lab_environment import SimulatedLab


class FlakyLab(SimulatedLab):
    """Lab whose state reads fail a fixed number of times."""

    def __init__(self, failures):
        super().__init__()
        self.failures = failures

    def read_current_state(self):
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("lab unreachable")
        return super().read_current_state()


class SlowLab(SimulatedLab):
    def read_current_state(self):
        time.sleep(0.3)
        return super().read_current_state()


class SlowActuatorLab(SimulatedLab):
    """Lab whose first action outlasts the call timeout."""

    def __init__(self, delay):
        super().__init__()
        self.delay = delay
        self.calls = 0

    def perform_action(self, action_index):
        self.calls += 1
        if self.calls == 1:
            time.sleep(self.delay)
        super().perform_action(action_index)


class JammedActuatorLab(SimulatedLab):
    """Lab whose first action raises before it takes effect."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def perform_action(self, action_index):
        self.calls += 1
        if self.calls == 1:
            raise ConnectionError("actuator bus busy")
        super().perform_action(action_index)


class TestGuardedEnvironment(unittest.TestCase):
    """Test cases for GuardedEnvironment."""

    def test_passes_calls_through(self):
        env = GuardedEnvironment(SimulatedLab(), timeout=2.0)
        try:
            self.assertEqual(env.get_state_count(), 16)
            self.assertEqual(env.get_action_count(), 8)
            env.perform_action(0)
            state = env.read_current_state()
            self.assertEqual(env.get_state_description(state)[:2], (2, 0))
            self.assertEqual(env.get_state_index(env.get_state_description(state)), state)
        finally:
            env.close()

    def test_retries_transient_failures(self):
        env = GuardedEnvironment(FlakyLab(failures=2), timeout=2.0, retries=2)
        try:
            self.assertEqual(env.read_current_state(), 0)
        finally:
            env.close()

    def test_exhausted_retries(self):
        env = GuardedEnvironment(FlakyLab(failures=5), timeout=2.0, retries=1)
        try:
            with self.assertRaises(EnvironmentInteractionError):
                env.read_current_state()
        finally:
            env.close()

    def test_timeout(self):
        env = GuardedEnvironment(SlowLab(), timeout=0.05, retries=1)
        try:
            with self.assertRaises(EnvironmentInteractionError):
                env.read_current_state()
        finally:
            env.close()

    def test_timed_out_action_is_not_repeated(self):
        lab = SlowActuatorLab(delay=0.15)
        env = GuardedEnvironment(lab, timeout=0.1, retries=2)
        try:
            with self.assertRaises(EnvironmentInteractionError):
                env.perform_action(0)
            # Let the timed-out call finish on the worker
            time.sleep(0.3)
            self.assertEqual(lab.calls, 1)
            self.assertEqual(len(lab.history), 1)
        finally:
            env.close()

    def test_raising_action_is_retried(self):
        lab = JammedActuatorLab()
        env = GuardedEnvironment(lab, timeout=2.0, retries=2)
        try:
            env.perform_action(0)
            self.assertEqual(lab.calls, 2)
            self.assertEqual(len(lab.history), 1)
        finally:
            env.close()


if __name__ == '__main__':
    unittest.main()
