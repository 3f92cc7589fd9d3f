"""Unit tests for goals and the reward function."""
import unittest

from learning.errors import ConfigurationError
from learning.goal import Goal, parse_goal_description
from learning.reward_function import RewardFunction


class TestGoal(unittest.TestCase):
    """Test cases for Goal and goal parsing."""

    def test_parse_sequence_and_string(self):
        self.assertEqual(parse_goal_description([2, 3]), Goal((2, 3)))
        self.assertEqual(parse_goal_description("[2, 3]"), Goal((2, 3)))
        self.assertEqual(parse_goal_description(("2", 3.0)), Goal((2, 3)))

    def test_parse_returns_existing_goal(self):
        goal = Goal((1, 1))
        self.assertIs(parse_goal_description(goal), goal)

    def test_parse_rejects_malformed_descriptions(self):
        for bad in ("[2]", [1, 2, 3], "[a, 3]", [2.5, 3], [True, 3], "", None, 7):
            with self.subTest(goal=bad):
                with self.assertRaises(ConfigurationError):
                    parse_goal_description(bad)

    def test_key_is_value_based(self):
        """Equal values give equal keys; different goals never share one."""
        self.assertEqual(Goal([2, 3]).key, Goal((2, 3)).key)
        self.assertEqual(Goal((2, 3)).key, "0:2,1:3")
        self.assertNotEqual(Goal((2, 3)).key, Goal((3, 2)).key)
        self.assertNotEqual(Goal((1, 23)).key, Goal((12, 3)).key)
        self.assertNotEqual(Goal((2, 3)).key, Goal((2, 3), dimensions=(1, 0)).key)

    def test_empty_goal(self):
        with self.assertRaises(ConfigurationError):
            Goal((), ())
        with self.assertRaises(ConfigurationError):
            parse_goal_description([], dimensions=())

    def test_dimension_mismatch(self):
        with self.assertRaises(ConfigurationError):
            Goal((1, 2, 3))
        with self.assertRaises(ConfigurationError):
            Goal((1, 2), dimensions=(0, 0))


class TestRewardFunction(unittest.TestCase):
    """Test cases for RewardFunction."""

    def setUp(self):
        self.reward_fn = RewardFunction()
        self.goal = Goal((2, 3))

    def test_goal_state_requires_exact_match(self):
        self.assertTrue(self.reward_fn.is_goal_state((2, 3, True, True, False, True, 1), self.goal))
        self.assertFalse(self.reward_fn.is_goal_state((2, 2, True, True, False, True, 1), self.goal))
        self.assertFalse(self.reward_fn.is_goal_state((3, 3, True, True, True, True, 1), self.goal))

    def test_other_dimensions_are_ignored(self):
        """Only the goal dimensions decide; everything else may differ."""
        self.assertTrue(self.reward_fn.is_goal_state((2, 3, False, False, False, False, 0), self.goal))
        self.assertTrue(self.reward_fn.is_goal_state((2, 3), self.goal))
        self.assertFalse(self.reward_fn.is_goal_state((2, 4, True, True, False, True, 1), self.goal))

    def test_short_description_is_never_a_goal(self):
        self.assertFalse(self.reward_fn.is_goal_state((2,), self.goal))

    def test_reward_values(self):
        self.assertEqual(self.reward_fn.calculate_reward((2, 3, 0, 0, 0, 0, 1), self.goal, 10), 10.0)
        self.assertEqual(self.reward_fn.calculate_reward((1, 3, 0, 0, 0, 0, 1), self.goal, 10), -1.0)

    def test_configurable_defaults(self):
        reward_fn = RewardFunction({"GOAL_REWARD": 5, "STEP_PENALTY": -0.25})
        self.assertEqual(reward_fn.calculate_reward((2, 3), self.goal), 5.0)
        self.assertEqual(reward_fn.calculate_reward((0, 0), self.goal), -0.25)
        self.assertEqual(reward_fn.calculate_reward((0, 0), self.goal, step_penalty=-2), -2.0)


if __name__ == '__main__':
    unittest.main()
