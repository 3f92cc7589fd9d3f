"""Unit tests for the command-line entry point."""
import io
import os
import tempfile
import unittest
from unittest import mock

import pandas as pd

import main


class TestMain(unittest.TestCase):
    """Test cases for training, saving and querying from the command line."""

    def run_main(self, argv):
        with mock.patch("main.setup_logging"), \
                mock.patch("sys.stdout", new_callable=io.StringIO) as out:
            code = main.main(argv)
        return code, out.getvalue()

    def test_train_save_and_query(self):
        state = "[2, 2, true, true, false, false, 1]"
        with tempfile.TemporaryDirectory() as tmp:
            model = os.path.join(tmp, "q_tables.json")
            code, output = self.run_main([
                "--episodes", "50", "--seed", "42", "--quiet",
                "--save-model", model, "--metrics-csv", "--output-dir", tmp,
                "--state", state,
            ])
            self.assertEqual(code, 0)
            self.assertTrue(os.path.exists(model))

            # Every queued step reached the collector before export
            df = pd.read_csv(os.path.join(tmp, "training_metrics.csv"))
            steps = int(output.split("Steps: ")[1].split(",")[0])
            self.assertEqual(len(df), steps)
            self.assertIn("Next best action:", output)
            trained_action = output.split("Next best action: ")[1].splitlines()[0]

            code, output = self.run_main(["--skip-training", "--load-model", model, "--state", state])
            self.assertEqual(code, 0)
            self.assertEqual(output.split("Next best action: ")[1].splitlines()[0], trained_action)

    def test_untrained_goal_fails(self):
        code, _ = self.run_main(["--skip-training", "--state", "[0, 0, false, false, false, false, 1]"])
        self.assertEqual(code, 1)


if __name__ == '__main__':
    unittest.main()
