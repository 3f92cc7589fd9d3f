"""Configuration settings for smart-space Q-learning."""
import os
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load overrides from a .env file next to the project root
ENV_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env")
if os.path.exists(ENV_PATH):
    load_dotenv(ENV_PATH)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = os.environ.get("QLEARNING_LOG_FILE", "qlearning.log")
LOG_LEVEL = os.environ.get("QLEARNING_LOG_LEVEL", "INFO")

# Training defaults (same as the dashboard's parameter panel)
DEFAULT_GOAL = os.environ.get("QLEARNING_GOAL", "[2, 3]")
DEFAULT_EPISODES = int(os.environ.get("QLEARNING_EPISODES", 1000))
DEFAULT_ALPHA = float(os.environ.get("QLEARNING_ALPHA", 0.5))
DEFAULT_GAMMA = float(os.environ.get("QLEARNING_GAMMA", 0.5))
DEFAULT_EPSILON = float(os.environ.get("QLEARNING_EPSILON", 0.1))
DEFAULT_GOAL_REWARD = float(os.environ.get("QLEARNING_GOAL_REWARD", 10))
DEFAULT_STEP_PENALTY = float(os.environ.get("QLEARNING_STEP_PENALTY", -1))
MAX_STEPS_PER_EPISODE = int(os.environ.get("QLEARNING_MAX_STEPS", 100))

# Environment call guarding
ENVIRONMENT_TIMEOUT = float(os.environ.get("QLEARNING_ENV_TIMEOUT", 5.0))  # seconds per call
ENVIRONMENT_RETRIES = int(os.environ.get("QLEARNING_ENV_RETRIES", 2))

# Telemetry
SNAPSHOT_INTERVAL = int(os.environ.get("QLEARNING_SNAPSHOT_INTERVAL", 100))  # steps between Q-table snapshots
TELEMETRY_QUEUE_SIZE = int(os.environ.get("QLEARNING_TELEMETRY_QUEUE_SIZE", 100000))  # events buffered for the metrics collector

# Simulated lab
OUTDOOR_LIGHT_LEVEL = int(os.environ.get("LAB_OUTDOOR_LIGHT_LEVEL", 1))
ACTION_FAILURE_PROBABILITY = float(os.environ.get("LAB_ACTION_FAILURE_PROBABILITY", 0.0))

# Directories
DATA_DIR = "data"
MODEL_DIR = os.path.join(DATA_DIR, "qlearning")
MODEL_FILE = os.path.join(MODEL_DIR, "q_tables.json")
ACTION_TABLE_FILE = os.environ.get("QLEARNING_ACTION_TABLE")  # optional JSON action table


def setup_logging(log_file=LOG_FILE, level=LOG_LEVEL):
    """Configure root logging with a file and a console handler."""
    handlers = [logging.StreamHandler()]
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )
