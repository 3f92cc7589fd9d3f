"""Main entry point for training and querying smart-space Q-learning policies."""
# main.py
import os
import sys
import random
import logging
import argparse
from datetime import datetime

import matplotlib.pyplot as plt
import seaborn as sns

from config.settings import (
    DEFAULT_GOAL, DEFAULT_EPISODES, DEFAULT_ALPHA, DEFAULT_GAMMA, DEFAULT_EPSILON,
    DEFAULT_GOAL_REWARD, DEFAULT_STEP_PENALTY, MAX_STEPS_PER_EPISODE,
    ENVIRONMENT_TIMEOUT, ENVIRONMENT_RETRIES, SNAPSHOT_INTERVAL, TELEMETRY_QUEUE_SIZE,
    OUTDOOR_LIGHT_LEVEL, ACTION_FAILURE_PROBABILITY,
    MODEL_FILE, ACTION_TABLE_FILE, LOG_FILE, setup_logging
)
from learning import (
    ActionTranslator,
    GuardedEnvironment,
    QLearner,
    QLearningError,
    QTableCache,
    QueuedTelemetryObserver,
    RewardFunction,
    TrainingMetricsCollector,
    parse_goal_description,
)
from Simulation.lab_environment import SimulatedLab

logger = logging.getLogger(__name__)


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Train and query Q-learning policies for the lab")

    # Q-learning parameters
    parser.add_argument('--goal', type=str, default=DEFAULT_GOAL,
                        help='Goal description, e.g. "[2, 3]" for zone 1 and zone 2 light levels')
    parser.add_argument('--episodes', type=int, default=DEFAULT_EPISODES,
                        help='Number of training episodes')
    parser.add_argument('--alpha', type=float, default=DEFAULT_ALPHA,
                        help='Learning rate (0.0-1.0)')
    parser.add_argument('--gamma', type=float, default=DEFAULT_GAMMA,
                        help='Discount factor (0.0-1.0)')
    parser.add_argument('--epsilon', type=float, default=DEFAULT_EPSILON,
                        help='Exploration probability (0.0-1.0)')
    parser.add_argument('--reward', type=float, default=DEFAULT_GOAL_REWARD,
                        help='Reward for reaching the goal state')
    parser.add_argument('--step-penalty', type=float, default=DEFAULT_STEP_PENALTY,
                        help='Reward for every non-goal state')
    parser.add_argument('--max-steps', type=int, default=MAX_STEPS_PER_EPISODE,
                        help='Maximum steps per episode')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducible training')

    # Inference
    parser.add_argument('--state', type=str, default=None,
                        help='Current state description to query, e.g. "[2, 2, true, false, false, true, 1]"')
    parser.add_argument('--skip-training', action='store_true',
                        help='Only query tables loaded with --load-model')

    # Model loading/saving
    parser.add_argument('--load-model', type=str, default=None,
                        help='Path to load trained Q-tables')
    parser.add_argument('--save-model', type=str, default=None,
                        help=f'Path to save trained Q-tables (e.g. {MODEL_FILE})')
    parser.add_argument('--action-table', type=str, default=ACTION_TABLE_FILE,
                        help='JSON file with the action to actuator command table')

    # Output
    parser.add_argument('--output-dir', type=str, default='qlearning_output',
                        help='Directory for plots and metrics')
    parser.add_argument('--metrics-csv', action='store_true',
                        help='Export per-step training metrics as CSV')
    parser.add_argument('--plot', action='store_true',
                        help='Generate plots of the training run')
    parser.add_argument('--no-display', action='store_true',
                        help='Do not display plots (save only)')
    parser.add_argument('--quiet', action='store_true',
                        help='Do not print the Q matrix')

    return parser.parse_args(argv)


def parse_state_description(text):
    """Parse "[2, 2, true, false, ...]" into typed values."""
    values = []
    for part in text.strip().strip("[]").split(","):
        part = part.strip()
        if part.lower() in ("true", "false"):
            values.append(part.lower() == "true")
        else:
            values.append(int(part))
    return values


def plot_training_run(metrics, goal, output_dir, show=True):
    """Plot state, action, reward and device charts plus the final Q-table heatmap."""
    df = metrics.to_dataframe()
    if df.empty:
        logger.warning("No training steps recorded, nothing to plot")
        return None

    fig, axes = plt.subplots(3, 2, figsize=(15, 14))

    # State transition against goal
    ax = axes[0, 0]
    ax.plot(df['step'], df['z1_level'], label='Current State (Z1 Level)')
    ax.plot(df['step'], df['goal_0'], label='Goal State', linestyle='--')
    ax.set_title('State Transition')
    ax.set_xlabel('Step')
    ax.set_ylabel('State')
    ax.legend()

    # Action taken
    ax = axes[0, 1]
    ax.plot(df['step'], df['action'], marker='.', linestyle='none')
    ax.set_title('Action Taken')
    ax.set_xlabel('Step')
    ax.set_ylabel('Action')

    # Reward received
    ax = axes[1, 0]
    ax.plot(df['step'], df['reward'])
    ax.set_title('Reward Received')
    ax.set_xlabel('Step')
    ax.set_ylabel('Reward')

    # Device states
    ax = axes[1, 1]
    for column, label in [('z1_level', 'Z1 Level'), ('z2_level', 'Z2 Level'),
                          ('z1_blinds', 'Z1 Blinds'), ('z2_blinds', 'Z2 Blinds'),
                          ('z1_light', 'Z1 Light'), ('z2_light', 'Z2 Light'),
                          ('outdoor_light', 'Outdoor Light')]:
        if column in df:
            ax.plot(df['step'], df[column].astype(float), label=label)
    ax.set_title('Device States')
    ax.set_xlabel('Step')
    ax.set_ylabel('Value')
    ax.legend(fontsize='small')

    # Q-table heatmap
    gs = axes[2, 0].get_gridspec()
    axes[2, 0].remove()
    axes[2, 1].remove()
    ax = fig.add_subplot(gs[2, :])
    if metrics.latest_q_values is not None:
        sns.heatmap(metrics.latest_q_values, annot=True, fmt='.2f', cmap='RdYlGn', ax=ax, cbar=True)
    ax.set_title('Q-Table')
    ax.set_xlabel('Action')
    ax.set_ylabel('State')

    plt.tight_layout()
    os.makedirs(output_dir, exist_ok=True)
    plot_path = os.path.join(output_dir, f"training_{goal.key.replace(':', '-').replace(',', '_')}.png")
    plt.savefig(plot_path)
    logger.info(f"Saved training plot to {plot_path}")

    if show:
        plt.show()
    plt.close(fig)
    return plot_path


def main(argv=None):
    """Train a policy for a goal and optionally query the next action."""
    args = parse_arguments(argv)
    setup_logging(LOG_FILE)

    rng = random.Random(args.seed)
    lab = SimulatedLab(
        config={
            "OUTDOOR_LIGHT_LEVEL": OUTDOOR_LIGHT_LEVEL,
            "ACTION_FAILURE_PROBABILITY": ACTION_FAILURE_PROBABILITY
        },
        rng=rng
    )
    environment = GuardedEnvironment(lab, timeout=ENVIRONMENT_TIMEOUT, retries=ENVIRONMENT_RETRIES)
    metrics = TrainingMetricsCollector()
    # Plotting and CSV export read the collector after the queue is flushed
    telemetry = QueuedTelemetryObserver(metrics, max_queue_size=TELEMETRY_QUEUE_SIZE)

    try:
        translator = ActionTranslator.from_json(args.action_table) if args.action_table else ActionTranslator()
        cache = QTableCache()
        if args.load_model and cache.load(args.load_model):
            logger.info(f"Trained goals available: {[str(goal) for goal in cache.goals()]}")

        learner = QLearner(
            environment,
            cache=cache,
            translator=translator,
            reward_function=RewardFunction({"STEP_PENALTY": args.step_penalty}),
            rng=rng,
            observer=telemetry,
            snapshot_interval=SNAPSHOT_INTERVAL
        )

        if not args.skip_training:
            start = datetime.now()
            q_table = learner.train(args.goal, args.episodes, args.alpha, args.gamma, args.epsilon,
                                    args.reward, step_penalty=args.step_penalty, max_steps=args.max_steps)
            logger.info(f"Training finished in {(datetime.now() - start).total_seconds():.1f}s")
            telemetry.flush()

            if not args.quiet:
                print(q_table.format())

            summary = metrics.get_summary()
            print(f"\nSteps: {summary['steps']}, episodes: {summary['episodes']}, "
                  f"goal reached: {summary['goal_hits']}, mean reward: {summary['mean_reward']:.2f}")

            if args.metrics_csv:
                metrics.export_csv(os.path.join(args.output_dir, "training_metrics.csv"))
            if args.plot:
                plot_training_run(metrics, parse_goal_description(args.goal), args.output_dir,
                                  show=not args.no_display)

        if args.save_model:
            cache.save(args.save_model)

        if args.state:
            command = learner.get_next_action(args.goal, parse_state_description(args.state))
            print(f"\nNext best action: {command.tag}")
            print(f"Payload tags: {list(command.payload_tags)}")
            print(f"Payload: {list(command.payload_values)}")

        return 0

    except QLearningError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1
    finally:
        telemetry.close()
        environment.close()


if __name__ == "__main__":
    sys.exit(main())
