# learning/goal.py
"""Goal descriptions and their canonical cache keys."""
import numbers
from dataclasses import dataclass
from typing import Sequence, Tuple

from learning.errors import ConfigurationError

# Zone 1 and zone 2 light levels
DEFAULT_GOAL_DIMENSIONS = (0, 1)


@dataclass(frozen=True)
class Goal:
    """Target values over a subset of state-description dimensions."""
    values: Tuple[int, ...]
    dimensions: Tuple[int, ...] = DEFAULT_GOAL_DIMENSIONS

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))
        object.__setattr__(self, "dimensions", tuple(self.dimensions))
        if not self.dimensions:
            raise ConfigurationError("Goal must constrain at least one dimension")
        if len(self.values) != len(self.dimensions):
            raise ConfigurationError(
                f"Goal has {len(self.values)} values for {len(self.dimensions)} dimensions"
            )
        if len(set(self.dimensions)) != len(self.dimensions):
            raise ConfigurationError(f"Goal dimensions must be unique: {list(self.dimensions)}")

    @property
    def key(self) -> str:
        """Canonical cache key, e.g. "0:2,1:3" for zone levels [2, 3]."""
        return ",".join(f"{d}:{v}" for d, v in zip(self.dimensions, self.values))

    def matches(self, description: Sequence) -> bool:
        """True if every designated dimension equals its target exactly."""
        if len(description) <= max(self.dimensions):
            return False
        return all(description[d] == v for d, v in zip(self.dimensions, self.values))

    def __str__(self):
        return str(list(self.values))


def _to_int(value, position):
    """Convert one goal element to int, rejecting booleans and fractions."""
    if isinstance(value, bool):
        raise ConfigurationError(f"Goal value at position {position} must be a number, got {value!r}")
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        if float(value).is_integer():
            return int(value)
        raise ConfigurationError(f"Goal value at position {position} must be an integer, got {value!r}")
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ConfigurationError(
                f"Goal value at position {position} must be an integer, got {value!r}"
            ) from None
    raise ConfigurationError(f"Goal value at position {position} must be an integer, got {value!r}")


def parse_goal_description(goal_description, dimensions: Sequence[int] = DEFAULT_GOAL_DIMENSIONS) -> Goal:
    """
    Build a Goal from a caller-supplied description.

    Args:
        goal_description: Goal instance, sequence of values or string such as "[2, 3]"
        dimensions: State-description dimensions the values refer to

    Returns:
        Goal: Validated goal

    Raises:
        ConfigurationError: If the description is malformed
    """
    if isinstance(goal_description, Goal):
        return goal_description

    if isinstance(goal_description, str):
        text = goal_description.strip().replace("[", "").replace("]", "")
        if not text:
            raise ConfigurationError("Goal description is empty")
        goal_description = text.split(",")

    try:
        raw_values = list(goal_description)
    except TypeError:
        raise ConfigurationError(f"Goal description must be a sequence, got {goal_description!r}") from None

    values = tuple(_to_int(value, i) for i, value in enumerate(raw_values))
    if len(values) != len(dimensions):
        raise ConfigurationError(
            f"Goal description {list(values)} must have {len(dimensions)} values"
        )
    return Goal(values, tuple(dimensions))
