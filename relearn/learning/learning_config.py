"""
Learner configuration.

Groups the parameters of a learning run, loads them from YAML or JSON files
and builds the matching learner.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Optional, Union

import yaml

from ..validation import validate_rate
from .q_learning import QLearning
from .q_probabilistic import QProbabilistic, RewardSource

logger = logging.getLogger(__name__)

ALGORITHMS = ("q_learning", "q_probabilistic")


@dataclass
class LearningConfig:
    """
    Configuration for a learner.

    Values are not clamped: out-of-range rates are kept as given and only
    logged, since they change convergence behaviour but are still usable.

    Attributes:
        algorithm: "q_learning" or "q_probabilistic"
        alpha: Learning rate (deterministic learner only)
        gamma: Discount rate
        write_terminal: Store the terminal reward as the terminal step's value
        reward_source: "current" or "next" (probabilistic learner only)
        exploration_rate: Epsilon for EpsilonGreedy selection
        prng_seed: Seed for deterministic exploration (None = random)
        snapshot_every_n_episodes: Snapshot cadence for PolicyPersistence
    """
    algorithm: str = "q_learning"

    # Update rule
    alpha: float = 0.9
    gamma: float = 0.9
    write_terminal: bool = True
    reward_source: str = "current"

    # Exploration
    exploration_rate: float = 0.1
    prng_seed: Optional[int] = None

    # Persistence
    snapshot_every_n_episodes: int = 10

    def __post_init__(self):
        self.snapshot_every_n_episodes = max(1, self.snapshot_every_n_episodes)
        for name in ("alpha", "gamma", "exploration_rate"):
            result = validate_rate(getattr(self, name), name)
            for error in result.errors:
                logger.warning(f"{error.field}={error.value}: {error.message}")

    def build_learner(self) -> Union[QLearning, QProbabilistic]:
        """Create the learner this configuration describes."""
        if self.algorithm == "q_learning":
            return QLearning(
                alpha=self.alpha,
                gamma=self.gamma,
                write_terminal=self.write_terminal,
            )
        if self.algorithm == "q_probabilistic":
            return QProbabilistic(
                gamma=self.gamma,
                reward_source=RewardSource(self.reward_source),
                write_terminal=self.write_terminal,
            )
        raise ValueError(
            f"Unknown algorithm {self.algorithm!r}, expected one of {ALGORITHMS}"
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "LearningConfig":
        """Deserialize from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def save(self, path: str) -> None:
        """Save to YAML (.yaml/.yml) or JSON (anything else)."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            if path.endswith((".yaml", ".yml")):
                yaml.safe_dump(self.to_dict(), f, sort_keys=False)
            else:
                json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> Optional["LearningConfig"]:
        """Load from a YAML or JSON file. Returns None if missing or unreadable."""
        if not os.path.exists(path):
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()

            if path.endswith((".yaml", ".yml")):
                data = yaml.safe_load(content)
            else:
                data = json.loads(content)

            if not isinstance(data, dict):
                logger.warning(f"Config in {path} is not a mapping")
                return None

            return cls.from_dict(data)

        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load learning config from {path}: {e}")
            return None


DEFAULT_LEARNING_CONFIG = LearningConfig()


class LearningPresets:
    """Pre-configured learner settings."""

    @staticmethod
    def default() -> LearningConfig:
        """Deterministic Q-learning with alpha = gamma = 0.9."""
        return LearningConfig()

    @staticmethod
    def fast() -> LearningConfig:
        """Full-step updates, short horizon."""
        return LearningConfig(alpha=1.0, gamma=0.8, exploration_rate=0.2)

    @staticmethod
    def conservative() -> LearningConfig:
        """Small steps, long horizon, little exploration."""
        return LearningConfig(alpha=0.1, gamma=0.95, exploration_rate=0.05)

    @staticmethod
    def probabilistic() -> LearningConfig:
        """Frequency-weighted learner for stochastic environments."""
        return LearningConfig(algorithm="q_probabilistic", gamma=0.9)

    @staticmethod
    def deterministic_test(seed: int = 42) -> LearningConfig:
        """Seeded configuration for testing."""
        return LearningConfig(exploration_rate=0.1, prng_seed=seed)
