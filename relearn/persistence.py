"""
Policy persistence.

Two forms are supported:

- ``dumps``/``loads``: native byte-stream round trip (pickle). Works for any
  hashable, picklable trait.
- ``PolicyPersistence``: JSON snapshots of a policy, its learner statistics
  and configuration, written atomically (temp file + rename). Traits must be
  JSON primitives or tuples of them.
"""
from __future__ import annotations

import json
import logging
import pickle
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .learning.learning_config import LearningConfig
from .learning.q_learning import QLearning
from .learning.q_probabilistic import QProbabilistic
from .policy import Policy

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

Learner = Union[QLearning, QProbabilistic]


def dumps(policy: Policy) -> bytes:
    """Serialize a policy to bytes."""
    return pickle.dumps(policy, protocol=pickle.HIGHEST_PROTOCOL)


def loads(data: bytes) -> Policy:
    """Restore a policy serialized with ``dumps``."""
    policy = pickle.loads(data)
    if not isinstance(policy, Policy):
        raise TypeError(f"Expected a pickled Policy, got {type(policy).__name__}")
    return policy


def learner_from_dict(data: Dict[str, Any]) -> Learner:
    """Rebuild a learner from its ``to_dict`` output."""
    algorithm = data.get("algorithm", "q_learning")
    if algorithm == "q_probabilistic":
        return QProbabilistic.from_dict(data)
    if algorithm == "q_learning":
        return QLearning.from_dict(data)
    raise ValueError(f"Unknown learner algorithm: {algorithm!r}")


class PolicyPersistence:
    """
    Handles snapshots of learning state on disk.

    Features:
    - Atomic writes (temp file + rename)
    - Version compatibility checking
    - Graceful degradation on load failure

    Example:
        >>> persistence = PolicyPersistence("./policies")
        >>> persistence.snapshot("gridworld", policy, learner, config)
        >>> config, policy, learner = restore_learning_components("gridworld", persistence)
    """

    def __init__(self, base_path: str):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.episode_counter = 0

    def snapshot(
        self,
        name: str,
        policy: Policy,
        learner: Optional[Learner] = None,
        config: Optional[LearningConfig] = None,
    ) -> bool:
        """
        Save a policy (and optionally its learner and config) to disk.

        Returns:
            True if the snapshot was written
        """
        path = self._get_path(name)
        temp_path = path.with_suffix(".tmp")
        try:
            snapshot_data = {
                "version": SNAPSHOT_VERSION,
                "name": name,
                "config": config.to_dict() if config else None,
                "policy": policy.to_dict(),
                "learner": learner.to_dict() if learner else None,
                "episode_counter": self.episode_counter,
            }

            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(snapshot_data, f, indent=2)

            temp_path.replace(path)

            logger.debug(f"Policy snapshot saved for {name} ({len(policy)} states)")
            return True

        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to save policy snapshot for {name}: {e}")
            if temp_path.exists():
                temp_path.unlink()
            return False

    def restore(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Load a snapshot's raw data.

        Returns:
            Snapshot dictionary, or None if missing, unreadable or from an
            incompatible version
        """
        path = self._get_path(name)

        if not path.exists():
            logger.debug(f"No saved policy found for {name}")
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to restore policy for {name}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Malformed policy snapshot for {name}")
            return None

        version = data.get("version")
        if version != SNAPSHOT_VERSION:
            logger.warning(f"Incompatible policy snapshot version: {version}")
            return None

        self.episode_counter = data.get("episode_counter", 0)
        logger.debug(f"Policy snapshot restored for {name}")
        return data

    def should_snapshot(self, config: LearningConfig) -> bool:
        """Count one episode; True every ``snapshot_every_n_episodes``."""
        self.episode_counter += 1
        return (self.episode_counter % config.snapshot_every_n_episodes) == 0

    def delete(self, name: str) -> bool:
        """Delete a snapshot. True if it is gone afterwards."""
        path = self._get_path(name)
        try:
            if path.exists():
                path.unlink()
                logger.debug(f"Deleted policy snapshot for {name}")
            return True
        except OSError as e:
            logger.warning(f"Failed to delete policy snapshot for {name}: {e}")
            return False

    def _get_path(self, name: str) -> Path:
        safe_name = "".join(c if c.isalnum() else "_" for c in name)
        return self.base_path / f"{safe_name}_policy.json"


def restore_learning_components(
    name: str,
    persistence: PolicyPersistence,
) -> Tuple[LearningConfig, Policy, Learner]:
    """
    Restore config, policy and learner from a snapshot.

    Falls back to a default config, an empty policy and a fresh learner built
    from that config when nothing usable is saved.
    """
    data = persistence.restore(name)

    if data is None:
        config = LearningConfig()
        return config, Policy(), config.build_learner()

    try:
        config_data = data.get("config")
        config = LearningConfig.from_dict(config_data) if config_data else LearningConfig()

        policy = Policy.from_dict(data.get("policy") or {})

        learner_data = data.get("learner")
        learner = learner_from_dict(learner_data) if learner_data else config.build_learner()

        return config, policy, learner

    except (AttributeError, KeyError, TypeError, ValueError) as e:
        logger.warning(f"Error restoring learning components for {name}: {e}")
        config = LearningConfig()
        return config, Policy(), config.build_learner()
