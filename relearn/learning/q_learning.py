"""
Deterministic Q-learning.

Q(s_t,a_t) <- Q(s_t,a_t) + alpha * (r_t + gamma * max_a Q(s_t+1, a) - Q(s_t,a_t))

The reward r_t is the one carried by the current step's state. The terminal
step has no successor; its value is fixed to its own reward.
"""
from __future__ import annotations

import logging
import math
from typing import Dict, Sequence, Tuple

from ..policy import Policy
from ..types import Action, Link, State

logger = logging.getLogger(__name__)


class QLearning:
    """
    Deterministic Q-learning over whole episodes.

    Steps are processed in order and each update is visible to the steps
    after it in the same pass. Calling the learner again on the same episode
    keeps moving values toward the Bellman fixed point.

    Example:
        >>> learner = QLearning(alpha=0.9, gamma=0.9)
        >>> for _ in range(10):
        ...     learner(episode, policy)
    """

    def __init__(
        self,
        alpha: float = 0.9,
        gamma: float = 0.9,
        write_terminal: bool = True,
    ):
        """
        Initialize the learner.

        Args:
            alpha: Learning rate, expected in [0, 1] (not validated)
            gamma: Discount rate, expected in [0, 1] (not validated)
            write_terminal: Store the terminal step's reward as its value.
                If False, the terminal entry is left untouched.
        """
        self.alpha = alpha
        self.gamma = gamma
        self.write_terminal = write_terminal

        self.episodes_seen = 0
        self.total_updates = 0

    def q_value(
        self,
        episode: Sequence[Link],
        index: int,
        policy: Policy,
    ) -> Tuple[State, Action, float]:
        """
        Compute the new value for step ``index`` of an episode.

        Returns:
            (state, action, value) triplet, not yet written to the policy
        """
        step = episode[index]
        if index >= len(episode) - 1:
            return step.state, step.action, step.state.reward

        q = policy.value(step.state, step.action)
        q_next = policy.best_value(episode[index + 1].state)
        if math.isnan(q_next):
            q_next = 0.0
        r = step.state.reward
        return step.state, step.action, q + self.alpha * (r + self.gamma * q_next - q)

    def __call__(self, episode: Sequence[Link], policy: Policy) -> None:
        """Run one learning pass over ``episode``, updating ``policy`` in place."""
        n = len(episode)
        if n == 0:
            return

        updates = 0
        for i in range(n):
            if i == n - 1 and not self.write_terminal:
                continue
            state, action, value = self.q_value(episode, i, policy)
            policy.update(state, action, value)
            updates += 1

        self.episodes_seen += 1
        self.total_updates += updates
        logger.debug(
            f"Q-learning pass: {n} steps, {updates} updates",
            extra={"learner": "q_learning", "episode_len": n, "policy_states": len(policy)},
        )

    def get_statistics(self) -> Dict:
        return {
            "algorithm": "q_learning",
            "alpha": self.alpha,
            "gamma": self.gamma,
            "episodes_seen": self.episodes_seen,
            "total_updates": self.total_updates,
        }

    def to_dict(self) -> Dict:
        return {
            "algorithm": "q_learning",
            "alpha": self.alpha,
            "gamma": self.gamma,
            "write_terminal": self.write_terminal,
            "episodes_seen": self.episodes_seen,
            "total_updates": self.total_updates,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "QLearning":
        learner = cls(
            alpha=data.get("alpha", 0.9),
            gamma=data.get("gamma", 0.9),
            write_terminal=data.get("write_terminal", True),
        )
        learner.episodes_seen = data.get("episodes_seen", 0)
        learner.total_updates = data.get("total_updates", 0)
        return learner
