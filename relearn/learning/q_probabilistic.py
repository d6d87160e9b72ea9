"""
Probabilistic (non-deterministic) Q-learning.

The same (state, action) pair may lead to different next states. The learner
keeps a count of every observed transition (s_t, a_t) -> s_t+1 and weights
its update by the empirical transition probability:

    P = count(s_t, a_t, s_t+1) / sum_k count(s_t, a_t, k)
    Q(s_t, a_t) <- P * R + gamma * (max_a Q(s_t+1, a) * P)

Counts accumulate over every episode given to the same learner instance.
"""
from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Dict, Sequence, Tuple

from ..policy import Policy
from ..types import Action, Link, State

logger = logging.getLogger(__name__)


class RewardSource(Enum):
    """Which state's reward feeds the expected reward term."""
    CURRENT = "current"  # r(s_t), same convention as QLearning
    NEXT = "next"        # r(s_t+1), the "stationary reward of the ending state" reading


class TransitionTable:
    """
    Observation counts for (state, action) -> next state transitions.

    Attributes:
        counts: state -> action -> next state -> number of observations
    """

    def __init__(self):
        self.counts: Dict[State, Dict[Action, Dict[State, int]]] = {}

    def observe(self, state: State, action: Action, next_state: State) -> int:
        """Record one transition and return its new count."""
        by_action = self.counts.setdefault(state, {})
        by_next = by_action.setdefault(action, {})
        by_next[next_state] = by_next.get(next_state, 0) + 1
        return by_next[next_state]

    def next_states(self, state: State, action: Action) -> Dict[State, int]:
        """Copy of the next-state counts for (state, action)."""
        return dict(self.counts.get(state, {}).get(action, {}))

    def count(self, state: State, action: Action, next_state: State) -> int:
        return self.counts.get(state, {}).get(action, {}).get(next_state, 0)

    def total(self, state: State, action: Action) -> int:
        """Total observations of (state, action) over all next states."""
        return sum(self.counts.get(state, {}).get(action, {}).values())

    def probability(self, state: State, action: Action, next_state: State) -> float:
        """
        Empirical probability of reaching ``next_state``.

        A pair that was never observed has probability 0.
        """
        total = self.total(state, action)
        if total == 0:
            return 0.0
        return self.count(state, action, next_state) / total

    def clear(self) -> None:
        self.counts = {}

    def __len__(self) -> int:
        """Number of distinct transitions observed."""
        return sum(
            len(by_next)
            for by_action in self.counts.values()
            for by_next in by_action.values()
        )

    def to_dict(self) -> Dict:
        return {
            "transitions": [
                {
                    "state": state.to_dict(),
                    "action": action.to_dict(),
                    "next_state": next_state.to_dict(),
                    "count": count,
                }
                for state, by_action in self.counts.items()
                for action, by_next in by_action.items()
                for next_state, count in by_next.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "TransitionTable":
        table = cls()
        for entry in data.get("transitions", []):
            state = State.from_dict(entry["state"])
            action = Action.from_dict(entry["action"])
            next_state = State.from_dict(entry["next_state"])
            by_next = table.counts.setdefault(state, {}).setdefault(action, {})
            by_next[next_state] = int(entry["count"])
        return table


class QProbabilistic:
    """
    Frequency-weighted Q-learning.

    Each call first records the episode's transitions, then updates every
    non-terminal step using the accumulated probabilities. Construct a new
    learner (or call ``reset()``) to start from empty statistics.
    """

    def __init__(
        self,
        gamma: float = 0.9,
        reward_source: RewardSource = RewardSource.CURRENT,
        write_terminal: bool = True,
    ):
        """
        Initialize the learner.

        Args:
            gamma: Discount rate, expected in [0, 1] (not validated)
            reward_source: Reward of the current step's state (default) or of
                the next step's state
            write_terminal: Store the terminal step's reward as its value
        """
        self.gamma = gamma
        self.reward_source = RewardSource(reward_source)
        self.write_terminal = write_terminal
        self.transitions = TransitionTable()

        self.episodes_seen = 0
        self.total_updates = 0

    def observe(self, episode: Sequence[Link]) -> None:
        """Accounting pass: count every (s_t, a_t) -> s_t+1 in the episode."""
        for i in range(len(episode) - 1):
            step = episode[i]
            self.transitions.observe(step.state, step.action, episode[i + 1].state)

    def q_value(
        self,
        episode: Sequence[Link],
        index: int,
        policy: Policy,
    ) -> Tuple[State, Action, float]:
        """Compute the new value for step ``index``; does not touch the policy."""
        step = episode[index]
        if index >= len(episode) - 1:
            return step.state, step.action, step.state.reward

        next_state = episode[index + 1].state
        q_next = policy.best_value(next_state)
        if math.isnan(q_next):
            q_next = 0.0

        if self.reward_source is RewardSource.NEXT:
            r = next_state.reward
        else:
            r = step.state.reward

        prob = self.transitions.probability(step.state, step.action, next_state)
        r_expected = prob * r
        return step.state, step.action, r_expected + self.gamma * (q_next * prob)

    def __call__(self, episode: Sequence[Link], policy: Policy) -> None:
        """Record ``episode`` and update ``policy`` in place."""
        n = len(episode)
        if n == 0:
            return

        self.observe(episode)

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
            f"Probabilistic Q pass: {n} steps, {updates} updates, "
            f"{len(self.transitions)} known transitions",
            extra={"learner": "q_probabilistic", "episode_len": n, "policy_states": len(policy)},
        )

    def reset(self) -> None:
        """Forget all transition statistics."""
        self.transitions.clear()
        self.episodes_seen = 0
        self.total_updates = 0

    def get_statistics(self) -> Dict:
        return {
            "algorithm": "q_probabilistic",
            "gamma": self.gamma,
            "reward_source": self.reward_source.value,
            "episodes_seen": self.episodes_seen,
            "total_updates": self.total_updates,
            "transitions": len(self.transitions),
        }

    def to_dict(self) -> Dict:
        return {
            "algorithm": "q_probabilistic",
            "gamma": self.gamma,
            "reward_source": self.reward_source.value,
            "write_terminal": self.write_terminal,
            "episodes_seen": self.episodes_seen,
            "total_updates": self.total_updates,
            "table": self.transitions.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "QProbabilistic":
        learner = cls(
            gamma=data.get("gamma", 0.9),
            reward_source=RewardSource(data.get("reward_source", "current")),
            write_terminal=data.get("write_terminal", True),
        )
        learner.transitions = TransitionTable.from_dict(data.get("table", {}))
        learner.episodes_seen = data.get("episodes_seen", 0)
        learner.total_updates = data.get("total_updates", 0)
        return learner
