"""
Epsilon-greedy action selection over a policy.

Most of the time the best known action is taken; with probability epsilon
(or when nothing is known about the state) a random candidate is tried.
"""
from __future__ import annotations

import random
from typing import Dict, Optional, Sequence

from ..policy import Policy
from ..types import Action, State


class EpsilonGreedy:
    """
    Choose actions from a policy with epsilon-greedy exploration.

    Deterministic when seeded. Reads the policy through ``best_action``,
    which inserts an empty row for unseen states.
    """

    def __init__(
        self,
        policy: Policy,
        exploration_rate: float = 0.1,
        prng_seed: Optional[int] = None,
    ):
        self.policy = policy
        self.exploration_rate = exploration_rate
        self.rng = random.Random(prng_seed)

        self.explorations = 0
        self.exploitations = 0

    def select(self, state: State, candidates: Sequence[Action] = ()) -> Action:
        """
        Pick an action for ``state``.

        Args:
            state: Current state
            candidates: Actions available in this state, used for exploration

        Raises:
            ValueError: If there are no candidates and no learned action
        """
        explore = bool(candidates) and self.rng.random() < self.exploration_rate
        if not explore:
            best = self.policy.best_action(state)
            if best is not None:
                self.exploitations += 1
                return best

        if not candidates:
            raise ValueError(f"No candidate actions and no learned action for {state!r}")

        self.explorations += 1
        return self.rng.choice(list(candidates))

    def get_statistics(self) -> Dict:
        total = self.explorations + self.exploitations
        return {
            "exploration_rate": self.exploration_rate,
            "explorations": self.explorations,
            "exploitations": self.exploitations,
            "explore_ratio": self.explorations / max(1, total),
        }
