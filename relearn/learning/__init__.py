"""
Learning algorithms for the policy store.

- QLearning: deterministic Bellman update,
  Q(s,a) += alpha * (r + gamma * max Q(s',.) - Q(s,a))
- QProbabilistic: update weighted by empirically observed transition
  probabilities, for environments where (s,a) may lead to different s'
- EpsilonGreedy: action selection on top of a learned policy

Learners mutate a Policy in place and keep no reference to it between calls.
"""

from .learning_config import LearningConfig, LearningPresets, DEFAULT_LEARNING_CONFIG
from .q_learning import QLearning
from .q_probabilistic import QProbabilistic, RewardSource, TransitionTable
from .exploration import EpsilonGreedy

__all__ = [
    # Learners
    "QLearning",
    "QProbabilistic",
    "RewardSource",
    "TransitionTable",

    # Selection
    "EpsilonGreedy",

    # Configuration
    "LearningConfig",
    "LearningPresets",
    "DEFAULT_LEARNING_CONFIG",
]
