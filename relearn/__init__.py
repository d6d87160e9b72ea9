"""
relearn - tabular reinforcement learning.

Callers describe states and actions with their own hashable traits, record
trajectories as episodes and let a learner turn them into a policy (Q-table)
that answers best-action queries.

Example:
    >>> from relearn import Action, Episode, Policy, QLearning, State
    >>> episode = Episode()
    >>> episode.append(State("s0"), Action("a0"))
    >>> episode.terminate(State("s1"), reward=1.0)
    >>> policy = Policy()
    >>> QLearning(alpha=0.9, gamma=0.9)(episode, policy)
    >>> policy.best_action(State("s0"))
    Action(trait='a0')
"""

from .types import Action, Episode, Link, State, TERMINAL, Trait, TraitError, freeze_trait
from .policy import Policy
from .learning import (
    DEFAULT_LEARNING_CONFIG,
    EpsilonGreedy,
    LearningConfig,
    LearningPresets,
    QLearning,
    QProbabilistic,
    RewardSource,
    TransitionTable,
)
from .persistence import PolicyPersistence, dumps, loads, restore_learning_components

__version__ = "0.2.0"

__all__ = [
    # Types
    "State",
    "Action",
    "Link",
    "Episode",
    "TERMINAL",
    "Trait",
    "TraitError",
    "freeze_trait",

    # Policy store
    "Policy",

    # Learning
    "QLearning",
    "QProbabilistic",
    "RewardSource",
    "TransitionTable",
    "EpsilonGreedy",
    "LearningConfig",
    "LearningPresets",
    "DEFAULT_LEARNING_CONFIG",

    # Persistence
    "PolicyPersistence",
    "dumps",
    "loads",
    "restore_learning_components",
]
