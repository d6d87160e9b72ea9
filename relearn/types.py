"""
Core value types for tabular learning.

A caller describes its world with *traits*: any value that is hashable,
comparable for equality and orderable (ints, strings, tuples, frozen
dataclasses, ...). The wrappers here give those traits a learning meaning:

- State: a trait plus a mutable reward
- Action: a trait
- Link: one (state, action) step of experience
- Episode: the ordered steps of a trajectory, ending in a terminal step
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Iterator, List, Optional, Protocol, Tuple


class TraitError(TypeError):
    """Raised when a trait cannot be used as a lookup key."""


class Trait(Protocol):
    """Capabilities a state or action descriptor must provide."""

    def __eq__(self, other: Any) -> bool: ...

    def __hash__(self) -> int: ...

    def __lt__(self, other: Any) -> bool: ...


def _check_hashable(trait: Any, kind: str) -> None:
    try:
        hash(trait)
    except TypeError as e:
        raise TraitError(
            f"{kind} trait of type {type(trait).__name__} is not hashable"
        ) from e


def freeze_trait(value: Any) -> Hashable:
    """
    Convert a decoded JSON value back into a hashable trait.

    JSON has no tuple type, so tuples come back as lists. Lists are turned
    into tuples recursively; everything else is returned as-is.
    """
    if isinstance(value, list):
        return tuple(freeze_trait(v) for v in value)
    return value


@dataclass(order=True)
class State:
    """
    A state wrapping a caller trait.

    Identity is the trait alone: two states with equal traits are the same
    policy key whatever their rewards.

    Attributes:
        trait: Caller-supplied state descriptor
        reward: Reward carried by this state (0 for normal, usually -1 or +1
            for terminal states)
    """
    trait: Trait
    reward: float = field(default=0.0, compare=False)

    def __post_init__(self):
        _check_hashable(self.trait, "State")

    def __hash__(self) -> int:
        return hash(self.trait)

    def set_reward(self, reward: float) -> None:
        """Late reward assignment, used for terminal steps."""
        self.reward = reward

    def to_dict(self) -> dict:
        return {"trait": self.trait, "reward": self.reward}

    @classmethod
    def from_dict(cls, data: dict) -> "State":
        return cls(trait=freeze_trait(data["trait"]), reward=data.get("reward", 0.0))


@dataclass(order=True)
class Action:
    """An action wrapping a caller trait."""
    trait: Trait

    def __post_init__(self):
        _check_hashable(self.trait, "Action")

    def __hash__(self) -> int:
        return hash(self.trait)

    def to_dict(self) -> dict:
        return {"trait": self.trait}

    @classmethod
    def from_dict(cls, data: dict) -> "Action":
        return cls(trait=freeze_trait(data["trait"]))


# Placeholder action for the last step of an episode
TERMINAL = Action(None)


@dataclass(frozen=True, order=True)
class Link:
    """One step of experience: the state observed and the action taken."""
    state: State
    action: Action


class Episode:
    """
    An ordered trajectory of links.

    Order is temporal and meaningful. The last link is the terminal step:
    its action is a placeholder and its state carries the episode reward.

    Example:
        >>> episode = Episode()
        >>> episode.append(State("start"), Action("right"))
        >>> episode.terminate(State("goal"), reward=1.0)
        >>> episode.reward
        1.0
    """

    def __init__(self, links: Optional[List[Link]] = None):
        self.links: List[Link] = list(links) if links else []

    @classmethod
    def from_pairs(cls, pairs) -> "Episode":
        """Build an episode from (State, Action) tuples."""
        return cls([Link(state, action) for state, action in pairs])

    def append(self, state: State, action: Action) -> Link:
        """Record a step and return its link."""
        link = Link(state, action)
        self.links.append(link)
        return link

    def terminate(
        self,
        state: State,
        reward: Optional[float] = None,
        action: Action = TERMINAL,
    ) -> Link:
        """
        Record the terminal step.

        Args:
            state: Terminal state
            reward: If given, assigned to the state before it is recorded
            action: Placeholder action (defaults to TERMINAL)
        """
        if reward is not None:
            state.set_reward(reward)
        return self.append(state, action)

    @property
    def terminal(self) -> Optional[Link]:
        """The last link, or None for an empty episode."""
        return self.links[-1] if self.links else None

    @property
    def reward(self) -> float:
        """Reward carried by the terminal state (0.0 if empty)."""
        return self.links[-1].state.reward if self.links else 0.0

    def transitions(self) -> List[Tuple[Link, Link]]:
        """Consecutive (step, next step) pairs; the terminal step has no successor."""
        return list(zip(self.links, self.links[1:]))

    def __len__(self) -> int:
        return len(self.links)

    def __iter__(self) -> Iterator[Link]:
        return iter(self.links)

    def __getitem__(self, index):
        return self.links[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Episode):
            return NotImplemented
        return self.links == other.links

    def __repr__(self) -> str:
        return f"Episode(steps={len(self.links)}, reward={self.reward})"
