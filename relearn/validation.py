"""
Opt-in input checks for learning.

The learners never validate their inputs. These helpers let callers check
traits, episodes and rates up front and report every problem at once.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Sequence

from .types import Action, Link, State


@dataclass
class ValidationError:
    """A validation error."""
    field: str
    message: str
    value: str = ""


class ValidationResult:
    """Result of validation check."""

    def __init__(self):
        self.errors: List[ValidationError] = []

    def add_error(self, field: str, message: str, value: str = "") -> None:
        self.errors.append(ValidationError(field, message, value))

    def extend(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def raise_if_invalid(self, context: str = "Validation") -> None:
        if not self.is_valid:
            msgs = [f"{e.field}: {e.message}" for e in self.errors]
            raise ValueError(f"{context} failed:\n" + "\n".join(msgs))


def validate_trait(trait: Any, field: str = "trait") -> ValidationResult:
    """Check that a trait is hashable and equal to itself."""
    result = ValidationResult()

    try:
        hash(trait)
    except TypeError:
        result.add_error(field, "Trait must be hashable", type(trait).__name__)
        return result

    if isinstance(trait, float) and math.isnan(trait):
        result.add_error(field, "NaN is not equal to itself", repr(trait))

    return result


def validate_rate(value: float, field: str) -> ValidationResult:
    """Validate a learning or discount rate is in [0, 1]."""
    result = ValidationResult()

    if not isinstance(value, (int, float)):
        result.add_error(field, "Must be a number", str(value))
    elif math.isnan(value) or value < 0.0 or value > 1.0:
        result.add_error(field, "Must be between 0.0 and 1.0", str(value))

    return result


def validate_episode(
    episode: Sequence[Link],
    reward_range: tuple = (-1.0, 1.0),
) -> ValidationResult:
    """
    Validate an episode before handing it to a learner.

    Checks that it is non-empty, made of State/Action links, and that the
    terminal reward lies in ``reward_range``.
    """
    result = ValidationResult()

    if len(episode) == 0:
        result.add_error("episode", "Episode cannot be empty")
        return result

    for i, link in enumerate(episode):
        if not isinstance(link, Link):
            result.add_error(f"episode[{i}]", "Not a Link", type(link).__name__)
            continue
        if not isinstance(link.state, State):
            result.add_error(f"episode[{i}].state", "Not a State", type(link.state).__name__)
        if not isinstance(link.action, Action):
            result.add_error(f"episode[{i}].action", "Not an Action", type(link.action).__name__)

    if result.is_valid:
        low, high = reward_range
        reward = episode[-1].state.reward
        if reward < low or reward > high:
            result.add_error(
                "reward",
                f"Terminal reward outside [{low}, {high}]",
                str(reward),
            )

    return result
