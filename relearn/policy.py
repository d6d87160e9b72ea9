"""
Policy store (the Q-table).

Maps each state to the actions experienced from it and their learned values.
The store does not compute values itself; a learner (QLearning,
QProbabilistic) writes them.
"""
from __future__ import annotations

import math
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .types import Action, State


class Policy:
    """
    Two-level mapping State -> (Action -> value).

    Value-returning lookups (actions, value, best, best_value, best_action)
    insert an empty or zero entry for anything missing. Use ``state in
    policy`` or ``contains()`` to test membership without inserting.

    There is no locking: callers sharing a policy across threads must
    synchronise access themselves.

    Example:
        >>> policy = Policy()
        >>> policy.update(State("hello"), Action(1), 0.5)
        >>> policy.best_action(State("hello"))
        Action(trait=1)
    """

    def __init__(self, value_type: Callable[[float], float] = float):
        self.value_type = value_type
        self.policies: Dict[State, Dict[Action, float]] = {}

    def _row(self, state: State) -> Dict[Action, float]:
        row = self.policies.get(state)
        if row is None:
            row = {}
            self.policies[state] = row
        return row

    def actions(self, state: State) -> Dict[Action, float]:
        """Return a copy of the action values recorded for a state."""
        return dict(self._row(state))

    def update(self, state: State, action: Action, value: float) -> None:
        """Set the value of (state, action), inserting missing keys."""
        self._row(state)[action] = self.value_type(value)

    def value(self, state: State, action: Action) -> float:
        """
        Return the value of (state, action).

        A missing pair is inserted with value 0 and 0 is returned.
        """
        row = self._row(state)
        if action not in row:
            row[action] = self.value_type(0)
        return row[action]

    def best(self, state: State) -> Tuple[Optional[Action], float]:
        """
        Return (best action, its value) for a state.

        Returns (None, nan) if no action has been recorded. Among equal
        values the action recorded first wins.
        """
        row = self._row(state)
        if not row:
            return None, math.nan
        action = max(row, key=row.__getitem__)
        return action, row[action]

    def best_value(self, state: State) -> float:
        """Maximum recorded value for a state, or nan if there is none."""
        return self.best(state)[1]

    def best_action(self, state: State) -> Optional[Action]:
        """Action with the maximum recorded value, or None."""
        return self.best(state)[0]

    def merge(self, other: "Policy") -> "Policy":
        """
        Copy every entry of ``other`` into this policy.

        Values from ``other`` win on collision; entries only present here are
        kept unchanged.
        """
        for state, row in other.policies.items():
            if not row:
                continue
            target = self._row(state)
            for action, value in row.items():
                target[action] = self.value_type(value)
        return self

    def __iadd__(self, other: "Policy") -> "Policy":
        return self.merge(other)

    def contains(self, state: State, action: Optional[Action] = None) -> bool:
        """Membership test that never inserts."""
        row = self.policies.get(state)
        if row is None:
            return False
        return action is None or action in row

    def __contains__(self, state: object) -> bool:
        return state in self.policies

    def __len__(self) -> int:
        return len(self.policies)

    def states(self) -> List[State]:
        return list(self.policies.keys())

    def items(self) -> Iterator[Tuple[State, Action, float]]:
        """Iterate over (state, action, value) triplets."""
        for state, row in self.policies.items():
            for action, value in row.items():
                yield state, action, value

    def clear(self) -> None:
        self.policies = {}

    def get_statistics(self) -> Dict:
        """Summary of the table contents."""
        values = [v for _, _, v in self.items()]
        return {
            "states": len(self.policies),
            "entries": len(values),
            "min_value": min(values) if values else None,
            "max_value": max(values) if values else None,
        }

    def to_dict(self) -> Dict:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "entries": [
                {
                    "state": state.to_dict(),
                    "action": action.to_dict(),
                    "value": value,
                }
                for state, action, value in self.items()
            ],
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict,
        value_type: Callable[[float], float] = float,
    ) -> "Policy":
        """Deserialize from a dictionary produced by ``to_dict``."""
        policy = cls(value_type=value_type)
        for entry in data.get("entries", []):
            policy.update(
                State.from_dict(entry["state"]),
                Action.from_dict(entry["action"]),
                entry["value"],
            )
        return policy

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Policy):
            return NotImplemented
        return self.policies == other.policies

    def __repr__(self) -> str:
        return f"Policy(states={len(self.policies)})"
