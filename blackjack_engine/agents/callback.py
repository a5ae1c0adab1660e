from __future__ import annotations

from typing import Any, Callable

from ..types import Action, Observation


class CallableAgent:
    """Adapts a plain decision function ``fn(observation) -> Action`` to the agent protocol."""

    def __init__(self, fn: Callable[[Observation], Action], name: str | None = None):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "callable")

    def act(self, observation: Observation, info: Any) -> Action:
        action = self.fn(observation)
        if not isinstance(action, Action):
            raise TypeError(f"decision function {self.name} returned {action!r}, expected an Action")
        return action
