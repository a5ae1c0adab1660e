from __future__ import annotations

import random
from typing import Any, Iterable

from ..types import Action, Observation


class RandomAgent:
    """Uniform choice over the allowed actions.

    Actions in ``avoid`` are skipped unless nothing else is allowed.
    """

    def __init__(self, seed: int = 0, avoid: Iterable[Action] = ()):
        self.rng = random.Random(seed)
        self.avoid = frozenset(avoid)

    def act(self, observation: Observation, info: Any) -> Action:
        choices = [a for a in observation.allowed_actions if a not in self.avoid]
        return self.rng.choice(choices or observation.allowed_actions)
