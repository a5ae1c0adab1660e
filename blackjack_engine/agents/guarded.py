from __future__ import annotations

import logging
from typing import Any, List

from ..types import Action, Observation

logger = logging.getLogger(__name__)


class GuardedAgent:
    """Wraps an agent to enforce legal actions.

    - If the inner agent returns an illegal action, increments `illegal_count`,
      records the violation in `illegal_log`, and falls back to STAND (or the
      first allowed action when STAND is not offered).
    - Exposes `illegal_count` and `illegal_rate(decisions)` for reporting.
    - Provides `reset_illegals()` to clear counters.
    """

    def __init__(self, agent: Any):
        self.agent = agent
        self.illegal_count = 0
        self.illegal_log: List[dict] = []

    def reset_illegals(self) -> None:
        self.illegal_count = 0
        self.illegal_log.clear()

    def illegal_rate(self, decisions: int) -> float:
        return (self.illegal_count / decisions) if decisions else 0.0

    def act(self, observation: Observation, info: Any) -> Action:
        if not isinstance(info, dict):
            info = {}
        a = self.agent.act(observation, info)
        if a in observation.allowed_actions:
            return a
        self.illegal_count += 1
        attempted = getattr(a, "name", str(a))
        allowed = [x.name for x in observation.allowed_actions]
        self.illegal_log.append({"attempted": attempted, "allowed": allowed})
        fb = Action.STAND if Action.STAND in observation.allowed_actions else observation.allowed_actions[0]
        logger.warning("agent chose illegal %s (allowed: %s); falling back to %s", attempted, ", ".join(allowed), fb.name)
        info["illegal_attempt"] = attempted
        info["fallback_action"] = fb.name
        return fb
