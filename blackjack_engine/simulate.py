from __future__ import annotations

import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Optional

from .constants import DEFAULT_ROUNDS, DEFAULT_SEED
from .rules import RuleSet
from .table import Table
from .types import Action

logger = logging.getLogger(__name__)


@dataclass
class SimulationMetrics:
    rounds: int = 0
    hands: int = 0
    decisions: int = 0
    naturals: int = 0
    busts: int = 0
    doubles: int = 0
    splits: int = 0
    surrenders: int = 0
    split_aces_locked: int = 0
    total_wagered: float = 0.0
    actions: Dict[str, int] = field(default_factory=dict)

    @property
    def decisions_per_round(self) -> float:
        return self.decisions / self.rounds if self.rounds else 0.0


def run_simulation(
    agent: Any,
    rounds: int = DEFAULT_ROUNDS,
    seed: int | None = DEFAULT_SEED,
    rules: RuleSet | None = None,
    bet: float | None = None,
    *,
    log_fn: Optional[Callable[[Dict], None]] = None,
) -> Dict:
    """Play ``rounds`` rounds with ``agent`` and count what happened.

    Rounds are not settled against a dealer; the metrics describe play only.
    """
    table = Table(rules=rules, seed=seed)
    metrics = SimulationMetrics()
    actions: Counter = Counter()
    if hasattr(agent, "reset_illegals"):
        agent.reset_illegals()

    for round_idx in range(rounds):
        summary = table.play_round(agent, bet=bet)
        metrics.rounds += 1
        metrics.hands += len(summary["hands"])
        metrics.total_wagered += sum(summary["bets"])
        if summary["natural"]:
            metrics.naturals += 1
        # a doubled hand can bust while staying DOUBLED_DOWN
        metrics.busts += sum(summary["busted"])
        for state in summary["states"]:
            if state == "SURRENDERED":
                metrics.surrenders += 1
            elif state == "DOUBLED_DOWN":
                metrics.doubles += 1
            elif state == "SPLIT_ACES_LOCKED":
                metrics.split_aces_locked += 1
        decisions = summary["trace"]["decisions"]
        for j, d in enumerate(decisions):
            metrics.decisions += 1
            actions[d["action"]] += 1
            if log_fn is not None:
                log_fn({
                    "track": "simulation",
                    "round": round_idx,
                    "decision_idx": j,
                    "hand_index": d["hand_index"],
                    "obs": d["obs"],
                    "action": d["action"],
                    "meta": d["meta"],
                    "final": _final(summary),
                })
        if log_fn is not None and not decisions:
            log_fn({
                "track": "simulation",
                "round": round_idx,
                "decision_idx": None,
                "no_decision": True,
                "final": _final(summary),
            })

    metrics.splits = actions.get(Action.SPLIT.name, 0)
    metrics.actions = {a.name: actions.get(a.name, 0) for a in Action}
    out = {
        "track": "simulation",
        "rules": table.rules.to_dict(),
        "metrics": asdict(metrics),
    }
    out["metrics"]["decisions_per_round"] = metrics.decisions_per_round
    if hasattr(agent, "illegal_rate"):
        out["metrics"]["illegal_count"] = agent.illegal_count
        out["metrics"]["illegal_rate"] = agent.illegal_rate(metrics.decisions)
    logger.info("simulated %d round(s), %d decision(s)", metrics.rounds, metrics.decisions)
    return out


def _final(summary: Dict) -> Dict:
    return {
        "dealer_upcard": summary.get("dealer_upcard"),
        "hands": summary.get("hands"),
        "bets": summary.get("bets"),
        "states": summary.get("states"),
        "totals": summary.get("totals"),
        "busted": summary.get("busted"),
    }
