from __future__ import annotations

import argparse
import json
import sys
from typing import Any, List, Optional

from .agents.basic import BasicStrategyAgent
from .agents.guarded import GuardedAgent
from .agents.llm_agent import BACKENDS, LLMAgent
from .agents.random_agent import RandomAgent
from .constants import (
    AVAILABLE_AGENTS,
    DEFAULT_BET,
    DEFAULT_ROUNDS,
    DEFAULT_SEED,
    DEFAULT_TEMPERATURE,
)
from .errors import RuleSetError
from .logging_utils import jsonl_writer, setup_logging
from .rules import RuleSet
from .simulate import run_simulation


def build_agent(name: str, args: argparse.Namespace | None = None, rules: RuleSet | None = None) -> Any:
    if name == "basic":
        return BasicStrategyAgent()
    if name == "random":
        seed = getattr(args, "seed", 0) if args else 0
        return RandomAgent(seed=seed)
    if name == "llm":
        return LLMAgent(
            rules,
            provider=getattr(args, "llm_provider", None) or "openai",
            model=getattr(args, "llm_model", None),
            temperature=getattr(args, "llm_temperature", DEFAULT_TEMPERATURE),
            include_prompt=getattr(args, "llm_debug", False),
        )
    raise ValueError(f"Unknown agent: {name}")


def _load_rules(path: Optional[str]) -> RuleSet:
    if not path:
        return RuleSet()
    return RuleSet.from_json(path)


def cmd_run(args: argparse.Namespace) -> int:
    try:
        rules = _load_rules(args.rules)
    except (RuleSetError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    agent = build_agent(args.agent, args, rules)
    if args.guard:
        agent = GuardedAgent(agent)

    log_fh = open(args.log_jsonl, "a", encoding="utf-8") if args.log_jsonl else None
    log_fn = jsonl_writer(log_fh) if log_fh else None
    if args.debug:
        inner = log_fn

        def log_fn(event: dict) -> None:
            obs = event.get("obs") or {}
            p = obs.get("player", {})
            print(f"[round {event.get('round')} d{event.get('decision_idx')}] up={obs.get('dealer_upcard')} cards={p.get('cards')} act={event.get('action')}")
            if inner is not None:
                inner(event)

    try:
        result = run_simulation(agent, rounds=args.rounds, seed=args.seed, rules=rules, bet=args.bet, log_fn=log_fn)
    finally:
        if log_fh:
            log_fh.close()

    if args.report:
        with open(args.report, "w", encoding="utf-8") as f:
            json.dump(result, f, indent=2)
    print(json.dumps(result["metrics"], indent=2))
    if log_fh:
        print(f"per-decision log written to {args.log_jsonl}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="blackjack_engine", description="Blackjack hand engine simulator")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: $LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Play rounds with an agent and report play statistics")
    p_run.add_argument("--agent", choices=sorted(AVAILABLE_AGENTS), default="basic")
    p_run.add_argument("--rounds", type=int, default=DEFAULT_ROUNDS)
    p_run.add_argument("--seed", type=int, default=DEFAULT_SEED)
    p_run.add_argument("--bet", type=float, default=DEFAULT_BET)
    p_run.add_argument("--rules", type=str, default=None, help="JSON file with table rules (defaults otherwise)")
    p_run.add_argument("--report", type=str, default=None, help="Write the full result as JSON to this file")
    p_run.add_argument("--guard", action="store_true", help="Wrap agent to log illegal actions and fall back to a legal one")
    # LLM settings
    p_run.add_argument("--llm-provider", type=str, choices=sorted(BACKENDS), default="openai")
    p_run.add_argument("--llm-model", type=str, default=None, help="LLM model name for --agent llm")
    p_run.add_argument("--llm-temperature", type=float, default=DEFAULT_TEMPERATURE)
    p_run.add_argument("--llm-debug", action="store_true", help="Include the chat messages in per-decision meta")
    # Debug/logging
    p_run.add_argument("--debug", action="store_true", help="Print per-decision debug lines to stdout")
    p_run.add_argument("--log-jsonl", type=str, default=None, help="Write per-decision JSONL events to this file")
    p_run.set_defaults(func=cmd_run)

    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
