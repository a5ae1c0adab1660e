"""Language-model player.

The model is told what the engine knows about the hand: its ranks, whether
the total is hard or soft, the dealer upcard, and the table's limits on
doubling, splitting and surrender. Its reply is matched against the legal
actions; a reply that names none of them plays the first legal action.

Backends are chat functions ``ask(messages) -> str`` taking OpenAI-style
``{"role", "content"}`` messages, so tests can inject a plain function.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from openai import OpenAI

from ..constants import (
    DEFAULT_OLLAMA_HOST,
    DEFAULT_OLLAMA_MODEL,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_BACKOFF,
    DEFAULT_TEMPERATURE,
)
from ..rules import RuleSet
from ..types import Action, Observation

logger = logging.getLogger(__name__)

Messages = List[Dict[str, str]]
AskFn = Callable[[Messages], str]

_ACTION_WORDS = {
    "HIT": Action.HIT,
    "STAND": Action.STAND,
    "STAY": Action.STAND,
    "DOUBLE": Action.DOUBLE,
    "SPLIT": Action.SPLIT,
    "SURRENDER": Action.SURRENDER,
}


def parse_action(reply: str, allowed: List[Action]) -> Optional[Action]:
    """First word of ``reply`` that names an allowed action."""
    for word in re.findall(r"[A-Za-z]+", reply):
        action = _ACTION_WORDS.get(word.upper())
        if action is not None and action in allowed:
            return action
    return None


def describe_rules(rules: RuleSet) -> str:
    parts = ["Dealer hits soft 17." if rules.dealer_hits_soft_17() else "Dealer stands on soft 17."]
    if rules.double_down_totals is None:
        parts.append("You may double down on any two cards.")
    elif not rules.double_down_totals:
        parts.append("Doubling down is not offered.")
    else:
        totals = ", ".join(str(t) for t in sorted(rules.double_down_totals))
        parts.append(f"You may double down only on two-card totals of {totals}.")
    if not rules.double_after_split:
        parts.append("No doubling after a split.")
    parts.append(f"Pairs split up to {rules.max_hands} hands.")
    if rules.locks_split_aces():
        parts.append("Split aces take one card each and stand.")
    if rules.allows_surrender():
        parts.append(f"{rules.surrender.name.capitalize()} surrender gives back half the bet.")
    return " ".join(parts)


def describe_hand(obs: Observation) -> str:
    p = obs.player
    ranks = " ".join(c[:-1] for c in p.cards)
    if p.is_soft:
        # the ace is still counted as 11
        kind = f"soft {p.total}"
    else:
        kind = f"hard {p.total}"
    return f"Your cards: {ranks} ({kind})."


def openai_backend(model: str, temperature: float) -> AskFn:
    """Chat Completions backend; the client reads OPENAI_API_KEY."""
    client = OpenAI()

    def ask(messages: Messages) -> str:
        resp = client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=8,
        )
        return resp.choices[0].message.content or ""

    return ask


def ollama_backend(model: str, temperature: float, host: str = DEFAULT_OLLAMA_HOST) -> AskFn:
    """Backend for a local Ollama server's /api/chat endpoint."""
    session = requests.Session()

    def ask(messages: Messages) -> str:
        r = session.post(
            f"{host}/api/chat",
            json={
                "model": model,
                "messages": messages,
                "stream": False,
                "options": {"temperature": temperature},
            },
            timeout=DEFAULT_REQUEST_TIMEOUT,
        )
        r.raise_for_status()
        return r.json().get("message", {}).get("content", "")

    return ask


BACKENDS = {
    "openai": (openai_backend, DEFAULT_OPENAI_MODEL),
    "ollama": (ollama_backend, DEFAULT_OLLAMA_MODEL),
}


class LLMAgent:
    """Agent that asks a chat model for each decision.

    Pass ``ask_fn`` directly or name a ``provider`` from :data:`BACKENDS`.
    The rule set is described once in the system message; each decision
    sends the hand, the upcard and the legal moves. What the model said
    is recorded under ``info["llm"]``.
    """

    def __init__(
        self,
        rules: Optional[RuleSet] = None,
        ask_fn: Optional[AskFn] = None,
        *,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = DEFAULT_TEMPERATURE,
        retries: int = DEFAULT_RETRIES,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
        include_prompt: bool = False,
    ):
        if ask_fn is None:
            if provider not in BACKENDS:
                raise ValueError(f"LLMAgent needs ask_fn or a provider in: {', '.join(sorted(BACKENDS))}")
            factory, default_model = BACKENDS[provider]
            model = model or default_model
            ask_fn = factory(model, temperature)
        if retries < 0:
            raise ValueError("retries must not be negative")
        self.rules = rules or RuleSet()
        self.ask_fn = ask_fn
        self.provider = provider or "custom"
        self.model = model
        self.retries = retries
        self.retry_backoff = retry_backoff
        self.include_prompt = include_prompt
        self.system_prompt = (
            "You are playing blackjack. " + describe_rules(self.rules) + " Answer with a single action word."
        )

    def build_messages(self, obs: Observation) -> Messages:
        up = obs.dealer_upcard[:-1] if obs.dealer_upcard else "?"
        legal = ", ".join(a.name for a in obs.allowed_actions)
        lines = [f"Dealer shows {up}.", describe_hand(obs)]
        if obs.num_hands > 1:
            lines.append(f"This is split hand {obs.hand_index + 1} of {obs.num_hands}.")
        lines.append(f"Legal moves: {legal}.")
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": "\n".join(lines)},
        ]

    def _ask(self, messages: Messages) -> Tuple[str, int, Optional[str]]:
        error = None
        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                reply = str(self.ask_fn(messages) or "")
            except Exception as e:  # noqa: BLE001 - backends raise their own error types
                error = f"{type(e).__name__}: {e}"
                logger.warning("model request failed (%d/%d): %s", attempt, attempts, error)
            else:
                error = None
                if reply.strip():
                    return reply, attempt, None
            if attempt < attempts:
                time.sleep(self.retry_backoff * attempt)
        return "", attempts, error

    def act(self, observation: Observation, info: Any) -> Action:
        messages = self.build_messages(observation)
        reply, attempts, error = self._ask(messages)
        action = parse_action(reply, observation.allowed_actions)
        if isinstance(info, dict):
            record: Dict[str, Any] = {
                "provider": self.provider,
                "model": self.model,
                "reply": reply,
                "attempts": attempts,
                "parsed": action is not None,
            }
            if error is not None:
                record["error"] = error
            if self.include_prompt:
                record["messages"] = messages
            info["llm"] = record
        if action is None:
            logger.debug("no legal action in reply %r; playing %s", reply, observation.allowed_actions[0].name)
            return observation.allowed_actions[0]
        return action
