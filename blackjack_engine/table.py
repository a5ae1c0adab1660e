from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .cards import Card, Rank, Shoe
from .constants import BLACKJACK
from .hand import Hand
from .rules import RuleSet
from .types import Action, HandView, Observation

logger = logging.getLogger(__name__)


def observation_to_dict(obs: Observation) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "player": {
            "cards": obs.player.cards,
            "total": obs.player.total,
            "is_soft": obs.player.is_soft,
            "can_split": obs.player.can_split,
            "can_double": obs.player.can_double,
        },
        "dealer_upcard": obs.dealer_upcard,
        "hand_index": obs.hand_index,
        "num_hands": obs.num_hands,
        "allowed_actions": [a.name for a in obs.allowed_actions],
    }
    if obs.running_count is not None:
        out["running_count"] = obs.running_count
    if obs.true_count is not None:
        out["true_count"] = obs.true_count
    return out


class Table:
    """Single-player table: deals from the shoe and drives hands with an agent.

    The agent is any object with ``act(observation, info) -> Action``. Every
    action goes through the :class:`Hand` transitions, so an agent that picks
    an action outside ``observation.allowed_actions`` raises
    :class:`~blackjack_engine.errors.IllegalTransition`.
    """

    def __init__(self, rules: Optional[RuleSet] = None, shoe: Optional[Shoe] = None, seed: Optional[int] = None, expose_count: bool = True):
        self.rules = rules or RuleSet()
        self.shoe = shoe or Shoe(self.rules.decks, seed=seed)
        self.hands: List[Hand] = []
        self.active_index = 0
        self.dealer_upcard: Optional[Card] = None
        self.expose_count = expose_count

    def _draw(self) -> Card:
        card = self.shoe.draw()
        if card is None:
            logger.warning("shoe exhausted mid-round; reshuffling %d deck(s)", self.shoe.decks)
            self.shoe.reshuffle()
            card = self.shoe.draw()
        return card

    # Optional forced start: dict with keys 'p1','p2','du' rank symbols (e.g. 'A','2','T')
    def deal(self, bet: float, start: Optional[Dict[str, str]] = None) -> Hand:
        if self.shoe.needs_shuffle(self.rules.shuffle_kind):
            logger.info("reshuffling shoe (%d cards left)", self.shoe.remaining())
            self.shoe.reshuffle()
        if start is None:
            cards = [self._draw(), self._draw()]
            self.dealer_upcard = self._draw()
        else:
            cards = [self.shoe.take(Rank.from_symbol(start["p1"])), self.shoe.take(Rank.from_symbol(start["p2"]))]
            self.dealer_upcard = self.shoe.take(Rank.from_symbol(start["du"]))
        self.hands = [Hand(cards, bet)]
        self.active_index = 0
        return self.hands[0]

    def observation(self) -> Observation:
        hand = self.hands[self.active_index]
        value = hand.value()
        allowed = hand.legal_actions(self.rules, len(self.hands))
        hv = HandView(
            cards=[c.label() for c in hand.cards],
            total=value.best,
            is_soft=value.is_soft and value.upper <= BLACKJACK,
            can_split=Action.SPLIT in allowed,
            can_double=Action.DOUBLE in allowed,
        )
        return Observation(
            player=hv,
            dealer_upcard=self.dealer_upcard.label() if self.dealer_upcard else None,
            hand_index=self.active_index,
            num_hands=len(self.hands),
            allowed_actions=allowed,
            running_count=self.shoe.running_count() if self.expose_count else None,
            true_count=self.shoe.true_count() if self.expose_count else None,
        )

    def apply(self, action: Action) -> None:
        """Apply ``action`` to the active hand, dealing whatever cards it needs."""
        i = self.active_index
        hand = self.hands[i]
        if action == Action.HIT:
            card = self._draw() if hand.can_hit() else None
            hand.hit(card)
        elif action == Action.STAND:
            hand.stand()
        elif action == Action.DOUBLE:
            card = self._draw() if hand.can_double_down(self.rules) else None
            hand.double_down(self.rules, card)
        elif action == Action.SPLIT:
            c1 = c2 = None
            if hand.can_split(self.rules, len(self.hands)):
                c1, c2 = self._draw(), self._draw()
            new_hand = hand.split(c1, c2, self.rules, len(self.hands))
            self.hands.insert(i + 1, new_hand)
        elif action == Action.SURRENDER:
            hand.surrender(self.rules)
        else:
            raise ValueError(f"Unknown action: {action!r}")

    def play_round(
        self,
        agent: Any,
        bet: Optional[float] = None,
        start: Optional[Dict[str, str]] = None,
        *,
        log_fn: Optional[Callable[[Dict], None]] = None,
    ) -> Dict:
        self.deal(self.rules.min_bet if bet is None else bet, start)
        trace: Dict = {"decisions": []}
        natural = self.hands[0].is_natural()
        if natural:
            # nothing to decide on a natural
            self.hands[0].stand()
            return self._summary(trace, natural)

        # hands inserted by splits are played in order after the one that split
        i = 0
        while i < len(self.hands):
            self.active_index = i
            hand = self.hands[i]
            while not hand.is_terminal():
                obs = self.observation()
                meta: Dict = {}
                action = agent.act(obs, meta)
                decision = {
                    "hand_index": i,
                    "obs": observation_to_dict(obs),
                    "action": action.name,
                    "meta": meta,
                }
                trace["decisions"].append(decision)
                if log_fn is not None:
                    log_fn(decision)
                self.apply(action)
            i += 1
        return self._summary(trace, natural)

    def _summary(self, trace: Dict, natural: bool) -> Dict:
        return {
            "dealer_upcard": self.dealer_upcard.label() if self.dealer_upcard else None,
            "hands": [[c.label() for c in h.cards] for h in self.hands],
            "bets": [h.bet for h in self.hands],
            "states": [h.state.name for h in self.hands],
            "totals": [h.value().best for h in self.hands],
            "busted": [h.is_bust() for h in self.hands],
            "natural": natural,
            "trace": trace,
        }
