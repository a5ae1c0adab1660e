"""The hand state machine.

A :class:`Hand` owns its cards, its bet and its :class:`HandState`. Every
mutating operation has a matching ``can_*`` predicate; the operation raises
:class:`IllegalTransition` exactly when the predicate is false, so a caller
that consults the predicates never sees the exception.

Cards are always supplied by the caller. The hand never draws, and it only
reads the :class:`RuleSet` it is given.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .cards import Card, Rank
from .constants import BLACKJACK, SOFT_BONUS
from .errors import IllegalTransition
from .rules import RuleSet
from .types import Action, Hard, HandState, HandValue, Soft

logger = logging.getLogger(__name__)


class Hand:
    def __init__(self, cards: Iterable[Card], bet: float):
        self._cards: List[Card] = list(cards)
        if len(self._cards) != 2:
            raise ValueError(f"a hand is dealt exactly two cards, got {len(self._cards)}")
        if bet <= 0:
            raise ValueError("bet must be positive")
        self._bet = bet
        self._state = HandState.FRESH

    def __repr__(self) -> str:
        labels = " ".join(c.label() for c in self._cards)
        return f"Hand([{labels}], bet={self._bet}, state={self._state.name})"

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    @property
    def bet(self) -> float:
        return self._bet

    @property
    def state(self) -> HandState:
        return self._state

    # -- value -------------------------------------------------------------

    def value(self) -> HandValue:
        # Only one Ace is ever promoted: a second one at 11 would add 10 more
        # and push the upper total past 21.
        base = sum(c.rank.points for c in self._cards)
        if any(c.rank == Rank.ACE for c in self._cards):
            return Soft(base, base + SOFT_BONUS)
        return Hard(base)

    def is_bust(self) -> bool:
        return self.value().lower > BLACKJACK

    def is_21(self) -> bool:
        v = self.value()
        return v.lower == BLACKJACK or v.upper == BLACKJACK

    def is_pair(self) -> bool:
        return len(self._cards) == 2 and self._cards[0].rank == self._cards[1].rank

    def is_natural(self) -> bool:
        return len(self._cards) == 2 and self.is_21()

    def is_terminal(self) -> bool:
        return self._state.is_terminal

    # -- legality ----------------------------------------------------------

    def can_hit(self) -> bool:
        return not self.is_terminal()

    def can_stand(self) -> bool:
        return not self.is_terminal()

    def can_double_down(self, rules: RuleSet) -> bool:
        return self._double_down_refusal(rules) is None

    def can_split(self, rules: RuleSet, num_hands: int = 1) -> bool:
        return self._split_refusal(rules, num_hands) is None

    def can_surrender(self, rules: RuleSet) -> bool:
        return self._surrender_refusal(rules) is None

    def legal_actions(self, rules: RuleSet, num_hands: int = 1) -> List[Action]:
        allowed: List[Action] = []
        if self.can_hit():
            allowed.append(Action.HIT)
        if self.can_stand():
            allowed.append(Action.STAND)
        if self.can_double_down(rules):
            allowed.append(Action.DOUBLE)
        if self.can_split(rules, num_hands):
            allowed.append(Action.SPLIT)
        if self.can_surrender(rules):
            allowed.append(Action.SURRENDER)
        return allowed

    def _double_down_refusal(self, rules: RuleSet) -> Optional[str]:
        if self.is_terminal():
            return "hand is finished"
        if len(self._cards) != 2:
            return "double down needs exactly two cards"
        if self._state == HandState.SPLIT and not rules.double_after_split:
            return "double after split not allowed"
        if not rules.allows_double_on(self.value()):
            return "total not in double down allow-list"
        return None

    def _split_refusal(self, rules: RuleSet, num_hands: int) -> Optional[str]:
        if self.is_terminal():
            return "hand is finished"
        if not self.is_pair():
            return "hand is not a pair"
        if num_hands >= rules.max_hands:
            return f"already holding {num_hands} of {rules.max_hands} hands"
        return None

    def _surrender_refusal(self, rules: RuleSet) -> Optional[str]:
        if self.is_terminal():
            return "hand is finished"
        if not rules.allows_surrender():
            return "surrender not offered"
        return None

    # -- transitions -------------------------------------------------------

    def _require(self, operation: str, refusal: Optional[str]) -> None:
        if refusal is not None:
            raise IllegalTransition(operation, self._state, refusal)

    def _enter(self, state: HandState) -> None:
        logger.debug("%r -> %s", self, state.name)
        self._state = state

    def hit(self, card: Card) -> None:
        self._require("hit", "hand is finished" if self.is_terminal() else None)
        self._cards.append(card)
        if self.is_bust():
            self._enter(HandState.BUSTED)

    def stand(self) -> None:
        self._require("stand", "hand is finished" if self.is_terminal() else None)
        self._enter(HandState.STOOD)

    def double_down(self, rules: RuleSet, card: Optional[Card] = None) -> None:
        """Double the bet and finish the hand.

        ``card`` is the one card a double receives; it may be passed here or
        dealt by the caller before settlement.
        """
        self._require("double_down", self._double_down_refusal(rules))
        self._bet = self._bet * 2
        if card is not None:
            self._cards.append(card)
        self._enter(HandState.DOUBLED_DOWN)

    def split(self, card1: Card, card2: Card, rules: RuleSet, num_hands: int = 1) -> "Hand":
        """Split a pair in place and return the new second hand.

        ``num_hands`` is how many hands the player holds before splitting,
        this one included.
        """
        self._require("split", self._split_refusal(rules, num_hands))
        first, second = self._cards
        state = HandState.SPLIT
        if first.rank == Rank.ACE and rules.locks_split_aces():
            state = HandState.SPLIT_ACES_LOCKED
        self._cards = [first, card1]
        self._enter(state)
        other = Hand([second, card2], self._bet)
        other._enter(state)
        return other

    def surrender(self, rules: RuleSet) -> None:
        self._require("surrender", self._surrender_refusal(rules))
        self._bet = self._bet / 2
        self._enter(HandState.SURRENDERED)
