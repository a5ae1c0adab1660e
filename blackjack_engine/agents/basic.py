from __future__ import annotations

from typing import Any

from ..types import Action, Observation


def upcard_value(upcard: str) -> int:
    """Numeric value of a dealer upcard label like '9♥' or 'K♠' (Ace is 11)."""
    r = upcard[:-1]
    if r in ("T", "J", "Q", "K"):
        return 10
    if r == "A":
        return 11
    return int(r)


class BasicStrategyAgent:
    """Six-deck, H17, DAS basic strategy.

    Notes:
    - Pair play only applies to true rank pairs; T,K is played as hard 20.
    - Late surrender of hard 16 vs 9/T/A and hard 15 vs T when the table offers it.
    - DOUBLE, SPLIT and SURRENDER are only returned when allowed; otherwise the
      chart's fallback (HIT or STAND) is used.
    """

    def act(self, observation: Observation, info: Any) -> Action:
        if observation.dealer_upcard is None:
            raise ValueError("basic strategy needs a dealer upcard")
        actions = observation.allowed_actions

        if Action.SURRENDER in actions and not observation.player.is_soft:
            if self._should_surrender(observation):
                return Action.SURRENDER

        if observation.player.can_split and Action.SPLIT in actions:
            pair_action = self._pair_decision(observation)
            if pair_action is not None:
                return pair_action

        if observation.player.is_soft:
            return self._soft_total_decision(observation)
        return self._hard_total_decision(observation)

    def _should_surrender(self, obs: Observation) -> bool:
        if len(obs.player.cards) != 2:
            return False
        up = upcard_value(obs.dealer_upcard)
        total = obs.player.total
        if total == 16 and up in (9, 10, 11):
            # 8,8 is split instead when the split is still available
            return not (obs.player.can_split and obs.player.cards[0][:-1] == "8")
        return total == 15 and up == 10

    def _soft_total_decision(self, obs: Observation) -> Action:
        up = upcard_value(obs.dealer_upcard)
        total = obs.player.total
        can_double = obs.player.can_double
        if total in (13, 14):  # A,2 / A,3
            if up in (5, 6) and can_double:
                return Action.DOUBLE
            return Action.HIT
        if total in (15, 16):  # A,4 / A,5
            if up in (4, 5, 6) and can_double:
                return Action.DOUBLE
            return Action.HIT
        if total == 17:  # A,6
            if up in (3, 4, 5, 6) and can_double:
                return Action.DOUBLE
            return Action.HIT
        if total == 18:  # A,7
            if up in (2, 3, 4, 5, 6) and can_double:
                return Action.DOUBLE
            if up in (9, 10, 11):
                return Action.HIT
            return Action.STAND
        if total == 19:  # A,8
            if up == 6 and can_double:
                return Action.DOUBLE
            return Action.STAND
        if total <= 12:  # A,A after the split option is gone
            return Action.HIT
        return Action.STAND

    def _hard_total_decision(self, obs: Observation) -> Action:
        up = upcard_value(obs.dealer_upcard)
        total = obs.player.total
        can_double = obs.player.can_double

        if total <= 8:
            return Action.HIT
        if total == 9:
            if up in (3, 4, 5, 6) and can_double:
                return Action.DOUBLE
            return Action.HIT
        if total == 10:
            if up <= 9 and can_double:
                return Action.DOUBLE
            return Action.HIT
        if total == 11:
            if can_double:
                return Action.DOUBLE
            return Action.HIT
        if total == 12:
            if up in (4, 5, 6):
                return Action.STAND
            return Action.HIT
        if 13 <= total <= 16:
            if up <= 6:
                return Action.STAND
            return Action.HIT
        return Action.STAND

    def _pair_decision(self, obs: Observation) -> Action | None:
        pair = obs.player.cards[0][:-1]
        up = upcard_value(obs.dealer_upcard)

        if pair in ("A", "8"):
            return Action.SPLIT
        if pair in ("T", "J", "Q", "K", "5"):
            return None  # never split tens or fives
        if pair == "9":
            if up in (7, 10, 11):
                return None
            return Action.SPLIT
        if pair == "7":
            return Action.SPLIT if up <= 7 else None
        if pair == "6":
            return Action.SPLIT if up <= 6 else None
        if pair == "4":
            return Action.SPLIT if up in (5, 6) else None
        if pair in ("2", "3"):
            return Action.SPLIT if up <= 7 else None
        return None
