from __future__ import annotations

import json
from dataclasses import dataclass, fields
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .constants import (
    DEFAULT_BLACKJACK_PAYOUT,
    DEFAULT_DECKS,
    DEFAULT_MAX_BET,
    DEFAULT_MAX_HANDS,
    DEFAULT_MIN_BET,
    DEFAULT_PLAYERS,
    DEFAULT_SHUFFLE_THRESHOLD,
    DOUBLE_DOWN_MAX_TOTAL,
    DOUBLE_DOWN_MIN_TOTAL,
)
from .errors import (
    InvalidBetRange,
    InvalidDeckCount,
    InvalidDoubleDownWhitelist,
    InvalidMaxHands,
    InvalidPlayerCount,
    RuleSetError,
)
from .types import HandValue


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class DealerOnSoft17(Enum):
    H17 = auto()
    S17 = auto()


class SurrenderPolicy(Enum):
    NONE = auto()
    EARLY = auto()  # before the dealer checks for blackjack
    LATE = auto()


@dataclass(frozen=True)
class ShuffleKind:
    """When the shoe is rebuilt: before every round, or below ``threshold`` cards."""

    threshold: Optional[int] = None

    def __post_init__(self):
        if self.threshold is None:
            return
        if not _is_int(self.threshold) or self.threshold < 1:
            raise ValueError(f"shuffle threshold must be a positive number of cards, got {self.threshold!r}")

    @classmethod
    def continuous(cls) -> "ShuffleKind":
        return cls(None)

    @classmethod
    def at_threshold(cls, cards: int) -> "ShuffleKind":
        return cls(cards)

    def to_json(self) -> Union[str, Dict[str, int]]:
        if self.threshold is None:
            return "continuous"
        return {"threshold": self.threshold}

    @classmethod
    def from_json(cls, raw: Any) -> "ShuffleKind":
        if isinstance(raw, str) and raw.lower() == "continuous":
            return cls.continuous()
        if isinstance(raw, dict) and set(raw) == {"threshold"}:
            return cls.at_threshold(raw["threshold"])
        raise ValueError(f"unrecognized shuffle_kind: {raw!r}")


@dataclass(frozen=True)
class RuleSet:
    # table setup
    decks: int = DEFAULT_DECKS
    players: int = DEFAULT_PLAYERS
    min_bet: float = DEFAULT_MIN_BET
    max_bet: float = DEFAULT_MAX_BET
    shuffle_kind: ShuffleKind = ShuffleKind(DEFAULT_SHUFFLE_THRESHOLD)

    # dealer rules
    dealer_on_soft_17: DealerOnSoft17 = DealerOnSoft17.H17

    blackjack_payout: float = DEFAULT_BLACKJACK_PAYOUT

    # doubling down; None means any two-card total
    double_down_totals: Optional[Tuple[int, ...]] = None

    # splitting
    max_hands: int = DEFAULT_MAX_HANDS  # total hands after splits
    split_aces_playable: bool = False
    double_after_split: bool = True

    surrender: SurrenderPolicy = SurrenderPolicy.NONE

    def __post_init__(self):
        # Values are checked, never coerced: "6" or 10.7 is an error, not 6 or 10.
        if not _is_int(self.decks):
            raise InvalidDeckCount(f"deck count must be an integer, got {self.decks!r}")
        if self.decks < 1:
            raise InvalidDeckCount()
        if not _is_int(self.players):
            raise InvalidPlayerCount(f"player count must be an integer, got {self.players!r}")
        if self.players < 1:
            raise InvalidPlayerCount()
        if not (_is_number(self.min_bet) and _is_number(self.max_bet)):
            raise InvalidBetRange(f"bets must be numbers, got {self.min_bet!r}..{self.max_bet!r}")
        if not (self.min_bet > 0 and self.min_bet <= self.max_bet):
            raise InvalidBetRange()
        if not _is_int(self.max_hands):
            raise InvalidMaxHands(f"max hands must be an integer, got {self.max_hands!r}")
        if self.max_hands < 2:
            raise InvalidMaxHands()
        if self.double_down_totals is not None:
            if not isinstance(self.double_down_totals, (list, tuple, set, frozenset)):
                raise InvalidDoubleDownWhitelist(
                    f"double down totals must be a list of integers, got {self.double_down_totals!r}"
                )
            totals = tuple(self.double_down_totals)
            for total in totals:
                if not _is_int(total):
                    raise InvalidDoubleDownWhitelist(f"double down total must be an integer, got {total!r}")
                if total < DOUBLE_DOWN_MIN_TOTAL or total > DOUBLE_DOWN_MAX_TOTAL:
                    raise InvalidDoubleDownWhitelist(
                        f"double down total {total} outside {DOUBLE_DOWN_MIN_TOTAL}..{DOUBLE_DOWN_MAX_TOTAL}"
                    )
            # lists from JSON are normalized so the rule set stays hashable
            object.__setattr__(self, "double_down_totals", totals)
        if not _is_number(self.blackjack_payout) or self.blackjack_payout <= 0:
            raise RuleSetError(f"blackjack payout must be a positive number, got {self.blackjack_payout!r}")
        for name in ("split_aces_playable", "double_after_split"):
            if not isinstance(getattr(self, name), bool):
                raise RuleSetError(f"{name} must be true or false, got {getattr(self, name)!r}")
        if not isinstance(self.shuffle_kind, ShuffleKind):
            raise RuleSetError(f"shuffle_kind must be a ShuffleKind, got {self.shuffle_kind!r}")

    def allows_double_on(self, value: HandValue) -> bool:
        if self.double_down_totals is None:
            return True
        return value.lower in self.double_down_totals or value.upper in self.double_down_totals

    def locks_split_aces(self) -> bool:
        return not self.split_aces_playable

    def allows_surrender(self) -> bool:
        return self.surrender is not SurrenderPolicy.NONE

    def dealer_hits_soft_17(self) -> bool:
        return self.dealer_on_soft_17 is DealerOnSoft17.H17

    def to_dict(self) -> Dict[str, Any]:
        return {
            "decks": self.decks,
            "players": self.players,
            "min_bet": self.min_bet,
            "max_bet": self.max_bet,
            "shuffle_kind": self.shuffle_kind.to_json(),
            "dealer_on_soft_17": self.dealer_on_soft_17.name,
            "blackjack_payout": self.blackjack_payout,
            "double_down_totals": list(self.double_down_totals) if self.double_down_totals is not None else None,
            "max_hands": self.max_hands,
            "split_aces_playable": self.split_aces_playable,
            "double_after_split": self.double_after_split,
            "surrender": self.surrender.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RuleSet":
        if not isinstance(data, dict):
            raise RuleSetError(f"rule set must be a JSON object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown rule set keys: {', '.join(sorted(unknown))}")
        kwargs = dict(data)
        if "shuffle_kind" in kwargs:
            kwargs["shuffle_kind"] = ShuffleKind.from_json(kwargs["shuffle_kind"])
        if "dealer_on_soft_17" in kwargs:
            kwargs["dealer_on_soft_17"] = _enum_by_name(DealerOnSoft17, kwargs["dealer_on_soft_17"])
        if "surrender" in kwargs:
            kwargs["surrender"] = _enum_by_name(SurrenderPolicy, kwargs["surrender"])
        return cls(**kwargs)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "RuleSet":
        with open(path, "r", encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))


def _enum_by_name(enum_cls, raw: Any):
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls[str(raw).upper()]
    except KeyError:
        choices = ", ".join(m.name.lower() for m in enum_cls)
        raise ValueError(f"{raw!r} is not one of: {choices}") from None
