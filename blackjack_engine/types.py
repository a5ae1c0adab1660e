from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Union

from .constants import BLACKJACK, SOFT_BONUS


class Action(Enum):
    HIT = auto()
    STAND = auto()
    DOUBLE = auto()
    SPLIT = auto()
    SURRENDER = auto()


class HandState(Enum):
    FRESH = auto()
    SPLIT = auto()
    SPLIT_ACES_LOCKED = auto()
    STOOD = auto()
    BUSTED = auto()
    DOUBLED_DOWN = auto()
    SURRENDERED = auto()

    @property
    def is_terminal(self) -> bool:
        return self not in (HandState.FRESH, HandState.SPLIT)


@dataclass(frozen=True)
class Hard:
    total: int

    @property
    def lower(self) -> int:
        return self.total

    @property
    def upper(self) -> int:
        return self.total

    @property
    def is_soft(self) -> bool:
        return False

    @property
    def best(self) -> int:
        return self.total


@dataclass(frozen=True)
class Soft:
    """Two simultaneous totals: every Ace as 1, or one Ace promoted to 11."""

    lower: int
    upper: int

    def __post_init__(self):
        if self.upper != self.lower + SOFT_BONUS:
            raise ValueError(f"soft upper total must be lower + {SOFT_BONUS}")

    @property
    def is_soft(self) -> bool:
        return True

    @property
    def best(self) -> int:
        return self.upper if self.upper <= BLACKJACK else self.lower


HandValue = Union[Hard, Soft]


@dataclass
class HandView:
    cards: List[str]
    total: int
    is_soft: bool
    can_split: bool
    can_double: bool


@dataclass
class Observation:
    player: HandView
    dealer_upcard: Optional[str]
    hand_index: int
    num_hands: int
    allowed_actions: List[Action]
    running_count: Optional[int] = None
    true_count: Optional[float] = None
