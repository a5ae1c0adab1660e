from .cards import Card, Rank, Shoe, Suit
from .errors import (
    CardError,
    IllegalTransition,
    InvalidBetRange,
    InvalidDeckCount,
    InvalidDoubleDownWhitelist,
    InvalidMaxHands,
    InvalidPlayerCount,
    RuleSetError,
)
from .hand import Hand
from .rules import DealerOnSoft17, RuleSet, ShuffleKind, SurrenderPolicy
from .table import Table
from .types import Action, Hard, HandState, HandValue, HandView, Observation, Soft

__all__ = [
    "Action",
    "Card",
    "CardError",
    "DealerOnSoft17",
    "Hand",
    "HandState",
    "HandValue",
    "HandView",
    "Hard",
    "IllegalTransition",
    "InvalidBetRange",
    "InvalidDeckCount",
    "InvalidDoubleDownWhitelist",
    "InvalidMaxHands",
    "InvalidPlayerCount",
    "Observation",
    "Rank",
    "RuleSet",
    "RuleSetError",
    "Shoe",
    "ShuffleKind",
    "Soft",
    "Suit",
    "SurrenderPolicy",
    "Table",
]
