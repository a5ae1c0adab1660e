from __future__ import annotations

from typing import List

from blackjack_engine.cards import Card, Rank, Suit
from blackjack_engine.hand import Hand

_SUITS = {"C": Suit.CLUBS, "D": Suit.DIAMONDS, "H": Suit.HEARTS, "S": Suit.SPADES}


def card(label: str) -> Card:
    """'TC' -> Ten of Clubs, 'AS' -> Ace of Spades."""
    return Card(_SUITS[label[-1]], Rank.from_symbol(label[:-1]))


def cards(*labels: str) -> List[Card]:
    return [card(x) for x in labels]


def hand(*labels: str, bet: float = 1.0) -> Hand:
    return Hand(cards(*labels), bet)
