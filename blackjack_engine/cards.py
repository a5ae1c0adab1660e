from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional

from .constants import SINGLE_DECK_SIZE
from .errors import CardError


class Suit(IntEnum):
    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3

    @classmethod
    def from_index(cls, index: int) -> "Suit":
        try:
            return cls(index)
        except ValueError:
            raise CardError(f"failed to parse suit from {index!r}") from None

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]


class Rank(IntEnum):
    ACE = 0
    TWO = 1
    THREE = 2
    FOUR = 3
    FIVE = 4
    SIX = 5
    SEVEN = 6
    EIGHT = 7
    NINE = 8
    TEN = 9
    JACK = 10
    QUEEN = 11
    KING = 12

    @classmethod
    def from_index(cls, index: int) -> "Rank":
        try:
            return cls(index)
        except ValueError:
            raise CardError(f"failed to parse rank from {index!r}") from None

    @classmethod
    def from_symbol(cls, symbol: str) -> "Rank":
        s = symbol.strip().upper()
        if s == "10":
            s = "T"
        for rank, sym in _RANK_SYMBOLS.items():
            if sym == s:
                return rank
        raise CardError(f"failed to parse rank from {symbol!r}")

    @property
    def points(self) -> int:
        """Blackjack point value with the Ace counted as 1."""
        return min(int(self) + 1, 10)

    @property
    def is_ten_value(self) -> bool:
        return self >= Rank.TEN

    @property
    def symbol(self) -> str:
        return _RANK_SYMBOLS[self]


_SUIT_SYMBOLS = {
    Suit.CLUBS: "♣",
    Suit.DIAMONDS: "♦",
    Suit.HEARTS: "♥",
    Suit.SPADES: "♠",
}

_RANK_SYMBOLS = {
    Rank.ACE: "A",
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "T",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
}


@dataclass(frozen=True, order=True)
class Card:
    suit: Suit
    rank: Rank

    def label(self) -> str:
        return f"{self.rank.symbol}{self.suit.symbol}"

    def __str__(self) -> str:
        return self.label()

    # One-byte card code: bits 0-1 suit, bits 2-5 rank, bits 6-7 unused.
    def to_byte(self) -> int:
        return (int(self.rank) << 2) | int(self.suit)

    @classmethod
    def from_byte(cls, value: int) -> "Card":
        if value & 0b1100_0000 or value < 0:
            raise CardError(f"invalid card code {value:#04x}")
        suit = Suit.from_index(value & 0b0000_0011)
        rank = Rank.from_index((value & 0b0011_1100) >> 2)
        return cls(suit, rank)


def hilo_delta(card: Card) -> int:
    if Rank.TWO <= card.rank <= Rank.SIX:
        return 1
    if card.rank == Rank.ACE or card.rank.is_ten_value:
        return -1
    return 0


class Shoe:
    """Ordered stack of cards dealt from the end.

    The shoe reports exhaustion by returning ``None`` from :meth:`draw`;
    deciding when to reshuffle belongs to whoever owns the shoe.
    """

    def __init__(self, decks: int = 6, seed: Optional[int] = None):
        if decks < 1:
            raise ValueError("shoe needs at least one deck")
        self.decks = decks
        self.rng = random.Random(seed)
        self._cards: List[Card] = []
        self.reshuffle()

    def _build(self) -> List[Card]:
        codes = list(range(SINGLE_DECK_SIZE)) * self.decks
        return [Card.from_byte(c) for c in codes]

    def reshuffle(self) -> None:
        self._cards = self._build()
        self.rng.shuffle(self._cards)

    def draw(self) -> Optional[Card]:
        if not self._cards:
            return None
        return self._cards.pop()

    def take(self, rank: Rank) -> Card:
        """Remove the card of ``rank`` nearest the draw end (used to force a start)."""
        for i in range(len(self._cards) - 1, -1, -1):
            if self._cards[i].rank == rank:
                return self._cards.pop(i)
        raise LookupError(f"no card of rank {rank.symbol} left in shoe")

    def cards(self) -> List[Card]:
        return list(self._cards)

    def remaining(self) -> int:
        return len(self._cards)

    def size(self) -> int:
        return self.decks * SINGLE_DECK_SIZE

    def decks_remaining(self) -> float:
        return self.remaining() / SINGLE_DECK_SIZE

    def running_count(self) -> int:
        # counted over the cards still in the shoe
        return sum(hilo_delta(c) for c in self._cards)

    def true_count(self) -> float:
        return self.running_count() / max(self.decks_remaining(), 0.25)

    def needs_shuffle(self, kind) -> bool:
        if kind.threshold is None:
            return True
        return self.remaining() < kind.threshold
