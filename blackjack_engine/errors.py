"""Exceptions raised by the blackjack engine."""

from __future__ import annotations


class CardError(ValueError):
    """A suit, rank or card code could not be decoded."""


class RuleSetError(ValueError):
    """Base class for table configuration that fails validation."""

    message = "invalid rule set"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class InvalidDeckCount(RuleSetError):
    message = "must have at least 1 deck"


class InvalidPlayerCount(RuleSetError):
    message = "must have at least 1 player"


class InvalidBetRange(RuleSetError):
    message = "min bet must be greater than 0 and not exceed max bet"


class InvalidMaxHands(RuleSetError):
    message = "must allow at least 2 hands"


class InvalidDoubleDownWhitelist(RuleSetError):
    message = "double down totals must lie between 3 and 20"


class IllegalTransition(RuntimeError):
    """A mutating hand operation was called while its legality predicate is false."""

    def __init__(self, operation: str, state: object, reason: str = ""):
        self.operation = operation
        self.state = state
        self.reason = reason
        msg = f"illegal {operation} on hand in state {getattr(state, 'name', state)}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
