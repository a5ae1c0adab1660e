import pytest

from blackjack_engine.rules import RuleSet


@pytest.fixture
def rules() -> RuleSet:
    return RuleSet()
