import pytest

from blackjack_engine.agents import BasicStrategyAgent, CallableAgent, GuardedAgent, LLMAgent, RandomAgent
from blackjack_engine.agents.basic import upcard_value
from blackjack_engine.agents.llm_agent import describe_hand, describe_rules, parse_action
from blackjack_engine.rules import DealerOnSoft17, RuleSet, SurrenderPolicy
from blackjack_engine.types import Action, HandView, Observation

HIT_STAND = [Action.HIT, Action.STAND]


def make_obs(cards, total, up="6♣", is_soft=False, allowed=None):
    allowed = list(allowed or HIT_STAND)
    return Observation(
        player=HandView(
            cards=cards,
            total=total,
            is_soft=is_soft,
            can_split=Action.SPLIT in allowed,
            can_double=Action.DOUBLE in allowed,
        ),
        dealer_upcard=up,
        hand_index=0,
        num_hands=1,
        allowed_actions=allowed,
    )


def test_upcard_value():
    assert upcard_value("A♠") == 11
    assert upcard_value("K♥") == 10
    assert upcard_value("T♦") == 10
    assert upcard_value("7♣") == 7


class TestBasicStrategy:
    agent = BasicStrategyAgent()

    def test_doubles_eleven_when_allowed(self):
        obs = make_obs(["5♣", "6♦"], 11, allowed=HIT_STAND + [Action.DOUBLE])
        assert self.agent.act(obs, {}) == Action.DOUBLE

    def test_hits_eleven_when_double_refused(self):
        assert self.agent.act(make_obs(["5♣", "6♦"], 11), {}) == Action.HIT

    def test_stands_on_twelve_vs_four(self):
        assert self.agent.act(make_obs(["T♣", "2♦"], 12, up="4♠"), {}) == Action.STAND

    def test_surrenders_sixteen_vs_ten(self):
        obs = make_obs(["T♣", "6♦"], 16, up="K♠", allowed=HIT_STAND + [Action.SURRENDER])
        assert self.agent.act(obs, {}) == Action.SURRENDER

    def test_hits_sixteen_vs_ten_without_surrender(self):
        assert self.agent.act(make_obs(["T♣", "6♦"], 16, up="K♠"), {}) == Action.HIT

    def test_splits_eights_instead_of_surrendering(self):
        allowed = HIT_STAND + [Action.DOUBLE, Action.SPLIT, Action.SURRENDER]
        obs = make_obs(["8♣", "8♦"], 16, up="T♠", allowed=allowed)
        assert self.agent.act(obs, {}) == Action.SPLIT

    def test_never_splits_tens(self):
        allowed = HIT_STAND + [Action.DOUBLE, Action.SPLIT]
        assert self.agent.act(make_obs(["T♣", "T♦"], 20, allowed=allowed), {}) == Action.STAND

    def test_soft_eighteen(self):
        assert self.agent.act(make_obs(["A♣", "7♦"], 18, up="9♠", is_soft=True), {}) == Action.HIT
        assert self.agent.act(make_obs(["A♣", "7♦"], 18, up="7♠", is_soft=True), {}) == Action.STAND

    def test_needs_upcard(self):
        obs = make_obs(["T♣", "6♦"], 16, up=None)
        with pytest.raises(ValueError):
            self.agent.act(obs, {})


def test_random_agent_picks_allowed_and_is_seeded():
    allowed = HIT_STAND + [Action.DOUBLE]
    obs = make_obs(["5♣", "6♦"], 11, allowed=allowed)
    a = [RandomAgent(seed=3).act(obs, {}) for _ in range(5)]
    b = [RandomAgent(seed=3).act(obs, {}) for _ in range(5)]
    assert a == b
    assert all(x in allowed for x in a)


def test_guarded_agent_falls_back_to_stand():
    guarded = GuardedAgent(CallableAgent(lambda obs: Action.SURRENDER))
    info = {}
    assert guarded.act(make_obs(["T♣", "6♦"], 16), info) == Action.STAND
    assert guarded.illegal_count == 1
    assert info["illegal_attempt"] == "SURRENDER"
    assert guarded.illegal_log == [{"attempted": "SURRENDER", "allowed": ["HIT", "STAND"]}]
    assert guarded.illegal_rate(4) == 0.25
    guarded.reset_illegals()
    assert guarded.illegal_count == 0


def test_guarded_agent_passes_legal_actions():
    guarded = GuardedAgent(CallableAgent(lambda obs: Action.HIT))
    assert guarded.act(make_obs(["T♣", "2♦"], 12), {}) == Action.HIT
    assert guarded.illegal_count == 0


def test_callable_agent_rejects_non_actions():
    agent = CallableAgent(lambda obs: "HIT")
    with pytest.raises(TypeError):
        agent.act(make_obs(["T♣", "2♦"], 12), {})


def test_random_agent_avoids_actions_when_possible():
    agent = RandomAgent(seed=0, avoid=[Action.HIT, Action.DOUBLE])
    obs = make_obs(["5♣", "6♦"], 11, allowed=HIT_STAND + [Action.DOUBLE])
    assert {agent.act(obs, {}) for _ in range(20)} == {Action.STAND}
    only_hit = make_obs(["5♣", "6♦"], 11, allowed=[Action.HIT])
    assert agent.act(only_hit, {}) == Action.HIT


def test_parse_action_reads_words_in_order():
    assert parse_action("I would HIT here", HIT_STAND) == Action.HIT
    assert parse_action("stand.", HIT_STAND) == Action.STAND
    assert parse_action("Stay", HIT_STAND) == Action.STAND
    assert parse_action("Double down!", HIT_STAND + [Action.DOUBLE]) == Action.DOUBLE
    # words naming illegal actions are skipped
    assert parse_action("split, or else hit", HIT_STAND) == Action.HIT
    assert parse_action("DOUBLE", HIT_STAND) is None
    assert parse_action("", HIT_STAND) is None


def test_describe_rules_names_table_limits():
    rules = RuleSet(
        dealer_on_soft_17=DealerOnSoft17.S17,
        double_down_totals=(11, 10),
        double_after_split=False,
        max_hands=3,
        surrender=SurrenderPolicy.LATE,
    )
    text = describe_rules(rules)
    assert "Dealer stands on soft 17." in text
    assert "two-card totals of 10, 11" in text
    assert "No doubling after a split." in text
    assert "up to 3 hands" in text
    assert "Split aces take one card each" in text
    assert "Late surrender" in text
    assert "surrender" not in describe_rules(RuleSet())
    assert "any two cards" in describe_rules(RuleSet())
    assert "not offered" in describe_rules(RuleSet(double_down_totals=()))


def test_describe_hand_separates_soft_and_hard():
    assert describe_hand(make_obs(["A♣", "7♦"], 18, is_soft=True)) == "Your cards: A 7 (soft 18)."
    assert describe_hand(make_obs(["T♣", "6♦"], 16)) == "Your cards: T 6 (hard 16)."


def test_llm_agent_sends_rules_and_hand():
    sent = []

    def ask(messages):
        sent.append(messages)
        return "Stand"

    rules = RuleSet(surrender=SurrenderPolicy.LATE)
    agent = LLMAgent(rules, ask, include_prompt=True)
    info = {}
    obs = make_obs(["T♣", "7♦"], 17, up="9♠", allowed=HIT_STAND + [Action.SURRENDER])
    assert agent.act(obs, info) == Action.STAND
    system, user = sent[0]
    assert system["role"] == "system" and "Late surrender" in system["content"]
    assert "Dealer shows 9." in user["content"]
    assert "(hard 17)" in user["content"]
    assert "Legal moves: HIT, STAND, SURRENDER." in user["content"]
    assert info["llm"]["parsed"] is True
    assert info["llm"]["attempts"] == 1
    assert info["llm"]["messages"] == sent[0]


def test_llm_agent_mentions_split_hands():
    sent = []
    agent = LLMAgent(ask_fn=lambda m: sent.append(m) or "hit")
    obs = make_obs(["8♣", "3♦"], 11)
    obs.hand_index, obs.num_hands = 1, 2
    assert agent.act(obs, {}) == Action.HIT
    assert "split hand 2 of 2" in sent[0][1]["content"]


def test_llm_agent_retries_then_plays_first_legal(monkeypatch):
    monkeypatch.setattr("blackjack_engine.agents.llm_agent.time.sleep", lambda s: None)
    calls = []

    def ask(messages):
        calls.append(messages)
        raise ConnectionError("down")

    agent = LLMAgent(ask_fn=ask, retries=2)
    info = {}
    assert agent.act(make_obs(["T♣", "7♦"], 17), info) == Action.HIT
    assert len(calls) == 3
    assert info["llm"]["parsed"] is False
    assert "ConnectionError" in info["llm"]["error"]


def test_llm_agent_retries_empty_replies(monkeypatch):
    monkeypatch.setattr("blackjack_engine.agents.llm_agent.time.sleep", lambda s: None)
    replies = iter(["", "  ", "stand"])
    agent = LLMAgent(ask_fn=lambda m: next(replies), retries=2)
    info = {}
    assert agent.act(make_obs(["T♣", "7♦"], 17), info) == Action.STAND
    assert info["llm"]["attempts"] == 3
    assert "error" not in info["llm"]


def test_llm_agent_configuration_errors():
    with pytest.raises(ValueError):
        LLMAgent()
    with pytest.raises(ValueError):
        LLMAgent(provider="gemini")
    with pytest.raises(ValueError):
        LLMAgent(ask_fn=lambda m: "hit", retries=-1)


def test_ollama_backend_posts_chat(monkeypatch):
    posted = {}

    class FakeResponse:
        def raise_for_status(self):
            pass

        def json(self):
            return {"message": {"role": "assistant", "content": "DOUBLE"}}

    class FakeSession:
        def post(self, url, json, timeout):
            posted.update(url=url, body=json)
            return FakeResponse()

    monkeypatch.setattr("blackjack_engine.agents.llm_agent.requests.Session", FakeSession)
    agent = LLMAgent(provider="ollama", model="tiny")
    obs = make_obs(["5♣", "6♦"], 11, allowed=HIT_STAND + [Action.DOUBLE])
    assert agent.act(obs, {}) == Action.DOUBLE
    assert posted["url"].endswith("/api/chat")
    assert posted["body"]["model"] == "tiny"
    assert posted["body"]["messages"][0]["role"] == "system"
