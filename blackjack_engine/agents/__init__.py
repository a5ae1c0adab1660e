from .basic import BasicStrategyAgent
from .callback import CallableAgent
from .guarded import GuardedAgent
from .llm_agent import LLMAgent
from .random_agent import RandomAgent

__all__ = ["BasicStrategyAgent", "CallableAgent", "GuardedAgent", "LLMAgent", "RandomAgent"]
