"""Constants and default configuration values for blackjack_engine."""

from __future__ import annotations

# Cards
SINGLE_DECK_SIZE = 52
BLACKJACK = 21
SOFT_BONUS = 10

# Double-down totals accepted in a rule set's allow-list
DOUBLE_DOWN_MIN_TOTAL = 3
DOUBLE_DOWN_MAX_TOTAL = 20

# Table defaults (six-deck H17 shoe game)
DEFAULT_DECKS = 6
DEFAULT_PLAYERS = 1
DEFAULT_MIN_BET = 1.0
DEFAULT_MAX_BET = 100.0
DEFAULT_BLACKJACK_PAYOUT = 1.5
DEFAULT_MAX_HANDS = 4
DEFAULT_SHUFFLE_THRESHOLD = 78

# Logging
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# LLM configuration
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_OLLAMA_MODEL = "llama3.1"
DEFAULT_OLLAMA_HOST = "http://127.0.0.1:11434"
DEFAULT_TEMPERATURE = 0.0
DEFAULT_RETRIES = 2
DEFAULT_RETRY_BACKOFF = 1.5
DEFAULT_REQUEST_TIMEOUT = 120

# Agents
AVAILABLE_AGENTS = {"basic", "random", "llm"}

# Default run parameters
DEFAULT_ROUNDS = 10000
DEFAULT_SEED = 42
DEFAULT_BET = 1.0

