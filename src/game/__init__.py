"""Game controller, configuration and word-validity oracles for WordDrop."""

from .models import (
    Message,
    Role,
    Status,
    OracleKind,
    DropPolicy,
    SlotRule,
    TerminationPolicy,
    ScoringPolicy,
    RoundConfig,
    OracleConfig,
    GameConfig,
    PendingValidation,
    GameOutcome,
    GameState,
)
from .oracle import WordOracle, WordListOracle, DictionaryApiOracle, LLMOracle, build_oracle
from .game import WordDropGame, generate_round, seed_initial_drop, compute_score

__all__ = [
    "Message",
    "Role",
    "Status",
    "OracleKind",
    "DropPolicy",
    "SlotRule",
    "TerminationPolicy",
    "ScoringPolicy",
    "RoundConfig",
    "OracleConfig",
    "GameConfig",
    "PendingValidation",
    "GameOutcome",
    "GameState",
    "WordOracle",
    "WordListOracle",
    "DictionaryApiOracle",
    "LLMOracle",
    "build_oracle",
    "WordDropGame",
    "generate_round",
    "seed_initial_drop",
    "compute_score",
]
