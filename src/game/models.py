"""
Pydantic models for the game layer.

This module contains the round configuration, the policy enums that select
between game variants, and the immutable GameState the controller replaces
on every transition. The controller itself lives in game.py.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..engine.blanks import BlankPattern
from ..engine.grid import Grid
from ..engine.models import FeasibilityResult


# Type aliases
Role = Literal["system", "user", "assistant"]
Status = Literal["playing", "won", "lost"]
OracleKind = Literal["dictionary_api", "llm", "word_list"]


class DropPolicy(str, Enum):
    """What happens to a column after its bottom letter is dropped."""
    DEPLETE = "deplete"  # column falls, top cell left empty
    KEEP_FULL = "keep_full"  # bottom cell refilled with a fresh letter


class SlotRule(str, Enum):
    """Which blank slot a dropped letter lands in."""
    COLUMN = "column"  # slot index = grid column index
    FIRST_EMPTY = "first_empty"  # leftmost empty slot


class TerminationPolicy(str, Enum):
    """When a round is declared lost for lack of moves."""
    IMMEDIATE = "immediate"
    EXHAUSTIVE = "exhaustive"


class ScoringPolicy(str, Enum):
    PLAIN = "plain"
    SCORED = "scored"


class Message(BaseModel):
    """Represents a single chat message sent to an LLM oracle."""
    role: Role
    content: str


class RoundConfig(BaseModel):
    """Rules and dimensions of a round."""

    grid_rows: int = Field(default=4, ge=1)
    grid_cols: int = Field(default=5, ge=1)
    blank_length: int = Field(default=5, ge=1)
    initial_shifts: int = Field(default=5, ge=0)
    initial_deletes: int = Field(default=3, ge=0)
    countdown_seconds: Optional[float] = Field(default=None, gt=0)
    min_feasible_words: int = Field(default=3, ge=0)
    max_generation_attempts: int = Field(default=100, ge=1)
    initial_drop: bool = True  # seed one random letter into the blanks at round start
    complexity_baseline: int = Field(default=400, ge=1)
    seed: Optional[int] = None
    drop_policy: DropPolicy = DropPolicy.DEPLETE
    slot_rule: SlotRule = SlotRule.COLUMN
    termination: TerminationPolicy = TerminationPolicy.IMMEDIATE
    scoring: ScoringPolicy = ScoringPolicy.SCORED

    @model_validator(mode="after")
    def _check_slots_reachable(self) -> "RoundConfig":
        if self.slot_rule == SlotRule.COLUMN and self.grid_cols < self.blank_length:
            raise ValueError(
                f"grid_cols ({self.grid_cols}) must be at least blank_length "
                f"({self.blank_length}) when slots follow columns"
            )
        return self


class OracleConfig(BaseModel):
    """Configuration for the word-validity oracle."""
    model_config = ConfigDict(extra='allow')

    kind: OracleKind = "dictionary_api"
    api_url: str = "https://api.dictionaryapi.dev/api/v2/entries/en"
    timeout: float = Field(default=10.0, gt=0)
    model: str = "gpt-4o-mini"
    temperature: float = 0.0
    max_tokens: Optional[int] = None
    words_file: Optional[str] = None  # word_list oracle only; defaults to the bundled corpus
    # Additional kwargs are allowed and passed to LiteLLM


class GameConfig(BaseModel):
    """Top-level configuration, as loaded from YAML."""
    rules: RoundConfig = Field(default_factory=RoundConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    words_file: Optional[str] = None  # feasibility corpus; defaults to the bundled list


class PendingValidation(BaseModel):
    """A completed word waiting for the oracle's verdict."""
    model_config = ConfigDict(frozen=True)

    word: str
    generation: int


class GameOutcome(BaseModel):
    """How a round ended. Empty while the round is still being played."""
    model_config = ConfigDict(frozen=True)

    word: Optional[str] = None
    reason: Optional[str] = None
    score: Optional[int] = None
    complexity: Optional[float] = None


class GameState(BaseModel):
    """
    Snapshot of a round.

    Never mutated: the controller builds a new GameState for every
    transition so grid, blanks and budgets always change together.

    Attributes:
        grid: Current letter grid
        blanks: Current blank pattern
        shifts_remaining: Row shifts the player may still make
        deletes_remaining: Row deletes the player may still make
        shifts_used: Row shifts made this round
        deletes_used: Row deletes made this round
        status: playing, won or lost
        outcome: Final word, loss reason and score once the round is over
        feasibility: Words still formable, recomputed after every mutation
        initial_feasible_count: Feasible-word count when the round started
        message: Latest user-facing message (rejections, game over)
        generation: Round counter; verdicts from older rounds are dropped
        pending: Word awaiting validation, if any
        time_remaining: Seconds left on the countdown, when one is configured
    """

    model_config = ConfigDict(frozen=True)

    grid: Grid
    blanks: BlankPattern
    shifts_remaining: int = Field(ge=0)
    deletes_remaining: int = Field(ge=0)
    shifts_used: int = 0
    deletes_used: int = 0
    status: Status = "playing"
    outcome: GameOutcome = Field(default_factory=GameOutcome)
    feasibility: FeasibilityResult = Field(default_factory=FeasibilityResult)
    initial_feasible_count: int = 0
    message: str = ""
    generation: int = 0
    pending: Optional[PendingValidation] = None
    time_remaining: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != "playing"

    @property
    def is_pending(self) -> bool:
        return self.pending is not None

    @property
    def possible_words(self) -> List[str]:
        return self.feasibility.words

    def get_state(self) -> Dict[str, Any]:
        """
        Get the round state as a plain dictionary.

        Useful for logging and the CLI summary.
        """
        return {
            "generation": self.generation,
            "status": self.status,
            "grid": [list(row) for row in self.grid.cells],
            "blanks": list(self.blanks.slots),
            "shifts_remaining": self.shifts_remaining,
            "deletes_remaining": self.deletes_remaining,
            "shifts_used": self.shifts_used,
            "deletes_used": self.deletes_used,
            "possible_words": self.feasibility.count,
            "initial_feasible_count": self.initial_feasible_count,
            "pending_word": self.pending.word if self.pending else None,
            "time_remaining": self.time_remaining,
            "message": self.message,
            "word": self.outcome.word,
            "reason": self.outcome.reason,
            "score": self.outcome.score,
        }
