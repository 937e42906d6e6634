"""Grid, blank pattern and word-feasibility engine for WordDrop."""

from .errors import (
    WordDropError,
    InvalidAction,
    OracleUnavailable,
    WordRejected,
    NoMovesRemaining,
    GridGenerationExhausted,
)
from .letters import WEIGHTED_ALPHABET, generate_letter
from .grid import Grid
from .blanks import BlankPattern
from .models import FeasibilityResult
from .feasibility import (
    available_letters,
    can_form,
    compute_feasibility,
    has_formable_word,
    has_winning_drop,
)
from .data import load_words

__all__ = [
    # Errors
    "WordDropError",
    "InvalidAction",
    "OracleUnavailable",
    "WordRejected",
    "NoMovesRemaining",
    "GridGenerationExhausted",
    # Letters
    "WEIGHTED_ALPHABET",
    "generate_letter",
    # Board
    "Grid",
    "BlankPattern",
    # Feasibility
    "FeasibilityResult",
    "available_letters",
    "can_form",
    "compute_feasibility",
    "has_formable_word",
    "has_winning_drop",
    # Corpus
    "load_words",
]
