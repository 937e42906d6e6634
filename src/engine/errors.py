"""Exception hierarchy for the WordDrop engine and game controller."""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .grid import Grid


class WordDropError(Exception):
    """Base class for all WordDrop errors."""


class InvalidAction(WordDropError, ValueError):
    """
    An action that cannot be applied to the current state.

    Raised for spent budgets, empty cells, filled slots and out-of-range
    indices. The game controller swallows it and leaves the state unchanged.
    """


class OracleUnavailable(WordDropError):
    """The word-validity oracle could not be reached or gave no usable answer."""


class WordRejected(WordDropError):
    """The oracle reported that an assembled word is not a real word."""

    def __init__(self, word: str):
        super().__init__(f"'{word}' is not a valid word")
        self.word = word


class NoMovesRemaining(WordDropError):
    """No dictionary word can be completed from the current round."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class GridGenerationExhausted(WordDropError):
    """
    Grid generation never reached the feasible-word threshold.

    Attributes:
        attempts: Number of grids generated before giving up
        last_grid: The final grid generated, usable as a fallback
    """

    def __init__(self, attempts: int, last_grid: Optional["Grid"] = None):
        super().__init__(f"No acceptable grid after {attempts} attempts")
        self.attempts = attempts
        self.last_grid = last_grid
