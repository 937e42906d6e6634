import asyncio
import logging
import math
import random
from typing import Any, Callable, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from ..engine.blanks import BlankPattern
from ..engine.data import load_words
from ..engine.errors import (
    GridGenerationExhausted,
    InvalidAction,
    NoMovesRemaining,
    OracleUnavailable,
    WordDropError,
    WordRejected,
)
from ..engine.feasibility import compute_feasibility, has_formable_word, has_winning_drop
from ..engine.grid import Grid
from ..engine.letters import generate_letter
from .models import (
    DropPolicy,
    GameOutcome,
    GameState,
    PendingValidation,
    RoundConfig,
    ScoringPolicy,
    SlotRule,
    TerminationPolicy,
)
from .oracle import WordOracle

logger = logging.getLogger(__name__)


NO_WORDS_MESSAGE = "There are no words possible. Game over"
TIME_UP_MESSAGE = "Time's up!"
ORACLE_ERROR_MESSAGE = "Error checking word. Try again!"


def rejection_message(word: str) -> str:
    return f'"{word.upper()}" is not a valid word. Try again!'


def seed_initial_drop(
    grid: Grid,
    blanks: BlankPattern,
    rng: Optional[random.Random] = None,
) -> Tuple[Grid, BlankPattern]:
    """
    Drop one random bottom-row letter into a random blank slot.

    The grid stays full: the taken letter is replaced with a fresh one.
    """
    source = rng if rng is not None else random
    columns = [col for col, cell in enumerate(grid.bottom_row) if cell is not None]
    empty = blanks.empty_slots()
    if not columns or not empty:
        return grid, blanks

    col = source.choice(columns)
    slot = source.choice(empty)
    grid, letter = grid.replace_bottom(col, generate_letter(rng))
    return grid, blanks.fill(slot, letter)


def generate_round(
    config: RoundConfig,
    corpus: List[str],
    rng: Optional[random.Random] = None,
) -> Tuple[Grid, BlankPattern]:
    """
    Generate a starting grid and blank pattern for a round.

    Grids are drawn until one can spell at least one corpus word of the
    pattern length and, after the optional initial drop, leaves at least
    ``config.min_feasible_words`` (and never fewer than one) feasible words.

    Args:
        config: Round rules
        corpus: Feasibility word list
        rng: Optional random source

    Returns:
        Tuple of (grid, blanks)

    Raises:
        GridGenerationExhausted: If no grid qualifies within
            ``config.max_generation_attempts``; carries the last grid drawn
    """
    last_grid = None
    for _ in range(config.max_generation_attempts):
        grid = Grid.create(config.grid_rows, config.grid_cols, rng)
        last_grid = grid

        if not has_formable_word(grid, corpus, config.blank_length):
            continue

        blanks = BlankPattern.empty(config.blank_length)
        if config.initial_drop:
            grid, blanks = seed_initial_drop(grid, blanks, rng)

        # A round with no feasible word would start already lost
        if compute_feasibility(grid, blanks, corpus).count >= max(1, config.min_feasible_words):
            return grid, blanks

    raise GridGenerationExhausted(config.max_generation_attempts, last_grid)


def compute_score(
    config: RoundConfig,
    initial_feasible_count: int,
    shifts_remaining: int,
    deletes_remaining: int,
) -> Tuple[Optional[int], Optional[float]]:
    """
    Score a won round.

    complexity = clamp(0, 1, 1 - initial_feasible_count / baseline)
    score = 10 * deletes_remaining + 10 * shifts_remaining + round(complexity * 100)

    Returns:
        Tuple of (score, complexity), both None when scoring is disabled
    """
    if config.scoring == ScoringPolicy.PLAIN:
        return None, None

    complexity = 1 - initial_feasible_count / config.complexity_baseline
    complexity = min(1.0, max(0.0, complexity))
    # Half-up rounding, not Python's banker's rounding
    bonus = math.floor(complexity * 100 + 0.5)
    return 10 * deletes_remaining + 10 * shifts_remaining + bonus, complexity


class WordDropGame(BaseModel):
    """
    Runs WordDrop rounds.

    Holds exactly one GameState and replaces it wholesale on every action.
    Actions that are not allowed in the current state (spent budgets,
    empty cells, filled slots, a finished round, a word awaiting
    validation) are ignored and return the state unchanged.

    Completing the blank pattern does not decide the round by itself: it
    leaves a PendingValidation on the state, which is settled by
    ``validate()``, ``await validate_async()`` or ``resolve()``.

    Attributes:
        config: Round rules
        corpus: Feasibility word list
        oracle: Word-validity oracle consulted for complete words
        state: Current round state
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: RoundConfig = Field(default_factory=RoundConfig)
    corpus: List[str] = Field(default_factory=list)
    oracle: Optional[Any] = None
    state: Optional[GameState] = None
    _rng: random.Random = None

    def model_post_init(self, __context) -> None:
        """Initialize the random generator after model creation."""
        self._rng = random.Random(self.config.seed)

    @classmethod
    def create(
        cls,
        config: Optional[RoundConfig] = None,
        corpus: Optional[List[str]] = None,
        oracle: Optional[WordOracle] = None,
        **config_kwargs: Any
    ) -> "WordDropGame":
        """
        Factory method to create a game with its first round started.

        Args:
            config: Optional RoundConfig instance
            corpus: Feasibility words; defaults to the bundled list
            oracle: Word-validity oracle
            **config_kwargs: Config parameters if config not provided

        Returns:
            A WordDropGame in the playing state (or already lost, if the
            fallback grid admits no words)
        """
        if config is None:
            config = RoundConfig(**config_kwargs)
        if corpus is None:
            corpus = load_words(length=config.blank_length)

        game = cls(config=config, corpus=corpus, oracle=oracle)
        game.play_again()
        return game

    @classmethod
    def from_state(
        cls,
        state: GameState,
        config: Optional[RoundConfig] = None,
        corpus: Optional[List[str]] = None,
        oracle: Optional[WordOracle] = None,
    ) -> "WordDropGame":
        """
        Create a game around an existing round state.

        Feasibility is recomputed for the given grid and blanks, and the
        termination check runs once, so the state is consistent with the
        corpus.
        """
        config = config or RoundConfig()
        if corpus is None:
            corpus = load_words(length=config.blank_length)
        game = cls(config=config, corpus=corpus, oracle=oracle)
        game.state = game._settle(state)
        return game

    # ------------------------------------------------------------------
    # Round lifecycle

    def play_again(self) -> GameState:
        """
        Discard the current round and start a new one.

        Any validation still outstanding for the old round is dropped
        when it resolves.
        """
        generation = self.state.generation + 1 if self.state is not None else 0

        try:
            grid, blanks = generate_round(self.config, self.corpus, self._rng)
        except GridGenerationExhausted as e:
            logger.warning("%s; using the last grid generated", e)
            grid = e.last_grid or Grid.create(self.config.grid_rows, self.config.grid_cols, self._rng)
            blanks = BlankPattern.empty(self.config.blank_length)

        feasibility = compute_feasibility(grid, blanks, self.corpus)
        state = GameState(
            grid=grid,
            blanks=blanks,
            shifts_remaining=self.config.initial_shifts,
            deletes_remaining=self.config.initial_deletes,
            feasibility=feasibility,
            initial_feasible_count=feasibility.count,
            generation=generation,
            time_remaining=self.config.countdown_seconds,
        )
        logger.info("Round %d started with %d possible words", generation, feasibility.count)

        self.state = self._check_termination(state)
        return self.state

    # ------------------------------------------------------------------
    # Player actions

    def drop(self, col: int) -> GameState:
        """
        Drop the bottom letter of a column into a blank slot.

        Args:
            col: Grid column to take the letter from

        Returns:
            The new state; unchanged if the drop is not allowed
        """
        return self._apply("drop", self._drop, col)

    def shift(self, row: int) -> GameState:
        """Rotate the letters of a row one step right, spending one shift."""
        return self._apply("shift", self._shift, row)

    def delete(self, row: int) -> GameState:
        """Delete a row, spending one delete."""
        return self._apply("delete", self._delete, row)

    def tick(self, seconds: float) -> GameState:
        """
        Advance the countdown.

        Has no effect unless the round is timed and still being played.
        When the countdown reaches zero the round is lost.

        Raises:
            ValueError: If seconds is negative
        """
        if seconds < 0:
            raise ValueError(f"Cannot tick a negative duration: {seconds}")

        state = self.state
        if state is None or state.time_remaining is None or state.is_terminal:
            return state

        remaining = max(0.0, state.time_remaining - seconds)
        if remaining > 0:
            self.state = state.model_copy(update={"time_remaining": remaining})
        else:
            logger.info("Round %d lost: countdown expired", state.generation)
            self.state = state.model_copy(update={
                "time_remaining": 0.0,
                "status": "lost",
                "pending": None,
                "outcome": GameOutcome(reason=TIME_UP_MESSAGE),
                "message": TIME_UP_MESSAGE,
            })
        return self.state

    # ------------------------------------------------------------------
    # Word validation

    def validate(self) -> GameState:
        """Consult the oracle for the pending word, blocking until it answers."""
        pending = self.state.pending if self.state else None
        if pending is None:
            return self.state

        try:
            self._consult_oracle(pending.word)
        except (WordRejected, OracleUnavailable) as e:
            return self.resolve(pending, e)
        return self.resolve(pending)

    async def validate_async(self) -> GameState:
        """Consult the oracle for the pending word in a worker thread."""
        pending = self.state.pending if self.state else None
        if pending is None:
            return self.state

        try:
            await asyncio.to_thread(self._consult_oracle, pending.word)
        except (WordRejected, OracleUnavailable) as e:
            return self.resolve(pending, e)
        return self.resolve(pending)

    def resolve(self, pending: PendingValidation, error: Optional[WordDropError] = None) -> GameState:
        """
        Apply an oracle verdict to the round that asked for it.

        Args:
            pending: The validation being answered
            error: None when the word is valid; WordRejected or
                OracleUnavailable otherwise

        Returns:
            The new state. Verdicts for a different round, or for a
            validation that is no longer pending, leave it unchanged.
        """
        state = self.state
        if state is None or state.is_terminal or state.pending != pending:
            logger.debug("Discarding stale verdict for %r (round %d)", pending.word, pending.generation)
            return state

        if error is None:
            score, complexity = compute_score(
                self.config,
                state.initial_feasible_count,
                state.shifts_remaining,
                state.deletes_remaining,
            )
            logger.info("Round %d won with %r (score %s)", state.generation, pending.word, score)
            self.state = state.model_copy(update={
                "status": "won",
                "pending": None,
                "outcome": GameOutcome(word=pending.word, score=score, complexity=complexity),
                "message": "",
            })
            return self.state

        if isinstance(error, WordRejected):
            message = rejection_message(pending.word)
        else:
            message = ORACLE_ERROR_MESSAGE
        logger.info("Word %r not accepted: %s", pending.word, error)

        self.state = self._settle(state.model_copy(update={
            "blanks": state.blanks.reset(),
            "pending": None,
            "message": message,
        }))
        return self.state

    # ------------------------------------------------------------------
    # Queries

    def get_state(self) -> Dict:
        """Get the current round state as a dictionary."""
        return self.state.get_state() if self.state else {}

    def possible_words(self) -> List[str]:
        return self.state.possible_words if self.state else []

    # ------------------------------------------------------------------
    # Internals

    def _apply(self, action: str, step: Callable[[GameState, int], GameState], index: int) -> GameState:
        if self.state is None:
            raise ValueError("Game not initialized. Call play_again() first.")
        try:
            new_state = step(self.state, index)
        except InvalidAction as e:
            logger.debug("Ignored %s(%d): %s", action, index, e)
            return self.state

        self.state = self._settle(new_state)
        return self.state

    def _require_active(self, state: GameState) -> None:
        if state.is_terminal:
            raise InvalidAction("Round is over")
        if state.is_pending:
            raise InvalidAction("Waiting for word validation")

    def _drop(self, state: GameState, col: int) -> GameState:
        self._require_active(state)

        if self.config.slot_rule == SlotRule.COLUMN:
            slot = col
        else:
            slot = state.blanks.first_empty()
            if slot is None:
                raise InvalidAction("All blanks are filled")

        if self.config.drop_policy == DropPolicy.KEEP_FULL:
            grid, letter = state.grid.replace_bottom(col, generate_letter(self._rng))
        else:
            grid, letter = state.grid.drop_from_bottom_row(col)
        blanks = state.blanks.fill(slot, letter)

        pending = None
        if blanks.is_complete():
            pending = PendingValidation(word=blanks.word(), generation=state.generation)
            logger.debug("Word %r complete, awaiting validation", pending.word)

        return state.model_copy(update={"grid": grid, "blanks": blanks, "pending": pending})

    def _shift(self, state: GameState, row: int) -> GameState:
        self._require_active(state)
        if state.shifts_remaining <= 0:
            raise InvalidAction("No shifts remaining")
        if len(state.grid.row_letters(row)) < 2:
            raise InvalidAction(f"Row {row} has fewer than two letters")

        return state.model_copy(update={
            "grid": state.grid.rotate_row_right(row),
            "shifts_remaining": state.shifts_remaining - 1,
            "shifts_used": state.shifts_used + 1,
        })

    def _delete(self, state: GameState, row: int) -> GameState:
        self._require_active(state)
        if state.deletes_remaining <= 0:
            raise InvalidAction("No deletes remaining")
        if not state.grid.row_letters(row):
            raise InvalidAction(f"Row {row} is already empty")
        if row == 0:
            raise InvalidAction("The top row cannot be deleted")

        return state.model_copy(update={
            "grid": state.grid.delete_row(row),
            "deletes_remaining": state.deletes_remaining - 1,
            "deletes_used": state.deletes_used + 1,
        })

    def _settle(self, state: GameState) -> GameState:
        """Recompute feasibility for a mutated state, then check for a dead end."""
        feasibility = compute_feasibility(state.grid, state.blanks, self.corpus)
        logger.debug("Feasibility: %d words for %s", feasibility.count, state.blanks)
        return self._check_termination(state.model_copy(update={"feasibility": feasibility}))

    def _check_termination(self, state: GameState) -> GameState:
        # Only an incomplete pattern in an idle, live round can run out of moves
        if state.is_terminal or state.is_pending or state.blanks.is_complete():
            return state

        try:
            self._ensure_moves_remain(state)
        except NoMovesRemaining as e:
            logger.info("Round %d lost: %s", state.generation, e.reason)
            return state.model_copy(update={
                "status": "lost",
                "outcome": GameOutcome(reason=e.reason),
                "message": e.reason,
            })
        return state

    def _ensure_moves_remain(self, state: GameState) -> None:
        if self.config.termination == TerminationPolicy.EXHAUSTIVE:
            budgets_spent = state.shifts_remaining == 0 and state.deletes_remaining == 0
            if budgets_spent and not has_winning_drop(state.grid, state.blanks, self.corpus):
                raise NoMovesRemaining(NO_WORDS_MESSAGE)
            return

        if state.feasibility.count == 0:
            raise NoMovesRemaining(NO_WORDS_MESSAGE)

    def _consult_oracle(self, word: str) -> None:
        """
        Ask the oracle about a word.

        Raises:
            WordRejected: If the oracle says the word is not valid
            OracleUnavailable: If no verdict could be obtained
        """
        if self.oracle is None:
            raise OracleUnavailable("No word-validity oracle configured")
        try:
            valid = self.oracle.check(word)
        except OracleUnavailable:
            raise
        except Exception as e:
            raise OracleUnavailable(f"Oracle error: {str(e)}") from e
        if not valid:
            raise WordRejected(word)
