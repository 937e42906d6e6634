"""
Tests for the WordDrop game controller.

Covers:
- The drop / shift / delete transitions and their budgets
- Word validation: win, rejection, oracle failure, pending lock-out
- Stale verdicts after a restart
- Termination policies, countdown and scoring
- Round generation and its fallback
"""

import asyncio
import random
from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from src.engine import (
    BlankPattern,
    Grid,
    GridGenerationExhausted,
    OracleUnavailable,
    compute_feasibility,
    load_words,
)
from src.game import (
    DropPolicy,
    GameState,
    RoundConfig,
    ScoringPolicy,
    SlotRule,
    TerminationPolicy,
    WordDropGame,
    WordListOracle,
    compute_score,
    generate_round,
)


CORPUS = ["cat", "act", "sat", "red", "end", "ode"]

CAT_ROWS = [
    ["E", "R", None, None, None],
    ["O", "E", "N", "D", None],
    ["C", "A", "T", "S", None],
]


def make_game(rows=CAT_ROWS, blank_length=3, corpus=CORPUS, oracle=None,
              initial_feasible_count=0, **rules) -> WordDropGame:
    """Build a game around a hand-made grid."""
    config = RoundConfig(
        grid_rows=len(rows),
        grid_cols=len(rows[0]),
        blank_length=blank_length,
        seed=1,
        **rules
    )
    state = GameState(
        grid=Grid.from_rows(rows),
        blanks=BlankPattern.empty(blank_length),
        shifts_remaining=config.initial_shifts,
        deletes_remaining=config.initial_deletes,
        initial_feasible_count=initial_feasible_count,
    )
    return WordDropGame.from_state(state, config=config, corpus=corpus, oracle=oracle)


def spell_cat(game: WordDropGame) -> None:
    for col in range(3):
        game.drop(col)


class TestDrop:
    """Test cases for dropping letters into the blanks."""

    def test_drop_fills_slot_of_column(self):
        """With the column rule, column i fills slot i."""
        game = make_game()
        state = game.drop(1)
        assert state.blanks.slots == (None, "A", None)
        assert state.grid.bottom_row[1] == "E"
        assert state.grid.cells[0][1] is None

    def test_feasibility_recomputed(self):
        game = make_game()
        assert game.state.feasibility.count == 6
        state = game.drop(0)
        assert state.feasibility.words == ["cat"]

    def test_drop_into_filled_slot_ignored(self):
        """Dropping the same column twice leaves the second drop unapplied."""
        game = make_game()
        first = game.drop(0)
        second = game.drop(0)
        assert second is first

    def test_column_beyond_blanks_ignored(self):
        """Column 3 has no matching slot in a three-letter pattern."""
        game = make_game()
        before = game.state
        assert game.drop(3) is before

    def test_empty_bottom_cell_ignored(self):
        game = make_game()
        before = game.state
        assert game.drop(4) is before

    def test_first_empty_rule(self):
        """With the first-empty rule, letters fill slots in assembly order."""
        game = make_game(slot_rule=SlotRule.FIRST_EMPTY)
        state = game.drop(2)
        assert state.blanks.slots == ("T", None, None)

    def test_keep_full_policy(self):
        """The keep-full policy refills the bottom cell instead of dropping the column."""
        game = make_game(drop_policy=DropPolicy.KEEP_FULL)
        letters_before = len(game.state.grid.letters())
        state = game.drop(0)
        assert state.blanks.slots[0] == "C"
        assert len(state.grid.letters()) == letters_before
        assert state.grid.cells[0][0] == "E"

    def test_complete_pattern_pending(self):
        """Filling the last slot leaves the word awaiting validation."""
        game = make_game()
        spell_cat(game)
        assert game.state.is_pending
        assert game.state.pending.word == "cat"
        assert game.state.pending.generation == game.state.generation
        assert game.state.status == "playing"


class TestValidation:
    """Test cases for settling a completed word."""

    def test_valid_word_wins(self):
        """The CAT scenario: drop C, A, T and have the oracle confirm."""
        game = make_game(oracle=WordListOracle.from_iterable(["cat"]))
        assert "cat" in game.state.feasibility.words

        spell_cat(game)
        state = game.validate()

        assert state.status == "won"
        assert state.outcome.word == "cat"
        assert state.pending is None

    def test_rejected_word_resets_blanks(self):
        """A listed word the oracle rejects is handled like any bad guess."""
        game = make_game(oracle=WordListOracle.from_iterable([]))
        spell_cat(game)
        assert "cat" in game.state.feasibility.words

        state = game.validate()

        assert state.status == "playing"
        assert state.blanks.is_empty()
        assert state.pending is None
        assert state.message == '"CAT" is not a valid word. Try again!'

    def test_rejection_keeps_grid(self):
        """Letters used for a rejected word stay used."""
        game = make_game(oracle=WordListOracle.from_iterable([]))
        spell_cat(game)
        grid = game.state.grid
        assert game.validate().grid == grid

    def test_oracle_unavailable(self):
        oracle = Mock()
        oracle.check.side_effect = OracleUnavailable("down")
        game = make_game(oracle=oracle)
        spell_cat(game)

        state = game.validate()

        oracle.check.assert_called_once_with("cat")
        assert state.status == "playing"
        assert state.blanks.is_empty()
        assert state.message == "Error checking word. Try again!"

    def test_unexpected_oracle_error_is_unavailable(self):
        """Any oracle exception is treated as the oracle being unreachable."""
        oracle = Mock()
        oracle.check.side_effect = RuntimeError("boom")
        game = make_game(oracle=oracle)
        spell_cat(game)

        assert game.validate().message == "Error checking word. Try again!"

    def test_no_oracle(self):
        game = make_game()
        spell_cat(game)
        assert game.validate().message == "Error checking word. Try again!"

    def test_validate_without_pending_is_noop(self):
        game = make_game(oracle=WordListOracle.from_iterable(["cat"]))
        before = game.state
        assert game.validate() is before

    def test_actions_refused_while_pending(self):
        """No drop, shift or delete is accepted until the verdict arrives."""
        game = make_game()
        spell_cat(game)
        pending_state = game.state

        assert game.shift(1) is pending_state
        assert game.delete(1) is pending_state
        assert game.drop(3) is pending_state

    def test_validate_async(self):
        game = make_game(oracle=WordListOracle.from_iterable(["cat"]))
        spell_cat(game)

        state = asyncio.run(game.validate_async())

        assert state.status == "won"

    def test_resolve_external_verdict(self):
        """A verdict obtained elsewhere can be applied with resolve()."""
        game = make_game()
        spell_cat(game)
        state = game.resolve(game.state.pending)
        assert state.status == "won"
        assert state.outcome.word == "cat"


class TestStaleVerdicts:
    """Test cases for verdicts that arrive after a restart."""

    def test_verdict_after_play_again_discarded(self):
        game = make_game()
        spell_cat(game)
        pending = game.state.pending

        restarted = game.play_again()

        assert restarted.generation == 1
        assert game.resolve(pending) is restarted
        assert game.state.outcome.word is None

    def test_restart_during_async_check(self):
        """A round restarted while the oracle is thinking ignores the late answer."""
        game = make_game()

        class RestartingOracle:
            def check(self, word):
                game.play_again()
                return True

        game.oracle = RestartingOracle()
        spell_cat(game)

        state = asyncio.run(game.validate_async())

        assert state.generation == 1
        assert state.outcome.word is None
        assert state.status != "won"

    def test_verdict_after_win_discarded(self):
        game = make_game()
        spell_cat(game)
        pending = game.state.pending
        won = game.resolve(pending)
        assert game.resolve(pending, OracleUnavailable("late")) is won


class TestShiftAndDelete:
    """Test cases for the budgeted row actions."""

    def test_shift_spends_budget(self):
        game = make_game()
        state = game.shift(2)
        assert state.grid.cells[2] == ("S", "C", "A", "T", None)
        assert state.shifts_remaining == 4
        assert state.shifts_used == 1

    def test_shift_budget_exhausted(self):
        game = make_game(initial_shifts=1)
        game.shift(2)
        before = game.state
        assert game.shift(2) is before
        assert before.shifts_remaining == 0

    def test_shift_single_letter_row_free(self):
        """A row with fewer than two letters cannot be shifted and costs nothing."""
        game = make_game(rows=[["A", None, None], ["C", "A", "T"]], blank_length=3)
        before = game.state
        assert game.shift(0) is before
        assert before.shifts_remaining == 5

    def test_delete_spends_budget(self):
        game = make_game()
        state = game.delete(1)
        assert state.grid.rows == 3
        assert state.grid.cells[0] == (None,) * 5
        assert state.deletes_remaining == 2
        assert state.deletes_used == 1

    def test_delete_top_row_refused(self):
        game = make_game()
        before = game.state
        assert game.delete(0) is before

    def test_delete_empty_row_refused(self):
        game = make_game()
        game.delete(1)
        before = game.state
        assert game.delete(0) is before
        assert before.deletes_remaining == 2

    def test_delete_budget_exhausted(self):
        game = make_game(initial_deletes=0)
        before = game.state
        assert game.delete(1) is before

    def test_actions_ignored_after_round_over(self):
        game = make_game()
        spell_cat(game)
        won = game.resolve(game.state.pending)
        assert game.shift(1) is won
        assert game.delete(1) is won


class TestTermination:
    """Test cases for detecting rounds that can no longer be won."""

    def test_immediate_loss_when_no_words(self):
        """Deleting the only useful row leaves no words and ends the round."""
        game = make_game(rows=[["X", "Y", "Z"], ["C", "A", "T"]], corpus=["cat"])
        state = game.delete(1)
        assert state.status == "lost"
        assert state.outcome.reason == "There are no words possible. Game over"
        assert state.message == state.outcome.reason

    def test_complete_pattern_never_auto_terminates(self):
        """With every slot filled and no budgets left the round waits for validation."""
        for policy in TerminationPolicy:
            config = RoundConfig(
                grid_rows=1, grid_cols=3, blank_length=3,
                initial_shifts=0, initial_deletes=0, termination=policy,
            )
            state = GameState(
                grid=Grid.from_rows([[None, None, None]]),
                blanks=BlankPattern.from_letters(["Z", "Z", "Z"]),
                shifts_remaining=0,
                deletes_remaining=0,
            )
            game = WordDropGame.from_state(state, config=config, corpus=["cat"])
            assert game.state.status == "playing"

    def test_exhaustive_waits_for_budgets(self):
        """The exhaustive policy keeps playing while a budget remains."""
        game = make_game(
            rows=[["X", "Y", "Z"], ["C", "A", "T"]],
            corpus=["cat"],
            initial_shifts=1,
            initial_deletes=1,
            termination=TerminationPolicy.EXHAUSTIVE,
        )
        state = game.delete(1)
        assert state.feasibility.count == 0
        assert state.status == "playing"

        state = game.shift(1)
        assert state.status == "lost"

    def test_exhaustive_keeps_playing_with_winning_drop(self):
        game = make_game(
            rows=[["C", "A", "T"]],
            corpus=["cat"],
            initial_shifts=0,
            initial_deletes=0,
            termination=TerminationPolicy.EXHAUSTIVE,
        )
        assert game.state.status == "playing"

    def test_rejection_can_end_round(self):
        """Resetting the blanks re-runs the termination check."""
        game = make_game(rows=[["C", "A", "T"]], corpus=["cat"], oracle=WordListOracle.from_iterable([]))
        spell_cat(game)
        state = game.validate()
        assert state.status == "lost"
        assert state.message == "There are no words possible. Game over"


class TestCountdown:
    """Test cases for the timed variant."""

    def test_tick_counts_down(self):
        game = make_game()
        game.state = game.state.model_copy(update={"time_remaining": 10.0})
        assert game.tick(4).time_remaining == 6.0

    def test_time_up_loses(self):
        game = make_game()
        game.state = game.state.model_copy(update={"time_remaining": 10.0})
        state = game.tick(12)
        assert state.status == "lost"
        assert state.outcome.reason == "Time's up!"
        assert state.time_remaining == 0.0

    def test_untimed_tick_noop(self):
        game = make_game()
        before = game.state
        assert game.tick(100) is before

    def test_negative_tick_rejected(self):
        """Ticking backwards never adds time."""
        game = make_game()
        game.state = game.state.model_copy(update={"time_remaining": 10.0})
        with pytest.raises(ValueError):
            game.tick(-50)
        assert game.state.time_remaining == 10.0

    def test_countdown_from_config(self):
        game = WordDropGame.create(seed=2, countdown_seconds=30)
        assert game.state.time_remaining == 30


class TestScoring:
    """Test cases for the win score."""

    def test_compute_score(self):
        config = RoundConfig()
        score, complexity = compute_score(config, 100, shifts_remaining=5, deletes_remaining=3)
        assert complexity == 0.75
        assert score == 155

    def test_complexity_clamped(self):
        config = RoundConfig()
        assert compute_score(config, 800, 0, 0) == (0, 0.0)
        assert compute_score(config, 0, 0, 0) == (100, 1.0)

    def test_plain_scoring(self):
        config = RoundConfig(scoring=ScoringPolicy.PLAIN)
        assert compute_score(config, 100, 5, 3) == (None, None)

    def test_score_frozen_at_win(self):
        game = make_game(initial_feasible_count=200)
        game.shift(1)
        spell_cat(game)
        state = game.resolve(game.state.pending)

        # 3 deletes + 4 shifts left, complexity 0.5
        assert state.outcome.score == 30 + 40 + 50
        assert game.shift(0) is state
        assert game.state.outcome.score == 120


class TestRoundGeneration:
    """Test cases for creating and restarting rounds."""

    def test_create_with_seed(self):
        oracle = WordListOracle.from_iterable(["about"])
        game = WordDropGame.create(seed=7, oracle=oracle)
        state = game.state
        assert state.grid.rows == 4
        assert state.grid.cols == 5
        assert len(state.blanks) == 5
        assert state.generation == 0
        assert state.shifts_remaining == 5
        assert state.deletes_remaining == 3
        assert state.initial_feasible_count == state.feasibility.count

    def test_create_reproducible(self):
        a = WordDropGame.create(seed=11)
        b = WordDropGame.create(seed=11)
        assert a.state.grid == b.state.grid
        assert a.state.blanks == b.state.blanks

    def test_initial_drop_keeps_grid_full(self):
        """The seeded first letter comes from a grid that stays full."""
        game = WordDropGame.create(seed=3)
        assert len(game.state.grid.letters()) == 20

    def test_generated_round_meets_threshold(self):
        config = RoundConfig(seed=5)
        corpus = load_words(length=5)
        grid, blanks = generate_round(config, corpus, random.Random(5))
        assert len(blanks.empty_slots()) == 4
        assert compute_feasibility(grid, blanks, corpus).count >= 3

    def test_play_again_resets(self):
        game = WordDropGame.create(seed=4)
        game.shift(3)
        game.delete(1)
        state = game.play_again()
        assert state.generation == 1
        assert state.shifts_remaining == 5
        assert state.deletes_remaining == 3
        assert state.shifts_used == 0
        assert state.deletes_used == 0
        assert state.message == ""

    def test_generation_exhausted(self):
        config = RoundConfig(max_generation_attempts=3)
        with pytest.raises(GridGenerationExhausted) as exc_info:
            generate_round(config, ["zzzzz"], random.Random(1))
        assert exc_info.value.attempts == 3
        assert exc_info.value.last_grid is not None

    def test_generation_ignores_words_of_other_lengths(self):
        """A corpus with only short words never yields an acceptable grid."""
        config = RoundConfig(min_feasible_words=0, initial_drop=False, max_generation_attempts=5)
        with pytest.raises(GridGenerationExhausted):
            generate_round(config, ["a", "e", "zzzzz"], random.Random(1))

    def test_generated_round_always_has_a_word(self):
        """Even with no minimum, an accepted round has at least one feasible word."""
        config = RoundConfig(min_feasible_words=0, initial_drop=False)
        corpus = load_words(length=5)
        grid, blanks = generate_round(config, corpus, random.Random(8))
        assert compute_feasibility(grid, blanks, corpus).count >= 1

    def test_generation_fallback(self):
        """An exhausted generator still yields a round, with empty blanks."""
        game = WordDropGame.create(corpus=["zzzzz"], max_generation_attempts=3, seed=1)
        assert game.state.blanks.is_empty()
        assert len(game.state.grid.letters()) == 20
        assert game.state.status == "lost"


class TestConfig:
    """Test cases for round configuration."""

    def test_defaults(self):
        config = RoundConfig()
        assert (config.grid_rows, config.grid_cols, config.blank_length) == (4, 5, 5)
        assert config.initial_shifts == 5
        assert config.initial_deletes == 3
        assert config.slot_rule == SlotRule.COLUMN

    def test_column_rule_needs_enough_columns(self):
        with pytest.raises(ValidationError):
            RoundConfig(grid_cols=3, blank_length=5)

    def test_first_empty_allows_narrow_grid(self):
        config = RoundConfig(grid_cols=3, blank_length=5, slot_rule="first_empty")
        assert config.slot_rule == SlotRule.FIRST_EMPTY

    def test_negative_budget_rejected(self):
        with pytest.raises(ValidationError):
            RoundConfig(initial_shifts=-1)

    def test_get_state(self):
        game = make_game()
        game.drop(0)
        snapshot = game.get_state()
        assert snapshot["status"] == "playing"
        assert snapshot["blanks"] == ["C", None, None]
        assert snapshot["possible_words"] == 1
        assert snapshot["pending_word"] is None

    def test_possible_words(self):
        game = make_game()
        game.drop(0)
        assert game.possible_words() == ["cat"]
        assert game.state.possible_words == ["cat"]
