"""
Word-feasibility calculation.

Answers "which corpus words can still be completed?" for a grid and a
blank pattern:

1. Count every letter left on the grid.
2. Subtract one occurrence per filled blank slot (letters committed to
   the pattern are spent).
3. Keep each word of the pattern's length that matches every filled slot
   and whose remaining letters are covered by that multiset.

The multiset is shared by all candidate words rather than consumed by
them: only one word will ever be played, so each is judged on its own.
"""

from collections import Counter
from typing import Dict, Iterable, Optional

from .blanks import BlankPattern
from .grid import Grid
from .models import FeasibilityResult


def available_letters(grid: Grid, blanks: BlankPattern) -> Dict[str, int]:
    """Lowercase letter counts on the grid minus the letters committed to blanks."""
    counts = Counter(grid.letter_counts())
    for slot in blanks.slots:
        if slot is None:
            continue
        letter = slot.lower()
        if counts[letter] > 0:
            counts[letter] -= 1
    return {letter: n for letter, n in counts.items() if n > 0}


def can_form(word: str, blanks: BlankPattern, available: Dict[str, int]) -> bool:
    """Check one word against the pattern and the available letters."""
    if len(word) != len(blanks):
        return False

    # Pattern match on every filled slot
    for i, slot in enumerate(blanks.slots):
        if slot is not None and word[i] != slot.lower():
            return False

    # Letter sufficiency for the slots still to fill
    needed = Counter(word[i] for i, slot in enumerate(blanks.slots) if slot is None)
    return all(available.get(letter, 0) >= n for letter, n in needed.items())


def compute_feasibility(
    grid: Grid,
    blanks: BlankPattern,
    corpus: Iterable[str],
) -> FeasibilityResult:
    """
    Enumerate the corpus words consistent with the grid and blank pattern.

    Args:
        grid: Current letter grid
        blanks: Current blank pattern
        corpus: Candidate words (lowercase); words of any other length
            than the pattern never match

    Returns:
        FeasibilityResult with the words in corpus order
    """
    available = available_letters(grid, blanks)
    words = [word for word in corpus if can_form(word.lower(), blanks, available)]
    return FeasibilityResult(count=len(words), words=words)


def has_formable_word(grid: Grid, corpus: Iterable[str], length: Optional[int] = None) -> bool:
    """
    Quick check that some corpus word can be spelled from the grid's letters.

    Positions are ignored. When `length` is given, only words of that
    length count.
    """
    if grid.is_empty():
        return False
    counts = grid.letter_counts()
    for word in corpus:
        if length is not None and len(word) != length:
            continue
        needed = Counter(word.lower())
        if all(counts.get(letter, 0) >= n for letter, n in needed.items()):
            return True
    return False


def has_winning_drop(grid: Grid, blanks: BlankPattern, corpus: Iterable[str]) -> bool:
    """
    Exhaustive single-letter lookahead.

    Tries every distinct grid letter in every empty slot and reports
    whether any of those placements leaves at least one feasible word.
    """
    corpus = list(corpus)
    letters = sorted(set(grid.letters()))
    for slot in blanks.empty_slots():
        for letter in letters:
            if compute_feasibility(grid, blanks.fill(slot, letter), corpus).count > 0:
                return True
    return False
