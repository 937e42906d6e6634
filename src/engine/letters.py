"""Weighted random letter source."""

import random
from typing import Optional

# Vowels and common consonants are over-represented, roughly following
# English letter frequency.
WEIGHTED_ALPHABET = (
    "EEEEEEEEEEEEAAAAAAAAAIIIIIIIIIOOOOOOOONNNNNNRRRRRRTTTTTTLLLLSSSSUUU"
    "DDDDGGGBBCCMMPPFFHHVVWWYYKJXQZ"
)


def generate_letter(rng: Optional[random.Random] = None) -> str:
    """
    Draw one uppercase letter from the weighted alphabet.

    Args:
        rng: Random source to draw from. Defaults to the process-wide
            ``random`` module; pass a seeded ``random.Random`` for
            reproducible grids.

    Returns:
        A single uppercase letter
    """
    source = rng if rng is not None else random
    return source.choice(WEIGHTED_ALPHABET)


def normalise_letter(value: Optional[str]) -> Optional[str]:
    """Uppercase a cell value, keeping None for empty cells."""
    if value is None:
        return None
    if not isinstance(value, str) or len(value) != 1 or not value.isalpha():
        raise ValueError(f"Expected a single letter, got {value!r}")
    return value.upper()
