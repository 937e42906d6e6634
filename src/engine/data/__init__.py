"""Static word list used for feasibility counting."""

from .words import load_words, DEFAULT_WORDS_FILE

__all__ = ["load_words", "DEFAULT_WORDS_FILE"]
