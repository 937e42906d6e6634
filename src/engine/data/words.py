# Loader for the static feasibility word list bundled with WordDrop.
# The list only drives the "possible words" count; whether an assembled
# word is accepted is decided by a word-validity oracle.

from pathlib import Path
from typing import List, Optional

DEFAULT_WORDS_FILE = Path(__file__).parent / "words.txt"


def load_words(path: Optional[str | Path] = None, length: Optional[int] = None) -> List[str]:
    '''
    Read a word list file into an ordered, de-duplicated list.

    Words are lowercased; lines starting with '#' are skipped and a line
    may hold several whitespace-separated words. When `length` is given,
    words of any other length are dropped.
    '''
    path = Path(path) if path is not None else DEFAULT_WORDS_FILE
    if not path.exists():
        raise FileNotFoundError(f"Word list not found: {path}")

    seen = set()
    words: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        for word in line.lower().split():
            if not word.isalpha() or word in seen:
                continue
            if length is not None and len(word) != length:
                continue
            seen.add(word)
            words.append(word)
    return words
