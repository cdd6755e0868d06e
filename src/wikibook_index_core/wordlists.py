from __future__ import annotations

from pathlib import Path

from wikibook_index_core.errors import LookupTableError
from wikibook_index_core.log import get_logger
from wikibook_index_core.tokenizer import Lexicon

logger = get_logger(__name__)


def load_word_set(path: str | Path) -> frozenset[str]:
    """
    Read a word list with one entry per line.

    Entries are stripped and lower-cased; blank lines and `#` comments are
    skipped. A missing or empty list is fatal for the run.
    """
    p = Path(path)
    if not p.is_file():
        raise LookupTableError(f"word list not found: {p}")
    words: set[str] = set()
    with p.open("r", encoding="utf-8", errors="replace") as fh:
        for line in fh:
            word = line.strip().lower()
            if not word or word.startswith("#"):
                continue
            words.add(word)
    if not words:
        raise LookupTableError(f"word list is empty: {p}")
    logger.info("Loaded %d words from %s", len(words), p)
    return frozenset(words)


def load_lexicon(dictionary_path: str | Path, stopwords_path: str | Path) -> Lexicon:
    return Lexicon(
        dictionary=load_word_set(dictionary_path),
        stop_words=load_word_set(stopwords_path),
    )
