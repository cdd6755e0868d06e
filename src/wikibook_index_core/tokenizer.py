from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from wikibook_index_core.errors import LookupTableError

_KEEP = frozenset(b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 ")


def clean(text: str) -> str:
    """Drop every character that is not an ASCII letter, digit or space."""
    data = (text or "").encode("utf-8")
    return bytes(b for b in data if b in _KEEP).decode("ascii")


def tokenize(text: str) -> list[str]:
    return clean(text).lower().split()


@dataclass(frozen=True)
class Lexicon:
    """Dictionary plus stop words. Both are read-only once built."""

    dictionary: frozenset[str]
    stop_words: frozenset[str]

    def __post_init__(self) -> None:
        if not self.dictionary:
            raise LookupTableError("dictionary is empty")
        if not self.stop_words:
            raise LookupTableError("stop-word set is empty")

    @classmethod
    def from_words(cls, dictionary: Iterable[str], stop_words: Iterable[str]) -> Lexicon:
        return cls(
            dictionary=frozenset(w.strip().lower() for w in dictionary if w and w.strip()),
            stop_words=frozenset(w.strip().lower() for w in stop_words if w and w.strip()),
        )

    def is_valid(self, token: str) -> bool:
        return token in self.dictionary and token not in self.stop_words

    def filter(self, tokens: Iterable[str]) -> list[str]:
        return [t for t in tokens if self.is_valid(t)]


def count_valid_tokens(text: str, lexicon: Lexicon) -> Counter[str]:
    return Counter(lexicon.filter(tokenize(text)))
