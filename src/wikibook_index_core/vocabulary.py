from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from wikibook_index_core.errors import EmptyVocabularyError


@dataclass(frozen=True)
class GlobalTokenTable:
    """Sorted, de-duplicated tokens with dense IDs 0..N-1 by position."""

    tokens: tuple[str, ...]
    _ids: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_ids", {token: i for i, token in enumerate(self.tokens)})
        if len(self._ids) != len(self.tokens):
            raise ValueError("token table contains duplicates")

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self) -> Iterator[tuple[int, str]]:
        return iter(enumerate(self.tokens))

    def __contains__(self, token: object) -> bool:
        return token in self._ids

    def id_of(self, token: str) -> int:
        return self._ids[token]

    def get_id(self, token: str) -> int | None:
        return self._ids.get(token)

    def token_of(self, token_id: int) -> str:
        if token_id < 0:
            raise IndexError(token_id)
        return self.tokens[token_id]


def finalize_vocabulary(snapshot: Iterable[str]) -> GlobalTokenTable:
    """
    Freeze a vocabulary snapshot into a token table.

    Tokens are lower-case ASCII by the time they get here, so sorting by code
    point is the same as a byte-wise sort and the IDs are identical across runs.
    """
    tokens = tuple(sorted(set(snapshot)))
    if not tokens:
        raise EmptyVocabularyError("no valid tokens found in the corpus")
    return GlobalTokenTable(tokens=tokens)
