from __future__ import annotations

import pytest

from wikibook_index_core.errors import EmptyVocabularyError
from wikibook_index_core.vocabulary import GlobalTokenTable, finalize_vocabulary


def test_finalize_sorts_and_assigns_dense_ids() -> None:
    table = finalize_vocabulary({"sat", "cat", "dog"})
    assert table.tokens == ("cat", "dog", "sat")
    assert [table.id_of(t) for t in table.tokens] == [0, 1, 2]
    assert table.token_of(2) == "sat"
    assert "dog" in table
    assert table.get_id("bird") is None


def test_finalize_is_deterministic() -> None:
    snapshot = frozenset(f"tok{i}" for i in range(200))
    assert finalize_vocabulary(snapshot) == finalize_vocabulary(list(snapshot)[::-1])


def test_empty_snapshot_is_fatal() -> None:
    with pytest.raises(EmptyVocabularyError):
        finalize_vocabulary(frozenset())


def test_duplicates_are_rejected() -> None:
    with pytest.raises(ValueError):
        GlobalTokenTable(tokens=("a", "a"))
