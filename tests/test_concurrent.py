from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from wikibook_index_core.concurrent import ConcurrentSet, ReferenceMap
from wikibook_index_core.errors import ConcurrentStructureClosed


def test_add_is_idempotent() -> None:
    with ConcurrentSet() as s:
        s.add("cat")
        s.add("cat")
        s.add_all(["dog", "cat"])
        assert s.snapshot() == frozenset({"cat", "dog"})


def test_concurrent_writers_all_visible_after_barrier() -> None:
    words = [f"w{i}" for i in range(500)]
    with ConcurrentSet() as s:
        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(s.add, words + words))
        assert s.snapshot() == frozenset(words)


def test_snapshot_is_a_copy() -> None:
    with ConcurrentSet() as s:
        s.add("a")
        snap = s.snapshot()
        s.add("b")
        assert snap == frozenset({"a"})


def test_closed_set_rejects_requests() -> None:
    s = ConcurrentSet()
    s.close()
    s.close()
    assert s.closed
    with pytest.raises(ConcurrentStructureClosed):
        s.add("late")


def test_reference_map_records_documents_per_token() -> None:
    with ReferenceMap() as refs:
        with ThreadPoolExecutor(max_workers=8) as pool:
            for doc_id in range(50):
                tokens = ["common", f"only{doc_id}"]
                pool.submit(refs.add_references, doc_id, tokens)
        snap = refs.snapshot()
        assert snap["common"] == frozenset(range(50))
        assert snap["only7"] == frozenset({7})
        assert refs.documents_for("missing") == frozenset()
