from __future__ import annotations

import pytest

from wikibook_index_core.aggregator import VocabularyAggregator
from wikibook_index_core.concurrent import ConcurrentSet, ReferenceMap
from wikibook_index_core.models import Document
from wikibook_index_core.tokenizer import Lexicon


def _docs(bodies: list[str]) -> list[Document]:
    return [Document(document_id=i, title=str(i), url=str(i), body_text=b) for i, b in enumerate(bodies)]


def test_aggregator_fills_counts_vocabulary_and_references(lexicon: Lexicon) -> None:
    docs = _docs(["the cat sat", "cat and dog", "nothing valid here"])
    with ConcurrentSet() as vocab, ReferenceMap() as refs:
        report = VocabularyAggregator(lexicon=lexicon, vocabulary=vocab, references=refs, max_workers=4).run(docs)
        assert vocab.snapshot() == frozenset({"cat", "sat", "dog"})
        assert refs.snapshot() == {
            "cat": frozenset({0, 1}),
            "sat": frozenset({0}),
            "dog": frozenset({1}),
        }

    assert report.processed == 3
    assert report.failed == 0
    assert docs[0].token_counts == {"cat": 1, "sat": 1}
    assert docs[0].tokens == [("cat", 1), ("sat", 1)]
    assert docs[2].unique_tokens == 0
    assert docs[2].norm == 0.0
    assert all(d.status == "indexed" for d in docs)


def test_failed_documents_are_skipped(lexicon: Lexicon) -> None:
    docs = _docs(["cat", "dog"])
    docs[0].mark_failed("bad url")
    with ConcurrentSet() as vocab, ReferenceMap() as refs:
        report = VocabularyAggregator(lexicon=lexicon, vocabulary=vocab, references=refs).run(docs)
        assert vocab.snapshot() == frozenset({"dog"})
    assert report.processed == 1
    assert docs[0].token_counts == {}


class _Exploding(str):
    def encode(self, *args, **kwargs):  # noqa: ANN002, ANN003, ANN201
        raise RuntimeError("boom")


def test_task_failure_is_isolated(lexicon: Lexicon) -> None:
    docs = _docs(["cat", "dog", "sat"])
    docs[1].body_text = _Exploding("dog")
    with ConcurrentSet() as vocab, ReferenceMap() as refs:
        report = VocabularyAggregator(lexicon=lexicon, vocabulary=vocab, references=refs).run(docs)
        assert vocab.snapshot() == frozenset({"cat", "sat"})
    assert report.failed == 1
    assert report.failed_document_ids == (1,)
    assert docs[1].is_failed
    assert "boom" in (docs[1].error or "")


def test_fail_fast_reraises(lexicon: Lexicon) -> None:
    docs = _docs(["cat", "dog"])
    docs[0].body_text = _Exploding("cat")
    with ConcurrentSet() as vocab, ReferenceMap() as refs:
        aggregator = VocabularyAggregator(
            lexicon=lexicon, vocabulary=vocab, references=refs, fail_fast=True
        )
        with pytest.raises(RuntimeError, match="boom"):
            aggregator.run(docs)


def test_max_workers_must_be_positive(lexicon: Lexicon) -> None:
    with ConcurrentSet() as vocab, ReferenceMap() as refs:
        with pytest.raises(ValueError):
            VocabularyAggregator(lexicon=lexicon, vocabulary=vocab, references=refs, max_workers=0)


class _RejectingReferences(ReferenceMap):
    def __init__(self, reject: int):
        super().__init__()
        self._reject = reject

    def add_references(self, document_id, tokens) -> None:  # noqa: ANN001
        if document_id == self._reject:
            raise RuntimeError("reference map unavailable")
        super().add_references(document_id, tokens)


def test_reference_failure_leaves_vocabulary_untouched(lexicon: Lexicon) -> None:
    docs = _docs(["cat", "dog bird"])
    with ConcurrentSet() as vocab, _RejectingReferences(reject=1) as refs:
        report = VocabularyAggregator(lexicon=lexicon, vocabulary=vocab, references=refs).run(docs)
        assert vocab.snapshot() == frozenset({"cat"})
        assert set(refs.snapshot()) == {"cat"}
    assert report.failed_document_ids == (1,)
