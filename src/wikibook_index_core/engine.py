from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import IntEnum

from wikibook_index_core.aggregator import AggregationReport, VocabularyAggregator
from wikibook_index_core.concurrent import ConcurrentSet, ReferenceMap
from wikibook_index_core.errors import PersistenceError, PhaseError
from wikibook_index_core.hierarchy import DEFAULT_BASE_URL, HierarchyBuilder
from wikibook_index_core.inverted_index import build_inverted_index
from wikibook_index_core.log import get_logger
from wikibook_index_core.models import Document, DocumentVector, InvertedIndexEntry, SourceRow
from wikibook_index_core.sink import IndexSink
from wikibook_index_core.tokenizer import Lexicon
from wikibook_index_core.vectors import build_document_vectors
from wikibook_index_core.vocabulary import GlobalTokenTable, finalize_vocabulary

logger = get_logger(__name__)


class Phase(IntEnum):
    FAILED = -1
    NEW = 0
    INGESTED = 1
    AGGREGATED = 2
    FINALIZED = 3
    BUILT = 4


@dataclass(frozen=True)
class IndexResult:
    documents: list[Document]
    token_table: GlobalTokenTable
    inverted_index: list[InvertedIndexEntry]
    vectors: list[DocumentVector]
    aggregation: AggregationReport

    def vector_for(self, document_id: int) -> DocumentVector | None:
        for v in self.vectors:
            if v.document_id == document_id:
                return v
        return None


@dataclass(frozen=True)
class PersistenceReport:
    written: tuple[str, ...] = ()
    errors: tuple[PersistenceError, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.errors


class IndexingEngine:
    """
    Owns every piece of state for one indexing run.

    Phases run strictly in order: ingest -> aggregate -> finalize -> build.
    Asking for a phase early raises PhaseError, which is how the barrier between
    aggregation and finalization is enforced. Construct one engine per batch and
    drop it after persistence.
    """

    def __init__(
        self,
        lexicon: Lexicon,
        *,
        base_url: str = DEFAULT_BASE_URL,
        max_workers: int = 8,
        fail_fast: bool = False,
    ):
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        self.lexicon = lexicon
        self.base_url = base_url
        self.max_workers = max_workers
        self.fail_fast = fail_fast

        self.documents: list[Document] = []
        self._vocabulary = ConcurrentSet()
        self._references = ReferenceMap()
        self._reference_snapshot: dict[str, frozenset[int]] | None = None
        self._aggregation: AggregationReport | None = None
        self._table: GlobalTokenTable | None = None
        self._result: IndexResult | None = None
        self._phase = Phase.NEW

    @property
    def phase(self) -> Phase:
        return self._phase

    def _require(self, phase: Phase, action: str) -> None:
        if self._phase != phase:
            raise PhaseError(f"cannot {action} in phase {self._phase.name} (expected {phase.name})")

    def ingest(self, rows: Iterable[SourceRow]) -> list[Document]:
        """Create one document per row and link the hierarchy. Rows must be sorted by URL."""
        self._require(Phase.NEW, "ingest")
        builder = HierarchyBuilder(self.documents, base_url=self.base_url)
        for row in rows:
            document = Document.from_row(len(self.documents), row)
            self.documents.append(document)
            builder.add(document)
        failed = sum(1 for d in self.documents if d.is_failed)
        logger.info("Ingested %d documents (%d with malformed URLs)", len(self.documents), failed)
        self._phase = Phase.INGESTED
        return self.documents

    def aggregate(self) -> AggregationReport:
        self._require(Phase.INGESTED, "aggregate")
        aggregator = VocabularyAggregator(
            lexicon=self.lexicon,
            vocabulary=self._vocabulary,
            references=self._references,
            max_workers=self.max_workers,
            fail_fast=self.fail_fast,
        )
        try:
            self._aggregation = aggregator.run(self.documents)
        except Exception:
            self._shutdown_shared()
            self._phase = Phase.FAILED
            raise
        self._phase = Phase.AGGREGATED
        return self._aggregation

    def finalize(self) -> GlobalTokenTable:
        self._require(Phase.AGGREGATED, "finalize the vocabulary")
        snapshot = self._vocabulary.snapshot()
        self._reference_snapshot = self._references.snapshot()
        # No writer may touch the shared structures past this point.
        self._shutdown_shared()
        try:
            self._table = finalize_vocabulary(snapshot)
        except Exception:
            self._phase = Phase.FAILED
            raise
        logger.info("Finalized vocabulary with %d tokens", len(self._table))
        self._phase = Phase.FINALIZED
        return self._table

    def build(self) -> IndexResult:
        self._require(Phase.FINALIZED, "build the index")
        table, references, aggregation = self._table, self._reference_snapshot, self._aggregation
        if table is None or references is None or aggregation is None:
            raise PhaseError("vocabulary has not been finalized")

        # The two views only read frozen state, so they are built side by side.
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="build") as pool:
            index_future = pool.submit(
                build_inverted_index,
                table,
                references,
                self.documents,
                max_workers=self.max_workers,
            )
            vectors_future = pool.submit(
                build_document_vectors,
                self.documents,
                table,
                max_workers=self.max_workers,
            )
            inverted_index = index_future.result()
            vectors = vectors_future.result()

        self._result = IndexResult(
            documents=self.documents,
            token_table=table,
            inverted_index=inverted_index,
            vectors=vectors,
            aggregation=aggregation,
        )
        self._phase = Phase.BUILT
        return self._result

    def run(self, rows: Iterable[SourceRow]) -> IndexResult:
        self.ingest(rows)
        self.aggregate()
        self.finalize()
        return self.build()

    @property
    def result(self) -> IndexResult:
        if self._result is None:
            raise PhaseError("index has not been built yet")
        return self._result

    def persist(self, sink: IndexSink) -> PersistenceReport:
        """
        Hand the three logical batches to the sink.

        A rejected batch is recorded and the remaining batches are still
        attempted; the in-memory result is left intact so persistence can be
        retried with the same engine.
        """
        result = self.result
        steps = (
            ("documents", lambda: sink.write_documents(result.documents)),
            ("token_table", lambda: sink.write_token_table(result.token_table, result.inverted_index)),
            ("vectors", lambda: sink.write_vectors(result.vectors)),
        )
        written: list[str] = []
        errors: list[PersistenceError] = []
        for step, write in steps:
            try:
                write()
            except PersistenceError as exc:
                logger.exception("Persistence step %s failed", step)
                errors.append(exc)
                continue
            written.append(step)
        return PersistenceReport(written=tuple(written), errors=tuple(errors))

    def _shutdown_shared(self) -> None:
        self._vocabulary.close()
        self._references.close()

    def close(self) -> None:
        self._shutdown_shared()

    def __enter__(self) -> IndexingEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
