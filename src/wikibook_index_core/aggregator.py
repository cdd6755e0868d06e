from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from wikibook_index_core.concurrent import ConcurrentSet, ReferenceMap
from wikibook_index_core.log import get_logger
from wikibook_index_core.models import Document
from wikibook_index_core.tokenizer import Lexicon, count_valid_tokens

logger = get_logger(__name__)


@dataclass(frozen=True)
class AggregationReport:
    processed: int
    failed: int
    failed_document_ids: tuple[int, ...] = ()


class VocabularyAggregator:
    """
    Tokenizes documents concurrently, one task per document.

    Each task owns its document exclusively. The only shared writes go through
    the vocabulary set and the reference map, both single-owner structures.
    """

    def __init__(
        self,
        *,
        lexicon: Lexicon,
        vocabulary: ConcurrentSet,
        references: ReferenceMap,
        max_workers: int = 8,
        fail_fast: bool = False,
    ):
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        self._lexicon = lexicon
        self._vocabulary = vocabulary
        self._references = references
        self._max_workers = max_workers
        self._fail_fast = fail_fast

    def process_document(self, document: Document) -> None:
        counts = count_valid_tokens(document.body_text, self._lexicon)
        document.set_token_counts(counts)
        if counts:
            tokens = sorted(counts)
            # Vocabulary entries are never removed, so they are added only once the references are in.
            self._references.add_references(document.document_id, tokens)
            self._vocabulary.add_all(tokens)
        document.status = "indexed"

    def run(self, documents: list[Document]) -> AggregationReport:
        pending = [d for d in documents if not d.is_failed]
        logger.info("Aggregating vocabulary over %d documents (workers=%d)", len(pending), self._max_workers)

        futures: dict[Future, Document] = {}
        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="aggregate") as pool:
            for document in pending:
                futures[pool.submit(self.process_document, document)] = document
            # Barrier: nothing downstream may read the shared structures before every task is done.
            wait(futures)

        failed: list[int] = []
        first_error: BaseException | None = None
        for future, document in futures.items():
            exc = future.exception()
            if exc is None:
                continue
            document.mark_failed(f"tokenization failed: {exc}")
            failed.append(document.document_id)
            logger.warning(
                "Document %d failed during aggregation: %s",
                document.document_id,
                exc,
                extra={"ctx_document_id": document.document_id},
            )
            if first_error is None:
                first_error = exc

        if self._fail_fast and first_error is not None:
            raise first_error

        report = AggregationReport(
            processed=len(pending) - len(failed),
            failed=len(failed),
            failed_document_ids=tuple(sorted(failed)),
        )
        logger.info("Aggregation finished: processed=%d failed=%d", report.processed, report.failed)
        return report
