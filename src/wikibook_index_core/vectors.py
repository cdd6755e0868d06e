from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from wikibook_index_core.log import get_logger
from wikibook_index_core.models import Document, DocumentVector, euclidean_norm
from wikibook_index_core.vocabulary import GlobalTokenTable

logger = get_logger(__name__)


def build_document_vector(document: Document, table: GlobalTokenTable) -> DocumentVector:
    """
    Sparse `{token_id: count}` vector plus Euclidean norm for one document.

    Both the entries and the norm come from the document's filtered token
    counts. Every filtered token is in the table, so the two populations match;
    the membership check only matters for tables built from another snapshot.
    """
    entries: dict[int, int] = {}
    for token, count in document.token_counts.items():
        token_id = table.get_id(token)
        if token_id is not None and count > 0:
            entries[token_id] = count
    return DocumentVector(
        document_id=document.document_id,
        entries=dict(sorted(entries.items())),
        norm=euclidean_norm(document.token_counts.values()),
    )


def build_document_vectors(
    documents: Sequence[Document],
    table: GlobalTokenTable,
    *,
    max_workers: int = 8,
) -> list[DocumentVector]:
    indexed = [d for d in documents if not d.is_failed]
    logger.info("Building vectors for %d documents", len(indexed))
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="vector") as pool:
        return list(pool.map(lambda d: build_document_vector(d, table), indexed))
