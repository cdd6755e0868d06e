from __future__ import annotations

from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

from wikibook_index_core.errors import IndexConsistencyError
from wikibook_index_core.log import get_logger
from wikibook_index_core.models import Document, InvertedIndexEntry
from wikibook_index_core.vocabulary import GlobalTokenTable

logger = get_logger(__name__)


def build_entry(
    token_id: int,
    token: str,
    references: Mapping[str, frozenset[int]],
    documents: Sequence[Document],
) -> InvertedIndexEntry:
    postings: list[tuple[int, int]] = []
    for document_id in sorted(references.get(token, ())):
        document = documents[document_id]
        if document.is_failed:
            continue
        count = document.token_counts.get(token, 0)
        if count <= 0:
            raise IndexConsistencyError(
                f"document {document_id} is referenced by {token!r} but has no occurrences of it"
            )
        postings.append((document_id, count))
    return InvertedIndexEntry(token_id=token_id, token=token, postings=tuple(postings))


def build_inverted_index(
    table: GlobalTokenTable,
    references: Mapping[str, frozenset[int]],
    documents: Sequence[Document],
    *,
    max_workers: int = 8,
) -> list[InvertedIndexEntry]:
    """
    One entry per token ID, in ID order.

    `references` must be a post-barrier snapshot; everything read here is
    read-only so the work fans out over token IDs without coordination.
    """
    logger.info("Building inverted index for %d tokens", len(table))
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="index") as pool:
        entries = list(
            pool.map(
                lambda item: build_entry(item[0], item[1], references, documents),
                table,
            )
        )
    return entries
