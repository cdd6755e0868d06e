from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import psycopg

from wikibook_index_core.errors import PersistenceError
from wikibook_index_core.log import get_logger
from wikibook_index_core.models import Document, DocumentVector, InvertedIndexEntry
from wikibook_index_core.repositories import DocumentRepository, TokenRepository, VectorRepository
from wikibook_index_core.vocabulary import GlobalTokenTable

logger = get_logger(__name__)


class IndexSink(Protocol):
    def write_documents(self, documents: Sequence[Document]) -> None: ...

    def write_token_table(
        self,
        table: GlobalTokenTable,
        inverted_index: Sequence[InvertedIndexEntry],
    ) -> None: ...

    def write_vectors(self, vectors: Sequence[DocumentVector]) -> None: ...


class PostgresIndexSink:
    """Writes each logical batch in its own transaction; database errors become PersistenceError."""

    def __init__(self, conn: psycopg.Connection):
        self._documents = DocumentRepository(conn)
        self._tokens = TokenRepository(conn)
        self._vectors = VectorRepository(conn)

    def write_documents(self, documents: Sequence[Document]) -> None:
        try:
            self._documents.replace_all(documents)
        except psycopg.Error as exc:
            raise PersistenceError("documents", str(exc)) from exc
        logger.info("Persisted %d documents", len(documents))

    def write_token_table(
        self,
        table: GlobalTokenTable,
        inverted_index: Sequence[InvertedIndexEntry],
    ) -> None:
        if len(inverted_index) != len(table):
            raise PersistenceError(
                "token_table",
                f"index has {len(inverted_index)} entries for {len(table)} tokens",
            )
        try:
            self._tokens.replace_all(inverted_index)
        except psycopg.Error as exc:
            raise PersistenceError("token_table", str(exc)) from exc
        logger.info("Persisted %d tokens", len(table))

    def write_vectors(self, vectors: Sequence[DocumentVector]) -> None:
        try:
            self._vectors.replace_all(vectors)
        except psycopg.Error as exc:
            raise PersistenceError("vectors", str(exc)) from exc
        logger.info("Persisted %d document vectors", len(vectors))
