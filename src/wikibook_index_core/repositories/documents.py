from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass

import psycopg

from wikibook_index_core.models import Document


@dataclass(frozen=True)
class StoredDocument:
    document_id: int
    title: str
    url: str
    path: str | None
    parent_id: int | None
    child_ids: list[int]
    child_count: int
    unique_tokens: int
    norm: float
    status: str


class DocumentRepository:
    def __init__(self, conn: psycopg.Connection):
        self._conn = conn

    def replace_all(self, documents: Iterable[Document]) -> None:
        """
        Replace-all semantics: the table mirrors exactly one indexing run.
        """
        rows = [
            {
                "document_id": d.document_id,
                "title": d.title,
                "url": d.url,
                "path": d.path,
                "abstract": d.abstract,
                "body_text": d.body_text,
                "body_html": d.body_html,
                "parent_id": d.parent_id,
                "child_ids": json.dumps(d.child_ids),
                "child_count": d.child_count,
                "unique_tokens": d.unique_tokens,
                "norm": d.norm,
                "tokens": json.dumps([[t, c] for t, c in d.tokens]),
                "status": d.status,
                "error": d.error,
            }
            for d in documents
        ]
        with self._conn.transaction():
            self._conn.execute("delete from documents")
            with self._conn.cursor() as cur:
                cur.executemany(
                    """
                    insert into documents (
                      document_id, title, url, path,
                      abstract, body_text, body_html,
                      parent_id, child_ids, child_count,
                      unique_tokens, norm, tokens,
                      status, error, updated_at
                    ) values (
                      %(document_id)s, %(title)s, %(url)s, %(path)s,
                      %(abstract)s, %(body_text)s, %(body_html)s,
                      %(parent_id)s, %(child_ids)s::jsonb, %(child_count)s,
                      %(unique_tokens)s, %(norm)s, %(tokens)s::jsonb,
                      %(status)s, %(error)s, now()
                    )
                    """,
                    rows,
                )
        self._conn.commit()

    def get_document(self, document_id: int) -> StoredDocument | None:
        row = self._conn.execute(
            """
            select
              document_id, title, url, path,
              parent_id, child_ids, child_count,
              unique_tokens, norm, status
            from documents
            where document_id=%s
            """,
            (document_id,),
        ).fetchone()
        if not row:
            return None
        return StoredDocument(
            document_id=row[0],
            title=row[1],
            url=row[2],
            path=row[3],
            parent_id=row[4],
            child_ids=list(row[5] or []),
            child_count=row[6],
            unique_tokens=row[7],
            norm=row[8],
            status=row[9],
        )

    def list_children(self, document_id: int) -> list[int]:
        rows = self._conn.execute(
            "select document_id from documents where parent_id=%s order by document_id",
            (document_id,),
        ).fetchall()
        return [r[0] for r in rows]
