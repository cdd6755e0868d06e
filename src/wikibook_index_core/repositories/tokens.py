from __future__ import annotations

import json
from collections.abc import Iterable

import psycopg

from wikibook_index_core.models import InvertedIndexEntry


class TokenRepository:
    def __init__(self, conn: psycopg.Connection):
        self._conn = conn

    def replace_all(self, entries: Iterable[InvertedIndexEntry]) -> None:
        rows = [
            (
                e.token_id,
                e.token,
                e.document_frequency,
                json.dumps([{"document_id": doc_id, "count": count} for doc_id, count in e.postings]),
            )
            for e in entries
        ]
        with self._conn.transaction():
            self._conn.execute("delete from tokens")
            with self._conn.cursor() as cur:
                cur.executemany(
                    """
                    insert into tokens (token_id, token, document_frequency, postings)
                    values (%s, %s, %s, %s::jsonb)
                    """,
                    rows,
                )
        self._conn.commit()

    def get_token_id(self, token: str) -> int | None:
        row = self._conn.execute("select token_id from tokens where token=%s", (token,)).fetchone()
        return row[0] if row else None

    def get_postings(self, token: str) -> list[tuple[int, int]]:
        row = self._conn.execute("select postings from tokens where token=%s", (token,)).fetchone()
        if not row:
            return []
        return [(p["document_id"], p["count"]) for p in row[0]]

    def list_tokens(self) -> list[str]:
        rows = self._conn.execute("select token from tokens order by token_id").fetchall()
        return [r[0] for r in rows]
